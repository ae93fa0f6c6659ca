"""
VaultLedger - 지분 기반 수탁 Vault 회계 코어

사용자가 기초 자산을 입금하면 비례 지분을 발행하고,
지분을 상환하면 자산 풀에 대한 비례 청구분을 지급.
입금 경로(deposit/mint)에서만 진입 수수료(bp)를 부과하여 수령자에게 전달.

총 보유 자산과 총 지분은 별도로 저장하지 않고
Asset Store / Share Registry에서 매번 조회.

모든 연산은 인스턴스 단위 asyncio.Lock 안에서
환산 비율 조회 → 자산 이동 → 지분 발행/소각 → 이벤트 기록을
하나의 트랜잭션으로 실행. 중간 단계 실패 시 전체 롤백.
"""

import asyncio
import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from adapters.interfaces import IAssetStore, IEventSink, IShareRegistry
from core.config.loader import VaultSettings
from core.domain.errors import (
    InsufficientShares,
    InsufficientVaultLiquidity,
    Unauthorized,
    VaultError,
    ZeroAmount,
    ZeroSharesMinted,
)
from core.domain.events import VaultEvent, VaultEventTypes
from core.types import Rounding, VaultOperation
from core.vault.math import (
    fee_on_total,
    gross_for_net,
    to_assets,
    to_shares,
    validate_fee_rate,
)

logger = logging.getLogger(__name__)


class VaultLedger:
    """Vault 회계 코어

    Args:
        underlying_asset: 기초 자산 식별자 (생성 후 불변)
        entry_fee_basis_points: 진입 수수료율 (0~10000 bp)
        caller: 생성자 (admin이 되며, 수수료 수령자 기본값)
        asset_store: 기초 자산 저장소
        share_registry: 지분 원장
        entry_fee_recipient: 수수료 수령자 (None이면 caller)
        event_sink: 이벤트 수신자 (None이면 로그만 남김)

    Raises:
        InvalidFeeRate: 수수료율이 0~10000 범위를 벗어난 경우
        ValueError: asset_store의 자산이 underlying_asset과 다른 경우

    사용 예시:
    ```python
    vault = VaultLedger("USDC", 100, "admin", asset_store, share_registry)

    shares = await vault.deposit(100, receiver="alice", caller="alice")
    assets = await vault.redeem(shares, receiver="alice", owner="alice", caller="alice")
    ```
    """

    def __init__(
        self,
        underlying_asset: str,
        entry_fee_basis_points: int,
        caller: str,
        asset_store: IAssetStore,
        share_registry: IShareRegistry,
        entry_fee_recipient: str | None = None,
        event_sink: IEventSink | None = None,
    ):
        validate_fee_rate(entry_fee_basis_points)
        if asset_store.asset_id != underlying_asset:
            raise ValueError(
                f"Asset store holds {asset_store.asset_id}, "
                f"vault expects {underlying_asset}"
            )

        self._underlying_asset = underlying_asset
        self._entry_fee_basis_points = entry_fee_basis_points
        self._entry_fee_recipient = entry_fee_recipient or caller
        self._admin = caller

        self.asset_store = asset_store
        self.share_registry = share_registry
        self.event_sink = event_sink

        self._lock = asyncio.Lock()

        logger.info(
            "Vault 생성",
            extra={
                "underlying_asset": underlying_asset,
                "entry_fee_basis_points": entry_fee_basis_points,
                "entry_fee_recipient": self._entry_fee_recipient,
                "holding_account": asset_store.holding_account,
            },
        )

    @classmethod
    def from_settings(
        cls,
        settings: VaultSettings,
        asset_store: IAssetStore,
        share_registry: IShareRegistry,
        event_sink: IEventSink | None = None,
    ) -> "VaultLedger":
        """설정(vault.yaml)으로 Vault 생성

        Raises:
            ValueError: 설정의 holding_account가 asset_store와 다른 경우
        """
        if settings.holding_account != asset_store.holding_account:
            raise ValueError(
                f"Asset store holds funds in {asset_store.holding_account}, "
                f"settings expect {settings.holding_account}"
            )
        return cls(
            underlying_asset=settings.underlying_asset,
            entry_fee_basis_points=settings.entry_fee_basis_points,
            caller=settings.admin,
            asset_store=asset_store,
            share_registry=share_registry,
            entry_fee_recipient=settings.entry_fee_recipient,
            event_sink=event_sink,
        )

    # -------------------------------------------------------------------------
    # 설정 조회
    # -------------------------------------------------------------------------

    @property
    def underlying_asset(self) -> str:
        return self._underlying_asset

    @property
    def entry_fee_basis_points(self) -> int:
        return self._entry_fee_basis_points

    @property
    def entry_fee_recipient(self) -> str:
        return self._entry_fee_recipient

    @property
    def admin(self) -> str:
        return self._admin

    @property
    def holding_account(self) -> str:
        return self.asset_store.holding_account

    # -------------------------------------------------------------------------
    # 상태 조회 (live)
    # -------------------------------------------------------------------------

    async def total_assets(self) -> int:
        """Vault 보유 자산 (holding_account 잔고)"""
        return await self.asset_store.balance_of(self.holding_account)

    async def total_supply(self) -> int:
        """총 지분 발행량"""
        return await self.share_registry.total_supply()

    async def balance_of(self, account: str) -> int:
        """계정 지분 잔고"""
        return await self.share_registry.balance_of(account)

    # -------------------------------------------------------------------------
    # 환산 / 미리보기 (상태 변경 없음)
    # -------------------------------------------------------------------------

    async def convert_to_shares(self, assets: int) -> int:
        """자산 → 지분 (floor, 수수료 미적용)"""
        async with self._lock:
            return await self._to_shares(assets, Rounding.FLOOR)

    async def convert_to_assets(self, shares: int) -> int:
        """지분 → 자산 (floor)"""
        async with self._lock:
            return await self._to_assets(shares, Rounding.FLOOR)

    async def preview_deposit(self, assets: int) -> int:
        """deposit(assets) 시 발행될 지분"""
        async with self._lock:
            _, shares = await self._quote_deposit(assets)
            return shares

    async def preview_mint(self, shares: int) -> int:
        """mint(shares) 시 호출자에게서 가져갈 총 자산 (수수료 포함)"""
        async with self._lock:
            gross, _ = await self._quote_mint(shares)
            return gross

    async def preview_withdraw(self, assets: int) -> int:
        """withdraw(assets) 시 소각될 지분 (ceil)"""
        async with self._lock:
            return await self._to_shares(assets, Rounding.CEIL)

    async def preview_redeem(self, shares: int) -> int:
        """redeem(shares) 시 지급될 자산 (floor)"""
        async with self._lock:
            return await self._to_assets(shares, Rounding.FLOOR)

    async def max_withdraw(self, owner: str) -> int:
        """owner가 지금 출금 가능한 최대 자산"""
        async with self._lock:
            balance = await self.share_registry.balance_of(owner)
            claim = await self._to_assets(balance, Rounding.FLOOR)
            return min(claim, await self.total_assets())

    async def max_redeem(self, owner: str) -> int:
        """owner가 지금 상환 가능한 최대 지분"""
        return await self.share_registry.balance_of(owner)

    # -------------------------------------------------------------------------
    # 상태 변경 연산
    # -------------------------------------------------------------------------

    async def deposit(self, assets: int, receiver: str, caller: str) -> int:
        """자산을 입금하고 지분 발행

        Args:
            assets: 호출자가 제공하는 총 자산 (수수료 포함)
            receiver: 지분 수령자
            caller: 호출자 (자산 출금 계정)

        Returns:
            발행된 지분

        Raises:
            ZeroAmount: assets == 0
            ZeroSharesMinted: 수수료 차감 후 발행 지분이 0
            InsufficientAllowance / InsufficientBalance: Asset Store 이동 실패
        """
        async with self._atomic(VaultOperation.DEPOSIT, caller=caller, amount=assets):
            self._require_positive(assets, VaultOperation.DEPOSIT)

            fee, shares = await self._quote_deposit(assets)
            if shares == 0:
                raise ZeroSharesMinted(assets)

            await self._pull_assets(caller, assets, fee)
            await self.share_registry.mint(receiver, shares)

            await self._emit(
                VaultEvent.deposit(
                    vault=self._underlying_asset,
                    caller=caller,
                    receiver=receiver,
                    assets=assets,
                    shares=shares,
                    fee=fee,
                )
            )

        logger.info(
            "Deposit 완료",
            extra={
                "caller": caller,
                "receiver": receiver,
                "assets": assets,
                "fee": fee,
                "shares": shares,
            },
        )
        return shares

    async def mint(self, shares: int, receiver: str, caller: str) -> int:
        """원하는 지분 수량을 지정하여 발행

        Args:
            shares: 발행할 지분
            receiver: 지분 수령자
            caller: 호출자 (자산 출금 계정)

        Returns:
            호출자에게서 가져간 총 자산 (수수료 포함)

        Raises:
            ZeroAmount: shares == 0
            FeeRateBlocksMint: 수수료율 10000 bp
            InsufficientAllowance / InsufficientBalance: Asset Store 이동 실패
        """
        async with self._atomic(VaultOperation.MINT, caller=caller, amount=shares):
            self._require_positive(shares, VaultOperation.MINT)

            gross, fee = await self._quote_mint(shares)

            await self._pull_assets(caller, gross, fee)
            await self.share_registry.mint(receiver, shares)

            await self._emit(
                VaultEvent.deposit(
                    vault=self._underlying_asset,
                    caller=caller,
                    receiver=receiver,
                    assets=gross,
                    shares=shares,
                    fee=fee,
                )
            )

        logger.info(
            "Mint 완료",
            extra={
                "caller": caller,
                "receiver": receiver,
                "assets": gross,
                "fee": fee,
                "shares": shares,
            },
        )
        return gross

    async def withdraw(self, assets: int, receiver: str, owner: str, caller: str) -> int:
        """정확한 자산 수량을 출금 (수수료 없음)

        Returns:
            소각된 지분 (ceil)

        Raises (검사 순서대로):
            ZeroAmount: assets == 0
            Unauthorized: caller가 owner가 아니고 승인 한도가 없거나 소각량보다 작음
            InsufficientVaultLiquidity: Vault 보유 자산 < assets
            InsufficientShares: owner 지분 부족
        """
        async with self._atomic(VaultOperation.WITHDRAW, caller=caller, amount=assets):
            self._require_positive(assets, VaultOperation.WITHDRAW)
            await self._require_spender(owner, caller)

            available = await self.total_assets()
            if available < assets:
                raise InsufficientVaultLiquidity(available, assets)

            shares = await self._to_shares(assets, Rounding.CEIL)
            await self._authorize(owner, caller, shares)
            await self._burn(owner, caller, shares)
            await self.asset_store.transfer(receiver, assets)

            await self._emit(
                VaultEvent.withdraw(
                    vault=self._underlying_asset,
                    caller=caller,
                    receiver=receiver,
                    owner=owner,
                    assets=assets,
                    shares=shares,
                )
            )

        logger.info(
            "Withdraw 완료",
            extra={
                "caller": caller,
                "receiver": receiver,
                "owner": owner,
                "assets": assets,
                "shares": shares,
            },
        )
        return shares

    async def redeem(self, shares: int, receiver: str, owner: str, caller: str) -> int:
        """정확한 지분 수량을 상환 (수수료 없음)

        Returns:
            지급된 자산 (floor)

        Raises (검사 순서대로):
            ZeroAmount: shares == 0
            Unauthorized: caller가 owner가 아니고 승인 한도 부족
            InsufficientShares: owner 지분 부족
            InsufficientVaultLiquidity: Vault 보유 자산 < 지급액
        """
        async with self._atomic(VaultOperation.REDEEM, caller=caller, amount=shares):
            self._require_positive(shares, VaultOperation.REDEEM)
            await self._authorize(owner, caller, shares)

            assets = await self._to_assets(shares, Rounding.FLOOR)
            available = await self.total_assets()
            if available < assets:
                raise InsufficientVaultLiquidity(available, assets)

            await self._burn(owner, caller, shares)
            await self.asset_store.transfer(receiver, assets)

            await self._emit(
                VaultEvent.withdraw(
                    vault=self._underlying_asset,
                    caller=caller,
                    receiver=receiver,
                    owner=owner,
                    assets=assets,
                    shares=shares,
                )
            )

        logger.info(
            "Redeem 완료",
            extra={
                "caller": caller,
                "receiver": receiver,
                "owner": owner,
                "assets": assets,
                "shares": shares,
            },
        )
        return assets

    # -------------------------------------------------------------------------
    # 관리자 설정
    # -------------------------------------------------------------------------

    async def set_fee_config(
        self,
        caller: str,
        entry_fee_basis_points: int | None = None,
        entry_fee_recipient: str | None = None,
    ) -> None:
        """수수료율/수령자 변경 (admin 전용)

        Raises:
            Unauthorized: caller != admin
            InvalidFeeRate: 수수료율 범위 초과
        """
        async with self._atomic(VaultOperation.SET_FEE_CONFIG, caller=caller, amount=None):
            if caller != self._admin:
                raise Unauthorized(caller, self._underlying_asset, "configure fees of vault")

            new_bps = self._entry_fee_basis_points
            if entry_fee_basis_points is not None:
                new_bps = validate_fee_rate(entry_fee_basis_points)
            new_recipient = entry_fee_recipient or self._entry_fee_recipient

            await self._emit(
                VaultEvent.create(
                    event_type=VaultEventTypes.FEE_CONFIG_CHANGED,
                    vault=self._underlying_asset,
                    caller=caller,
                    payload={
                        "old_basis_points": self._entry_fee_basis_points,
                        "new_basis_points": new_bps,
                        "old_recipient": self._entry_fee_recipient,
                        "new_recipient": new_recipient,
                    },
                )
            )

            self._entry_fee_basis_points = new_bps
            self._entry_fee_recipient = new_recipient

        logger.info(
            "수수료 설정 변경",
            extra={"entry_fee_basis_points": new_bps, "entry_fee_recipient": new_recipient},
        )

    # -------------------------------------------------------------------------
    # 내부
    # -------------------------------------------------------------------------

    @asynccontextmanager
    async def _atomic(
        self,
        operation: VaultOperation,
        caller: str,
        amount: int | None,
    ) -> AsyncIterator[None]:
        """직렬화 + 트랜잭션 경계

        Lock 획득 후 Asset Store / Share Registry 트랜잭션을 열고,
        예외 발생 시 두 저장소 모두 진입 시점 상태로 롤백.
        """
        async with self._lock:
            try:
                async with self.asset_store.transaction(), self.share_registry.transaction():
                    yield
            except asyncio.CancelledError:
                logger.warning(
                    f"{operation.value} 취소 (롤백)",
                    extra={"operation": operation.value, "caller": caller, "amount": amount},
                )
                raise
            except VaultError as e:
                logger.warning(
                    f"{operation.value} 거부: {e.message}",
                    extra={
                        "operation": operation.value,
                        "caller": caller,
                        "amount": amount,
                        "error": type(e).__name__,
                    },
                )
                raise
            except Exception as e:
                logger.error(
                    f"{operation.value} 실패 (롤백): {e}",
                    extra={
                        "operation": operation.value,
                        "caller": caller,
                        "amount": amount,
                        "error": type(e).__name__,
                    },
                )
                raise

    @staticmethod
    def _require_positive(amount: int, operation: VaultOperation) -> None:
        if amount <= 0:
            raise ZeroAmount(operation.value)

    async def _ratio(self) -> tuple[int, int]:
        """(총 보유 자산, 총 지분) - 연산 전 비율"""
        total_assets = await self.total_assets()
        total_supply = await self.share_registry.total_supply()
        return total_assets, total_supply

    async def _to_shares(self, assets: int, rounding: Rounding) -> int:
        total_assets, total_supply = await self._ratio()
        return to_shares(assets, total_assets, total_supply, rounding)

    async def _to_assets(self, shares: int, rounding: Rounding) -> int:
        total_assets, total_supply = await self._ratio()
        return to_assets(shares, total_assets, total_supply, rounding)

    async def _quote_deposit(self, assets: int) -> tuple[int, int]:
        """(수수료, 발행 지분) - 입금 반영 전 비율 기준"""
        fee = fee_on_total(assets, self._entry_fee_basis_points)
        shares = await self._to_shares(assets - fee, Rounding.FLOOR)
        return fee, shares

    async def _quote_mint(self, shares: int) -> tuple[int, int]:
        """(총액, 수수료) - 필요 순자산은 ceil"""
        net = await self._to_assets(shares, Rounding.CEIL)
        gross = gross_for_net(net, self._entry_fee_basis_points)
        return gross, gross - net

    async def _pull_assets(self, caller: str, gross: int, fee: int) -> None:
        """총액을 holding_account로 가져온 뒤 수수료를 수령자에게 전달"""
        await self.asset_store.transfer_from(caller, self.holding_account, gross)
        if fee > 0:
            await self.asset_store.transfer(self._entry_fee_recipient, fee)

    async def _require_spender(self, owner: str, caller: str) -> None:
        """caller가 owner 본인이거나 승인 한도를 가진 spender인지 확인"""
        if caller != owner and await self.share_registry.allowance(owner, caller) == 0:
            raise Unauthorized(caller, owner)

    async def _authorize(self, owner: str, caller: str, shares: int) -> None:
        """shares 소각 권한과 owner 잔고 확인 (상태 변경 없음)"""
        if caller != owner:
            allowance = await self.share_registry.allowance(owner, caller)
            if allowance < shares:
                raise Unauthorized(caller, owner)

        balance = await self.share_registry.balance_of(owner)
        if balance < shares:
            raise InsufficientShares(owner, balance, shares)

    async def _burn(self, owner: str, caller: str, shares: int) -> None:
        """_authorize 통과 후 승인 한도 차감 및 소각"""
        if caller != owner:
            await self.share_registry.spend_allowance(owner, caller, shares)
        await self.share_registry.burn(owner, shares)

    async def _emit(self, event: VaultEvent) -> None:
        if self.event_sink is not None:
            await self.event_sink.append(event)
        logger.debug(
            "이벤트 발생",
            extra={"event_type": event.event_type, "event_id": event.event_id},
        )
