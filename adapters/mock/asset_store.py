"""
Mock 자산 저장소

테스트용 메모리 내 fungible 토큰.
IAssetStore Protocol 준수.
"""

from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from typing import AsyncIterator

from core.constants import Defaults
from core.domain.errors import InsufficientAllowance, InsufficientBalance


@dataclass
class AssetLedgerState:
    """Mock 상태 (메모리 내 저장)"""

    # 잔고 (account -> amount)
    balances: dict[str, int] = field(default_factory=dict)

    # 승인 한도 ((owner, spender) -> amount)
    allowances: dict[tuple[str, str], int] = field(default_factory=dict)

    # 시뮬레이션 옵션 (method 이름 -> 다음 호출 시 발생시킬 예외)
    fail_next: dict[str, Exception] = field(default_factory=dict)


class InMemoryAssetStore:
    """Mock 자산 저장소

    IAssetStore Protocol 구현.
    holding_account가 transfer_from의 spender이자 transfer의 출금 계정.

    사용 예시:
    ```python
    store = InMemoryAssetStore("USDC", holding_account="vault")

    # 초기 잔고와 승인 설정
    store.set_balance("alice", 1_000)
    store.approve("alice", "vault", 1_000)

    # 다음 transfer 실패 시뮬레이션
    store.set_fail_next("transfer", RuntimeError("node down"))
    ```
    """

    def __init__(
        self,
        asset_id: str,
        holding_account: str = Defaults.HOLDING_ACCOUNT,
        state: AssetLedgerState | None = None,
    ):
        self._asset_id = asset_id
        self._holding_account = holding_account
        self.state = state or AssetLedgerState()

    @property
    def asset_id(self) -> str:
        return self._asset_id

    @property
    def holding_account(self) -> str:
        return self._holding_account

    # -------------------------------------------------------------------------
    # 상태 조작 메서드 (테스트용)
    # -------------------------------------------------------------------------

    def set_balance(self, account: str, amount: int) -> None:
        """잔고 설정"""
        self.state.balances[account] = amount

    def approve(self, owner: str, spender: str, amount: int) -> None:
        """승인 한도 설정"""
        self.state.allowances[(owner, spender)] = amount

    def donate(self, source: str, amount: int) -> None:
        """Vault를 거치지 않고 holding_account로 직접 이동 (비율 변경용)"""
        self._move(source, self._holding_account, amount)

    def set_fail_next(self, method: str, error: Exception) -> None:
        """다음 호출 실패 설정 (transfer_from / transfer)"""
        self.state.fail_next[method] = error

    def get_allowance(self, owner: str, spender: str) -> int:
        """승인 한도 조회"""
        return self.state.allowances.get((owner, spender), 0)

    # -------------------------------------------------------------------------
    # IAssetStore
    # -------------------------------------------------------------------------

    async def balance_of(self, account: str) -> int:
        return self.state.balances.get(account, 0)

    async def transfer_from(self, source: str, destination: str, amount: int) -> None:
        self._raise_if_failing("transfer_from")

        spender = self._holding_account
        allowance = self.get_allowance(source, spender)
        if allowance < amount:
            raise InsufficientAllowance(source, spender, allowance, amount)

        self._move(source, destination, amount)
        self.state.allowances[(source, spender)] = allowance - amount

    async def transfer(self, destination: str, amount: int) -> None:
        self._raise_if_failing("transfer")
        self._move(self._holding_account, destination, amount)

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[None]:
        """성공 시 유지, 예외 시 진입 시점 잔고/한도로 복원 (취소 포함)"""
        balances = dict(self.state.balances)
        allowances = dict(self.state.allowances)
        try:
            yield
        except BaseException:
            self.state.balances = balances
            self.state.allowances = allowances
            raise

    # -------------------------------------------------------------------------
    # 내부
    # -------------------------------------------------------------------------

    def _move(self, source: str, destination: str, amount: int) -> None:
        balance = self.state.balances.get(source, 0)
        if balance < amount:
            raise InsufficientBalance(source, balance, amount)

        self.state.balances[source] = balance - amount
        self.state.balances[destination] = self.state.balances.get(destination, 0) + amount

    def _raise_if_failing(self, method: str) -> None:
        error = self.state.fail_next.pop(method, None)
        if error is not None:
            raise error
