"""
VaultLedger 생성 / deposit / mint 테스트

입금 경로의 수수료 계산, 반올림 방향, 이벤트 검증
"""

import pytest

from adapters.mock import InMemoryAssetStore, InMemoryShareRegistry
from core.config.loader import VaultSettings
from core.domain.errors import (
    FeeRateBlocksMint,
    InsufficientAllowance,
    InsufficientBalance,
    InvalidFeeRate,
    VaultInsolvent,
    ZeroAmount,
    ZeroSharesMinted,
)
from core.domain.events import VaultEventTypes
from core.vault import VaultLedger


class TestConstruction:
    """Vault 생성 테스트"""

    def test_fee_recipient_defaults_to_caller(self, asset_store, share_registry) -> None:
        """수수료 수령자 기본값은 생성자"""
        vault = VaultLedger("USDC", 100, "deployer", asset_store, share_registry)

        assert vault.underlying_asset == "USDC"
        assert vault.entry_fee_basis_points == 100
        assert vault.entry_fee_recipient == "deployer"
        assert vault.admin == "deployer"

    def test_explicit_fee_recipient(self, asset_store, share_registry) -> None:
        """수수료 수령자 지정"""
        vault = VaultLedger(
            "USDC", 100, "deployer", asset_store, share_registry,
            entry_fee_recipient="fees",
        )

        assert vault.entry_fee_recipient == "fees"
        assert vault.admin == "deployer"

    @pytest.mark.parametrize("bps", [10_001, -1])
    def test_invalid_fee_rate(self, asset_store, share_registry, bps: int) -> None:
        """100% 초과 / 음수 수수료 거부"""
        with pytest.raises(InvalidFeeRate):
            VaultLedger("USDC", bps, "deployer", asset_store, share_registry)

    def test_full_fee_rate_allowed(self, asset_store, share_registry) -> None:
        """10000 bp는 생성 가능"""
        vault = VaultLedger("USDC", 10_000, "deployer", asset_store, share_registry)

        assert vault.entry_fee_basis_points == 10_000

    def test_asset_mismatch(self, share_registry) -> None:
        """자산 저장소와 기초 자산 불일치"""
        store = InMemoryAssetStore("DAI")

        with pytest.raises(ValueError, match="DAI"):
            VaultLedger("USDC", 0, "deployer", store, share_registry)

    @pytest.mark.asyncio
    async def test_starts_empty(self, vault: VaultLedger) -> None:
        """생성 직후 보유 자산 / 총 지분 0"""
        assert await vault.total_assets() == 0
        assert await vault.total_supply() == 0

    def test_from_settings(self) -> None:
        """설정으로 생성"""
        settings = VaultSettings(
            underlying_asset="DAI",
            entry_fee_basis_points=25,
            admin="ops",
            entry_fee_recipient="fees",
            holding_account="vault-dai",
        )
        store = InMemoryAssetStore("DAI", holding_account="vault-dai")

        vault = VaultLedger.from_settings(settings, store, InMemoryShareRegistry())

        assert vault.underlying_asset == "DAI"
        assert vault.entry_fee_basis_points == 25
        assert vault.admin == "ops"
        assert vault.entry_fee_recipient == "fees"
        assert vault.holding_account == "vault-dai"

    def test_from_settings_holding_account_mismatch(self) -> None:
        """설정의 holding_account와 자산 저장소 불일치"""
        settings = VaultSettings(
            underlying_asset="USDC",
            entry_fee_basis_points=0,
            admin="ops",
            entry_fee_recipient="ops",
            holding_account="vault-01",
        )
        store = InMemoryAssetStore("USDC", holding_account="vault")

        with pytest.raises(ValueError, match="vault-01"):
            VaultLedger.from_settings(settings, store, InMemoryShareRegistry())


class TestDeposit:
    """deposit 테스트"""

    @pytest.mark.asyncio
    async def test_first_deposit_with_fee(self, vault, asset_store, share_registry, event_sink) -> None:
        """수수료 1%, 빈 Vault에 100 입금 → 수수료 1, 지분 99"""
        shares = await vault.deposit(100, receiver="alice", caller="alice")

        assert shares == 99
        assert await share_registry.balance_of("alice") == 99
        assert await vault.total_supply() == 99
        assert await vault.total_assets() == 99
        assert await asset_store.balance_of("alice") == 900
        assert await asset_store.balance_of("treasury") == 1

        event = event_sink.events[-1]
        assert event.event_type == VaultEventTypes.DEPOSIT
        assert event.caller == "alice"
        assert event.receiver == "alice"
        assert event.owner is None
        assert event.assets == 100
        assert event.shares == 99
        assert event.fee == 1

    @pytest.mark.asyncio
    async def test_deposit_for_other_receiver(self, fee_free_vault, share_registry, asset_store) -> None:
        """입금자와 수령자가 다른 경우"""
        await fee_free_vault.deposit(250, receiver="bob", caller="alice")

        assert await share_registry.balance_of("bob") == 250
        assert await share_registry.balance_of("alice") == 0
        assert await asset_store.balance_of("alice") == 750

    @pytest.mark.asyncio
    async def test_fee_truncates(self, make_vault, asset_store) -> None:
        """수수료 2.5%: 333 → 수수료 floor(8.325) = 8"""
        vault = make_vault(250)

        shares = await vault.deposit(333, receiver="alice", caller="alice")

        assert await asset_store.balance_of("treasury") == 8
        assert shares == 325

    @pytest.mark.asyncio
    async def test_fee_goes_to_configured_recipient(self, asset_store, share_registry) -> None:
        """지정된 수령자에게 수수료 전달"""
        vault = VaultLedger(
            "USDC", 100, "deployer", asset_store, share_registry,
            entry_fee_recipient="fees",
        )

        await vault.deposit(500, receiver="alice", caller="alice")

        assert await asset_store.balance_of("fees") == 5
        assert await asset_store.balance_of("deployer") == 0

    @pytest.mark.asyncio
    async def test_small_deposit_has_no_fee(self, vault, asset_store) -> None:
        """99 * 1% = 0.99 → 수수료 0, 수수료 이체 생략"""
        shares = await vault.deposit(99, receiver="alice", caller="alice")

        assert shares == 99
        assert await asset_store.balance_of("treasury") == 0

    @pytest.mark.asyncio
    async def test_second_depositor_after_dilution(self, vault, asset_store) -> None:
        """직접 자산 주입으로 비율 변경 후 입금자는 자산당 지분을 덜 받음"""
        first = await vault.deposit(100, receiver="alice", caller="alice")
        asset_store.donate("bob", 99)  # 보유 198 / 지분 99

        second = await vault.deposit(100, receiver="carol", caller="carol")

        # 수수료 1 → 순자산 99 → floor(99 * 99 / 198) = 49
        assert first == 99
        assert second == 49
        assert second < first

    @pytest.mark.asyncio
    async def test_uses_pre_deposit_ratio(self, fee_free_vault, asset_store) -> None:
        """환산은 이번 입금이 반영되기 전의 비율 기준"""
        await fee_free_vault.deposit(100, receiver="alice", caller="alice")
        asset_store.donate("bob", 100)  # 보유 200 / 지분 100

        shares = await fee_free_vault.deposit(300, receiver="carol", caller="carol")

        assert shares == 150
        assert await fee_free_vault.total_assets() == 500
        assert await fee_free_vault.total_supply() == 250

    @pytest.mark.asyncio
    async def test_zero_amount(self, vault, snapshot) -> None:
        """0 입금 거부"""
        before = snapshot()

        with pytest.raises(ZeroAmount):
            await vault.deposit(0, receiver="alice", caller="alice")

        assert snapshot() == before

    @pytest.mark.asyncio
    async def test_insufficient_allowance(self, vault, asset_store, snapshot) -> None:
        """승인 한도 부족은 Asset Store 에러 그대로 전파"""
        asset_store.approve("alice", "vault", 50)
        before = snapshot()

        with pytest.raises(InsufficientAllowance) as exc_info:
            await vault.deposit(100, receiver="alice", caller="alice")

        assert exc_info.value.allowance == 50
        assert exc_info.value.required == 100
        assert snapshot() == before

    @pytest.mark.asyncio
    async def test_insufficient_balance(self, vault, asset_store, snapshot) -> None:
        """잔고 부족"""
        asset_store.approve("dave", "vault", 100)
        before = snapshot()

        with pytest.raises(InsufficientBalance):
            await vault.deposit(100, receiver="dave", caller="dave")

        assert snapshot() == before

    @pytest.mark.asyncio
    async def test_full_fee_rejected(self, make_vault, snapshot) -> None:
        """100% 수수료 입금은 지분 0 → 거부"""
        vault = make_vault(10_000)
        before = snapshot()

        with pytest.raises(ZeroSharesMinted):
            await vault.deposit(100, receiver="alice", caller="alice")

        assert snapshot() == before

    @pytest.mark.asyncio
    async def test_dust_deposit_into_expensive_pool(self, fee_free_vault, asset_store, snapshot) -> None:
        """지분 1개 가치가 10인 풀에 5 입금 → 지분 0 → 거부"""
        await fee_free_vault.deposit(100, receiver="alice", caller="alice")
        asset_store.donate("bob", 900)
        before = snapshot()

        with pytest.raises(ZeroSharesMinted):
            await fee_free_vault.deposit(5, receiver="carol", caller="carol")

        assert snapshot() == before

    @pytest.mark.asyncio
    async def test_insolvent_vault(self, fee_free_vault, share_registry) -> None:
        """지분이 있는데 보유 자산이 0이면 입금 불가"""
        await share_registry.mint("ghost", 10)

        with pytest.raises(VaultInsolvent):
            await fee_free_vault.deposit(100, receiver="alice", caller="alice")


class TestMint:
    """mint 테스트"""

    @pytest.mark.asyncio
    async def test_mint_with_fee(self, vault, asset_store, share_registry, event_sink) -> None:
        """수수료 1%로 50 지분 발행 → 총액 ceil(50 / 0.99) = 51, 수수료 1"""
        gross = await vault.mint(50, receiver="alice", caller="alice")

        assert gross == 51
        assert await share_registry.balance_of("alice") == 50
        assert await asset_store.balance_of("alice") == 949
        assert await asset_store.balance_of("treasury") == 1
        assert await vault.total_assets() == 50

        event = event_sink.events[-1]
        assert event.event_type == VaultEventTypes.DEPOSIT
        assert event.assets == 51
        assert event.shares == 50
        assert event.fee == 1

    @pytest.mark.asyncio
    async def test_mint_at_ratio(self, fee_free_vault, asset_store) -> None:
        """보유 200 / 지분 100에서 10 지분 → 20 자산"""
        await fee_free_vault.deposit(100, receiver="alice", caller="alice")
        asset_store.donate("bob", 100)

        gross = await fee_free_vault.mint(10, receiver="carol", caller="carol")

        assert gross == 20
        assert await asset_store.balance_of("carol") == 980

    @pytest.mark.asyncio
    async def test_mint_rounds_required_assets_up(self, fee_free_vault, asset_store) -> None:
        """보유 201 / 지분 100에서 3 지분 → ceil(6.03) = 7"""
        await fee_free_vault.deposit(100, receiver="alice", caller="alice")
        asset_store.donate("bob", 101)

        gross = await fee_free_vault.mint(3, receiver="carol", caller="carol")

        assert gross == 7

    @pytest.mark.asyncio
    async def test_fee_rate_blocks_mint(self, make_vault, snapshot) -> None:
        """100% 수수료에서는 mint 불가"""
        vault = make_vault(10_000)
        before = snapshot()

        with pytest.raises(FeeRateBlocksMint):
            await vault.mint(10, receiver="alice", caller="alice")

        assert snapshot() == before

    @pytest.mark.asyncio
    async def test_fee_rate_blocks_mint_is_invalid_fee_rate(self, make_vault) -> None:
        """FeeRateBlocksMint는 InvalidFeeRate 계열"""
        vault = make_vault(10_000)

        with pytest.raises(InvalidFeeRate):
            await vault.mint(10, receiver="alice", caller="alice")

    @pytest.mark.asyncio
    async def test_zero_amount(self, vault) -> None:
        """0 지분 발행 거부"""
        with pytest.raises(ZeroAmount):
            await vault.mint(0, receiver="alice", caller="alice")

    @pytest.mark.asyncio
    async def test_insufficient_allowance(self, vault, asset_store, snapshot) -> None:
        """총액이 승인 한도를 넘음"""
        asset_store.approve("alice", "vault", 50)
        before = snapshot()

        with pytest.raises(InsufficientAllowance):
            await vault.mint(50, receiver="alice", caller="alice")

        assert snapshot() == before


class TestPreviews:
    """환산 / 미리보기 테스트"""

    @pytest.mark.asyncio
    async def test_preview_deposit_matches_deposit(self, vault, snapshot) -> None:
        """preview_deposit는 상태 변경 없이 deposit 결과와 동일"""
        before = snapshot()
        preview = await vault.preview_deposit(100)
        assert snapshot() == before

        shares = await vault.deposit(100, receiver="alice", caller="alice")

        assert preview == shares == 99

    @pytest.mark.asyncio
    async def test_preview_mint_matches_mint(self, vault) -> None:
        """preview_mint == mint 총액"""
        await vault.deposit(100, receiver="alice", caller="alice")

        preview = await vault.preview_mint(30)
        gross = await vault.mint(30, receiver="bob", caller="bob")

        assert preview == gross

    @pytest.mark.asyncio
    async def test_convert_bootstrap(self, vault) -> None:
        """빈 Vault는 1:1"""
        assert await vault.convert_to_shares(123) == 123
        assert await vault.convert_to_assets(123) == 123

    @pytest.mark.asyncio
    async def test_convert_ignores_fee(self, fee_free_vault, asset_store) -> None:
        """convert_*는 수수료 없이 현재 비율만 사용"""
        await fee_free_vault.deposit(100, receiver="alice", caller="alice")
        asset_store.donate("bob", 50)  # 보유 150 / 지분 100

        assert await fee_free_vault.convert_to_shares(30) == 20
        assert await fee_free_vault.convert_to_assets(20) == 30
        assert await fee_free_vault.convert_to_assets(7) == 10  # floor(10.5)
