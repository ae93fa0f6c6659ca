"""
pytest 공통 fixture 정의

설정 파일 / Vault / Mock 협력자 fixture
"""

import tempfile
from pathlib import Path

import pytest

from adapters.mock import InMemoryAssetStore, InMemoryEventSink, InMemoryShareRegistry
from core.vault import VaultLedger


ASSET = "USDC"
ADMIN = "treasury"
HOLDING = "vault"


@pytest.fixture
def temp_dir() -> Path:
    """OS 독립적인 임시 디렉토리 생성"""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def temp_vault_config(temp_dir: Path) -> Path:
    """테스트용 vault.yaml 파일 생성"""
    content = """# 테스트용 vault.yaml
vault:
  underlying_asset: "USDC"
  holding_account: "vault-01"
  entry_fee_basis_points: 100
  admin: "treasury"
  entry_fee_recipient: "fee-collector"

storage:
  events_db: "data/test_events.db"

log_level: debug
"""
    path = temp_dir / "vault.yaml"
    path.write_text(content, encoding="utf-8")
    return path


@pytest.fixture
def temp_vault_config_minimal(temp_dir: Path) -> Path:
    """필수 항목만 있는 vault.yaml"""
    content = """vault:
  underlying_asset: "DAI"
  admin: "ops"
"""
    path = temp_dir / "vault_minimal.yaml"
    path.write_text(content, encoding="utf-8")
    return path


# -------------------------------------------------------------------------
# Vault 픽스처
# -------------------------------------------------------------------------

@pytest.fixture
def asset_store() -> InMemoryAssetStore:
    """기초 자산 저장소 (alice, bob, carol 각 1,000 보유 및 Vault 승인)"""
    store = InMemoryAssetStore(ASSET, holding_account=HOLDING)
    for account in ("alice", "bob", "carol"):
        store.set_balance(account, 1_000)
        store.approve(account, HOLDING, 1_000)
    return store


@pytest.fixture
def share_registry() -> InMemoryShareRegistry:
    """지분 원장"""
    return InMemoryShareRegistry()


@pytest.fixture
def event_sink() -> InMemoryEventSink:
    """이벤트 수신자"""
    return InMemoryEventSink()


@pytest.fixture
def make_vault(asset_store, share_registry, event_sink):
    """수수료율을 지정해 Vault 생성"""

    def _make(fee_bps: int = 100) -> VaultLedger:
        return VaultLedger(
            underlying_asset=ASSET,
            entry_fee_basis_points=fee_bps,
            caller=ADMIN,
            asset_store=asset_store,
            share_registry=share_registry,
            event_sink=event_sink,
        )

    return _make


@pytest.fixture
def vault(make_vault) -> VaultLedger:
    """수수료 1% Vault"""
    return make_vault(100)


@pytest.fixture
def fee_free_vault(make_vault) -> VaultLedger:
    """수수료 0% Vault"""
    return make_vault(0)
