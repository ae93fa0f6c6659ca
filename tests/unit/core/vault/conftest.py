"""
Vault 테스트 픽스처

상태 스냅샷 비교용 헬퍼 제공.
"""

from typing import Any, Callable

import pytest

from adapters.mock import InMemoryAssetStore, InMemoryEventSink, InMemoryShareRegistry


@pytest.fixture
def snapshot(
    asset_store: InMemoryAssetStore,
    share_registry: InMemoryShareRegistry,
    event_sink: InMemoryEventSink,
) -> Callable[[], dict[str, Any]]:
    """자산/지분/승인/이벤트 전체 상태 스냅샷"""

    def _snapshot() -> dict[str, Any]:
        return {
            "asset_balances": dict(asset_store.state.balances),
            "asset_allowances": dict(asset_store.state.allowances),
            "share_balances": dict(share_registry.state.balances),
            "share_allowances": dict(share_registry.state.allowances),
            "total_supply": share_registry.state.total_supply,
            "event_count": len(event_sink.events),
        }

    return _snapshot
