"""
Mock 어댑터

테스트용 메모리 내 구현체 제공.
Protocol 준수하여 실제 구현체와 교체 가능.
"""

from adapters.mock.asset_store import InMemoryAssetStore
from adapters.mock.event_sink import InMemoryEventSink
from adapters.mock.share_registry import InMemoryShareRegistry

__all__ = [
    "InMemoryAssetStore",
    "InMemoryEventSink",
    "InMemoryShareRegistry",
]
