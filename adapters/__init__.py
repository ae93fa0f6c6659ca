"""
어댑터 레이어

Vault가 의존하는 외부 협력자(자산 저장소, 지분 원장, 이벤트 저널)와의 연동 담당.
Protocol 기반 인터페이스로 Mock 교체 가능.
"""

from adapters.interfaces import (
    IAssetStore,
    IShareRegistry,
    IEventSink,
)

__all__ = [
    "IAssetStore",
    "IShareRegistry",
    "IEventSink",
]
