"""
스토리지 모듈

Vault 이벤트 저널 제공
"""

from core.storage.event_store import EventStore

__all__ = [
    "EventStore",
]
