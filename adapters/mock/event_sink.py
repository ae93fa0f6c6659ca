"""
Mock 이벤트 수신자

발생한 VaultEvent를 메모리에 기록하여 테스트에서 검증 가능.
IEventSink Protocol 준수.
"""

from core.domain.events import VaultEvent


class InMemoryEventSink:
    """Mock 이벤트 수신자

    사용 예시:
    ```python
    sink = InMemoryEventSink()
    vault = VaultLedger(..., event_sink=sink)

    await vault.deposit(100, "alice", caller="alice")
    assert sink.events[-1].event_type == "Deposit"
    ```
    """

    def __init__(self, should_fail: bool = False):
        """
        Args:
            should_fail: True면 모든 append 실패 (롤백 시나리오 테스트용)
        """
        self.should_fail = should_fail
        self.events: list[VaultEvent] = []

    async def append(self, event: VaultEvent) -> None:
        if self.should_fail:
            raise RuntimeError("Mock event sink failure")
        event.seq = len(self.events) + 1
        self.events.append(event)

    def of_type(self, event_type: str) -> list[VaultEvent]:
        """타입별 이벤트 목록"""
        return [e for e in self.events if e.event_type == event_type]

    def clear(self) -> None:
        """기록 초기화"""
        self.events.clear()
