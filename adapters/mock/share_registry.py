"""
Mock 지분 원장

테스트용 메모리 내 지분 잔고/총 발행량.
IShareRegistry Protocol 준수.
"""

from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from typing import AsyncIterator

from core.domain.errors import InsufficientShares


@dataclass
class ShareLedgerState:
    """Mock 상태 (메모리 내 저장)"""

    balances: dict[str, int] = field(default_factory=dict)
    allowances: dict[tuple[str, str], int] = field(default_factory=dict)
    total_supply: int = 0

    # 시뮬레이션 옵션 (method 이름 -> 다음 호출 시 발생시킬 예외)
    fail_next: dict[str, Exception] = field(default_factory=dict)


class InMemoryShareRegistry:
    """Mock 지분 원장

    IShareRegistry Protocol 구현.

    사용 예시:
    ```python
    registry = InMemoryShareRegistry()
    registry.approve("alice", "bob", 50)

    # 다음 mint 실패 시뮬레이션
    registry.set_fail_next("mint", RuntimeError("registry offline"))
    ```
    """

    def __init__(self, state: ShareLedgerState | None = None):
        self.state = state or ShareLedgerState()

    # -------------------------------------------------------------------------
    # 상태 조작 메서드 (테스트용)
    # -------------------------------------------------------------------------

    def approve(self, owner: str, spender: str, amount: int) -> None:
        """지분 승인 한도 설정"""
        self.state.allowances[(owner, spender)] = amount

    def set_fail_next(self, method: str, error: Exception) -> None:
        """다음 호출 실패 설정 (mint / burn)"""
        self.state.fail_next[method] = error

    # -------------------------------------------------------------------------
    # IShareRegistry
    # -------------------------------------------------------------------------

    async def mint(self, to: str, amount: int) -> None:
        self._raise_if_failing("mint")
        self.state.balances[to] = self.state.balances.get(to, 0) + amount
        self.state.total_supply += amount

    async def burn(self, source: str, amount: int) -> None:
        self._raise_if_failing("burn")
        balance = self.state.balances.get(source, 0)
        if balance < amount:
            raise InsufficientShares(source, balance, amount)
        self.state.balances[source] = balance - amount
        self.state.total_supply -= amount

    async def total_supply(self) -> int:
        return self.state.total_supply

    async def balance_of(self, account: str) -> int:
        return self.state.balances.get(account, 0)

    async def allowance(self, owner: str, spender: str) -> int:
        return self.state.allowances.get((owner, spender), 0)

    async def spend_allowance(self, owner: str, spender: str, amount: int) -> None:
        current = self.state.allowances.get((owner, spender), 0)
        self.state.allowances[(owner, spender)] = max(current - amount, 0)

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[None]:
        """성공 시 유지, 예외 시 진입 시점 상태로 복원 (취소 포함)"""
        balances = dict(self.state.balances)
        allowances = dict(self.state.allowances)
        total_supply = self.state.total_supply
        try:
            yield
        except BaseException:
            self.state.balances = balances
            self.state.allowances = allowances
            self.state.total_supply = total_supply
            raise

    def _raise_if_failing(self, method: str) -> None:
        error = self.state.fail_next.pop(method, None)
        if error is not None:
            raise error
