"""
어댑터 인터페이스 정의

Protocol 기반으로 정의하여 의존성 주입 및 Mock 교체 가능.
Vault는 자산 토큰과 지분 원장을 직접 구현하지 않고 이 Protocol로만 사용함.

모든 수량은 int. 모든 호출은 실패할 수 있으며,
실패는 core.domain.errors의 예외로 전달됨.
"""

from typing import AsyncContextManager, Protocol, runtime_checkable

from core.domain.events import VaultEvent


@runtime_checkable
class IAssetStore(Protocol):
    """기초 자산 저장소 인터페이스

    Vault의 보유 계정(holding_account) 관점에서 본 fungible 토큰.
    transfer_from의 spender는 항상 holding_account.
    """

    @property
    def asset_id(self) -> str:
        """자산 식별자"""
        ...

    @property
    def holding_account(self) -> str:
        """Vault 보유 계정"""
        ...

    async def balance_of(self, account: str) -> int:
        """계정 잔고 조회"""
        ...

    async def transfer_from(self, source: str, destination: str, amount: int) -> None:
        """승인 한도를 사용해 source → destination 이동

        Raises:
            InsufficientAllowance: source가 holding_account에 승인한 한도 부족
            InsufficientBalance: source 잔고 부족
        """
        ...

    async def transfer(self, destination: str, amount: int) -> None:
        """holding_account → destination 이동

        Raises:
            InsufficientBalance: holding_account 잔고 부족
        """
        ...

    def transaction(self) -> AsyncContextManager[None]:
        """트랜잭션 컨텍스트 매니저

        성공 시 커밋, 예외 시 진입 시점 상태로 롤백 후 예외 재발생.
        """
        ...


@runtime_checkable
class IShareRegistry(Protocol):
    """지분 원장 인터페이스

    mint/burn은 Vault만 호출.
    """

    async def mint(self, to: str, amount: int) -> None:
        """지분 발행"""
        ...

    async def burn(self, source: str, amount: int) -> None:
        """지분 소각

        Raises:
            InsufficientShares: source 지분 부족
        """
        ...

    async def total_supply(self) -> int:
        """총 발행량"""
        ...

    async def balance_of(self, account: str) -> int:
        """계정 지분 잔고"""
        ...

    async def allowance(self, owner: str, spender: str) -> int:
        """owner가 spender에게 승인한 지분 한도"""
        ...

    async def spend_allowance(self, owner: str, spender: str, amount: int) -> None:
        """승인 한도 차감 (제3자 소각 시)"""
        ...

    def transaction(self) -> AsyncContextManager[None]:
        """트랜잭션 컨텍스트 매니저 (IAssetStore.transaction과 동일 규약)"""
        ...


@runtime_checkable
class IEventSink(Protocol):
    """이벤트 수신자 인터페이스

    append는 연산 트랜잭션의 마지막 단계. 실패 시 연산 전체가 롤백됨.
    """

    async def append(self, event: VaultEvent) -> None:
        """이벤트 기록"""
        ...
