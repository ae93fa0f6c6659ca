"""
Event 도메인 모델

Vault의 모든 상태 변경은 VaultEvent로 기록됨.
이벤트의 수량은 요청값이 아닌 실제로 이동/발행된 정수 수량.
"""

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any
from uuid import uuid4


class VaultEventTypes:
    """Event Type 상수"""

    DEPOSIT: str = "Deposit"  # deposit / mint 공통
    WITHDRAW: str = "Withdraw"  # withdraw / redeem 공통
    FEE_CONFIG_CHANGED: str = "FeeConfigChanged"


@dataclass
class VaultEvent:
    """Vault 이벤트

    Deposit: (caller, receiver, assets, shares)
    Withdraw: (caller, receiver, owner, assets, shares)
    FeeConfigChanged: caller와 payload(basis_points, recipient)만 사용
    """

    event_id: str
    event_type: str
    ts: datetime
    vault: str
    caller: str
    receiver: str | None
    owner: str | None
    assets: int
    shares: int
    fee: int = 0
    payload: dict[str, Any] | None = None
    seq: int | None = None  # EventStore 저장 시 할당되는 시퀀스 번호

    @staticmethod
    def deposit(
        vault: str,
        caller: str,
        receiver: str,
        assets: int,
        shares: int,
        fee: int,
    ) -> "VaultEvent":
        """Deposit 이벤트 생성 (assets는 호출자에게서 가져온 총액)"""
        return VaultEvent.create(
            event_type=VaultEventTypes.DEPOSIT,
            vault=vault,
            caller=caller,
            receiver=receiver,
            owner=None,
            assets=assets,
            shares=shares,
            fee=fee,
        )

    @staticmethod
    def withdraw(
        vault: str,
        caller: str,
        receiver: str,
        owner: str,
        assets: int,
        shares: int,
    ) -> "VaultEvent":
        """Withdraw 이벤트 생성"""
        return VaultEvent.create(
            event_type=VaultEventTypes.WITHDRAW,
            vault=vault,
            caller=caller,
            receiver=receiver,
            owner=owner,
            assets=assets,
            shares=shares,
        )

    @staticmethod
    def create(
        event_type: str,
        vault: str,
        caller: str,
        receiver: str | None = None,
        owner: str | None = None,
        assets: int = 0,
        shares: int = 0,
        fee: int = 0,
        payload: dict[str, Any] | None = None,
    ) -> "VaultEvent":
        """새 이벤트 생성

        Args:
            event_type: 이벤트 타입 (VaultEventTypes)
            vault: Vault 식별자 (기초 자산 ID)
            caller: 연산 호출자
            receiver: 지분/자산 수령자
            owner: 지분 소각 대상 (Withdraw 전용)
            assets: 이동한 자산 수량
            shares: 발행/소각된 지분 수량
            fee: 수수료 (asset 단위)
            payload: 부가 데이터

        Returns:
            새 VaultEvent 인스턴스
        """
        return VaultEvent(
            event_id=str(uuid4()),
            event_type=event_type,
            ts=datetime.now(timezone.utc),
            vault=vault,
            caller=caller,
            receiver=receiver,
            owner=owner,
            assets=assets,
            shares=shares,
            fee=fee,
            payload=payload,
        )

    def to_dict(self) -> dict[str, Any]:
        """딕셔너리로 변환 (직렬화용)"""
        return {
            "event_id": self.event_id,
            "event_type": self.event_type,
            "ts": self.ts.isoformat(),
            "vault": self.vault,
            "caller": self.caller,
            "receiver": self.receiver,
            "owner": self.owner,
            "assets": self.assets,
            "shares": self.shares,
            "fee": self.fee,
            "payload": self.payload or {},
        }

    @staticmethod
    def from_dict(data: dict[str, Any]) -> "VaultEvent":
        """딕셔너리에서 생성 (역직렬화용)"""
        ts = data["ts"]
        if isinstance(ts, str):
            ts = datetime.fromisoformat(ts)

        return VaultEvent(
            event_id=data["event_id"],
            event_type=data["event_type"],
            ts=ts,
            vault=data["vault"],
            caller=data["caller"],
            receiver=data.get("receiver"),
            owner=data.get("owner"),
            assets=int(data.get("assets", 0)),
            shares=int(data.get("shares", 0)),
            fee=int(data.get("fee", 0)),
            payload=data.get("payload") or None,
            seq=data.get("seq"),
        )
