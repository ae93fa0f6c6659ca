"""
EventStore - Vault 이벤트 저널

Vault가 발생시킨 이벤트를 append-only로 저장.
event_id UNIQUE 제약으로 중복 저장 방지.
IEventSink Protocol 준수.
"""

import json
import logging
from datetime import datetime
from typing import Any, Sequence

import aiosqlite

from adapters.db.sqlite_adapter import SQLiteAdapter
from core.domain.events import VaultEvent

logger = logging.getLogger(__name__)


_SELECT = """
    SELECT seq, event_id, event_type, ts,
           vault, caller, receiver, owner,
           assets, shares, fee, payload_json
    FROM vault_events
"""


class EventStore:
    """이벤트 저장소

    Args:
        db: SQLiteAdapter 인스턴스 (init_schema 완료 상태)

    사용 예시:
    ```python
    async with SQLiteAdapter(db_path) as db:
        await init_schema(db)
        event_store = EventStore(db)

        vault = VaultLedger(..., event_sink=event_store)
        await vault.deposit(100, "alice", caller="alice")

        events = await event_store.get_since(0)
    ```
    """

    def __init__(self, db: SQLiteAdapter):
        self.db = db

    async def append(self, event: VaultEvent) -> None:
        """이벤트 저장 후 event.seq 할당

        같은 event_id가 이미 있으면 무시하고 기존 seq를 할당.

        Raises:
            aiosqlite.Error: DB 오류 (호출한 Vault 연산이 롤백됨)
        """
        params = (
            event.event_id,
            event.event_type,
            event.ts.isoformat(),
            event.vault,
            event.caller,
            event.receiver,
            event.owner,
            str(event.assets),
            str(event.shares),
            str(event.fee),
            json.dumps(event.payload or {}, ensure_ascii=False),
        )

        try:
            async with self.db.transaction() as conn:
                await conn.execute(
                    """
                    INSERT OR IGNORE INTO vault_events (
                        event_id, event_type, ts,
                        vault, caller, receiver, owner,
                        assets, shares, fee, payload_json
                    ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                    """,
                    params,
                )
            row = await self.db.fetchone(
                "SELECT seq FROM vault_events WHERE event_id = ?",
                (event.event_id,),
            )
        except aiosqlite.Error as e:
            logger.error(
                "이벤트 저장 실패",
                extra={"event_id": event.event_id, "error": str(e)},
            )
            raise

        event.seq = row["seq"] if row else None
        logger.debug(
            "이벤트 저장 완료",
            extra={"event_id": event.event_id, "seq": event.seq},
        )

    async def get_by_id(self, event_id: str) -> VaultEvent | None:
        events = await self._select("WHERE event_id = ?", (event_id,))
        return events[0] if events else None

    async def get_since(self, last_seq: int, limit: int = 1000) -> list[VaultEvent]:
        """특정 seq 이후 이벤트 조회 (seq 오름차순)

        Args:
            last_seq: 마지막으로 처리한 seq
            limit: 최대 조회 개수
        """
        return await self._select(
            "WHERE seq > ? ORDER BY seq ASC LIMIT ?",
            (last_seq, limit),
        )

    async def get_by_account(self, account: str, limit: int = 100) -> list[VaultEvent]:
        """계정이 caller / receiver / owner로 관여한 이벤트 조회"""
        return await self._select(
            "WHERE caller = ? OR receiver = ? OR owner = ? ORDER BY seq ASC LIMIT ?",
            (account, account, account, limit),
        )

    async def get_by_type(self, event_type: str, limit: int = 100) -> list[VaultEvent]:
        return await self._select(
            "WHERE event_type = ? ORDER BY seq ASC LIMIT ?",
            (event_type, limit),
        )

    async def count_all(self) -> int:
        row = await self.db.fetchone("SELECT COUNT(*) AS event_count FROM vault_events")
        return row["event_count"] if row else 0

    async def get_last_seq(self) -> int:
        row = await self.db.fetchone("SELECT MAX(seq) AS max_seq FROM vault_events")
        return row["max_seq"] if row and row["max_seq"] else 0

    async def _select(self, clause: str, params: Sequence[Any]) -> list[VaultEvent]:
        rows = await self.db.fetchall(f"{_SELECT} {clause}", params)
        return [self._row_to_event(row) for row in rows]

    @staticmethod
    def _row_to_event(row: aiosqlite.Row) -> VaultEvent:
        """DB 행을 VaultEvent로 변환 (수량 TEXT → int)"""
        payload = json.loads(row["payload_json"]) if row["payload_json"] else {}

        return VaultEvent(
            event_id=row["event_id"],
            event_type=row["event_type"],
            ts=datetime.fromisoformat(row["ts"]),
            vault=row["vault"],
            caller=row["caller"],
            receiver=row["receiver"],
            owner=row["owner"],
            assets=int(row["assets"]),
            shares=int(row["shares"]),
            fee=int(row["fee"]),
            payload=payload or None,
            seq=row["seq"],
        )
