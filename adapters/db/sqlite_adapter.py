"""
SQLite 어댑터

Vault 이벤트 저널용 SQLite 연결 관리.
쓰기 연결은 WAL 모드로 열어 check_events 스크립트가 동시에 읽을 수 있음.

주의: SQLite alias로 time, count 사용 금지 (예약어)
"""

import logging
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Any, AsyncIterator, Sequence

import aiosqlite

logger = logging.getLogger(__name__)


BUSY_TIMEOUT_MS = 30_000

# 수량 컬럼은 TEXT (64비트 정수 범위를 넘는 토큰 수량 보존)
SCHEMA_STATEMENTS: tuple[str, ...] = (
    """
    CREATE TABLE IF NOT EXISTS vault_events (
        seq          INTEGER PRIMARY KEY AUTOINCREMENT,
        event_id     TEXT NOT NULL UNIQUE,
        event_type   TEXT NOT NULL,
        ts           TEXT NOT NULL,

        vault        TEXT NOT NULL,
        caller       TEXT NOT NULL,
        receiver     TEXT,
        owner        TEXT,

        assets       TEXT NOT NULL DEFAULT '0',
        shares       TEXT NOT NULL DEFAULT '0',
        fee          TEXT NOT NULL DEFAULT '0',

        payload_json TEXT NOT NULL DEFAULT '{}',
        created_at   TEXT NOT NULL DEFAULT (datetime('now'))
    )
    """,
    "CREATE INDEX IF NOT EXISTS ix_vault_events_type ON vault_events(event_type)",
    "CREATE INDEX IF NOT EXISTS ix_vault_events_receiver ON vault_events(receiver)",
    "CREATE INDEX IF NOT EXISTS ix_vault_events_owner ON vault_events(owner)",
)


async def create_connection(
    db_path: Path | str,
    readonly: bool = False,
) -> aiosqlite.Connection:
    """SQLite 연결 생성

    행은 aiosqlite.Row (컬럼 이름 / 인덱스 모두로 접근 가능).

    Args:
        db_path: DB 파일 경로
        readonly: 읽기 전용 여부 (WAL 전환 생략)

    Returns:
        aiosqlite 연결 객체
    """
    path = Path(db_path)

    if readonly:
        conn = await aiosqlite.connect(f"file:{path}?mode=ro", uri=True)
    else:
        path.parent.mkdir(parents=True, exist_ok=True)
        conn = await aiosqlite.connect(str(path))
        await conn.execute("PRAGMA journal_mode=WAL")

    conn.row_factory = aiosqlite.Row
    await conn.execute(f"PRAGMA busy_timeout={BUSY_TIMEOUT_MS}")

    logger.info(
        "SQLite 연결 생성",
        extra={"db_path": str(path), "readonly": readonly},
    )

    return conn


class SQLiteAdapter:
    """SQLite 어댑터

    Args:
        db_path: DB 파일 경로
        readonly: 읽기 전용 여부 (조회 스크립트용)

    사용 예시:
    ```python
    async with SQLiteAdapter(Paths.EVENTS_DB) as db:
        await init_schema(db)
        event_store = EventStore(db)
    ```
    """

    def __init__(self, db_path: Path | str, readonly: bool = False):
        self.db_path = Path(db_path)
        self.readonly = readonly
        self._conn: aiosqlite.Connection | None = None

    @property
    def is_connected(self) -> bool:
        return self._conn is not None

    @property
    def conn(self) -> aiosqlite.Connection:
        """열린 연결 (미연결이면 RuntimeError)"""
        if self._conn is None:
            raise RuntimeError("Not connected to database")
        return self._conn

    async def connect(self) -> None:
        if self._conn is None:
            self._conn = await create_connection(self.db_path, self.readonly)

    async def close(self) -> None:
        if self._conn is None:
            return
        await self._conn.close()
        self._conn = None
        logger.info("SQLite 연결 종료", extra={"db_path": str(self.db_path)})

    async def execute(
        self,
        sql: str,
        parameters: Sequence[Any] = (),
    ) -> aiosqlite.Cursor:
        return await self.conn.execute(sql, parameters)

    async def fetchone(
        self,
        sql: str,
        parameters: Sequence[Any] = (),
    ) -> aiosqlite.Row | None:
        async with self.conn.execute(sql, parameters) as cursor:
            return await cursor.fetchone()

    async def fetchall(
        self,
        sql: str,
        parameters: Sequence[Any] = (),
    ) -> list[aiosqlite.Row]:
        async with self.conn.execute(sql, parameters) as cursor:
            return list(await cursor.fetchall())

    async def commit(self) -> None:
        await self.conn.commit()

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[aiosqlite.Connection]:
        """성공 시 커밋, 예외 / 취소 시 롤백"""
        conn = self.conn
        try:
            yield conn
        except BaseException:
            await conn.rollback()
            raise
        await conn.commit()

    async def table_exists(self, table_name: str) -> bool:
        row = await self.fetchone(
            "SELECT name FROM sqlite_master WHERE type='table' AND name=?",
            (table_name,),
        )
        return row is not None

    async def __aenter__(self) -> "SQLiteAdapter":
        await self.connect()
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.close()


async def init_schema(adapter: SQLiteAdapter) -> None:
    """vault_events 테이블 / 인덱스 생성 (멱등)"""
    async with adapter.transaction() as conn:
        for statement in SCHEMA_STATEMENTS:
            await conn.execute(statement)

    logger.info("스키마 초기화 완료", extra={"db_path": str(adapter.db_path)})
