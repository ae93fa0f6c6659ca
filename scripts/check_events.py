#!/usr/bin/env python3
"""Vault 이벤트 저널 확인 스크립트"""

import argparse
import asyncio
import logging
import sys
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from adapters.db.sqlite_adapter import SQLiteAdapter
from core.constants import Paths
from core.logging import setup_logging
from core.storage.event_store import EventStore


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Vault 이벤트 저널 조회")
    parser.add_argument("--db", type=Path, default=Paths.EVENTS_DB, help="이벤트 DB 경로")
    parser.add_argument("--account", help="해당 계정이 관여한 이벤트만 출력")
    parser.add_argument("--limit", type=int, default=20, help="최대 출력 개수")
    return parser.parse_args()


async def main() -> int:
    args = parse_args()
    setup_logging("check_events", console_level=logging.WARNING)

    if not args.db.exists():
        print(f"DB 파일이 없습니다: {args.db}")
        return 1

    async with SQLiteAdapter(args.db, readonly=True) as db:
        es = EventStore(db)
        total = await es.count_all()
        last_seq = await es.get_last_seq()

        print(f"DB Path: {args.db}")
        print(f"Total events: {total}")
        print(f"Last seq: {last_seq}")

        if args.account:
            events = await es.get_by_account(args.account, limit=args.limit)
        else:
            events = await es.get_since(max(last_seq - args.limit, 0), limit=args.limit)

        print(f"\nEvents ({len(events)}):")
        for e in events:
            print(
                f"  - seq: {e.seq}, type: {e.event_type}, caller: {e.caller}, "
                f"receiver: {e.receiver}, owner: {e.owner}, "
                f"assets: {e.assets}, shares: {e.shares}, fee: {e.fee}"
            )

    return 0


if __name__ == "__main__":
    sys.exit(asyncio.run(main()))
