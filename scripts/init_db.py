#!/usr/bin/env python3
"""
初始化留言表 (可选写入示例数据)

使用方法:
    python scripts/init_db.py            # 只建表
    python scripts/init_db.py --seed     # 建表并写入示例留言
    python scripts/init_db.py --reset --seed   # SQL 后端: 先删表再重建
"""
import sys
import os
import argparse
import logging

# 添加项目根目录到路径
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from app.core.config import Settings, get_settings
from app.core.logger import setup_logging
from app.schemas.message import NewMessage
from app.storage import MessageStore, SQLMessageStore, build_store

logger = logging.getLogger("app.scripts.init_db")

SAMPLE_MESSAGES = [
    NewMessage(name="Admin", email="admin@example.com", message="Welcome to the guestbook!",
               status="approved", is_admin_reply=True),
    NewMessage(name="Test User", email="test@example.com", message="This is a test message.",
               status="approved"),
]


def init_db(store: MessageStore, settings: Settings, seed: bool = False, reset: bool = False) -> int:
    """Create the schema; returns the number of sample messages written."""
    if reset:
        if not isinstance(store, SQLMessageStore):
            raise SystemExit("--reset is only supported for the sql backend")
        logger.info("Dropping messages table")
        store.drop_schema()

    store.ensure_schema()
    logger.info("Messages table ready (backend=%s)", settings.STORE_BACKEND)

    if not seed:
        return 0
    for sample in SAMPLE_MESSAGES:
        store.insert(sample)
    logger.info("Inserted %d sample messages", len(SAMPLE_MESSAGES))
    return len(SAMPLE_MESSAGES)


def main(argv=None):
    parser = argparse.ArgumentParser(description="Initialize the guestbook message store")
    parser.add_argument("--seed", action="store_true", help="insert sample messages")
    parser.add_argument("--reset", action="store_true", help="drop the table first (sql backend)")
    args = parser.parse_args(argv)

    settings = get_settings()
    setup_logging(settings)
    store = build_store(settings)
    try:
        init_db(store, settings, seed=args.seed, reset=args.reset)
    finally:
        store.close()


if __name__ == "__main__":
    main()
