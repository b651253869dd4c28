#!/usr/bin/env python3
"""
导出已审核留言为 JSON (供静态托管使用)

使用方法:
    python scripts/export_messages.py [--output public/data/messages.json]
"""
import sys
import os
import json
import argparse
import logging
from pathlib import Path

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from app.core.config import get_settings
from app.core.errors import StoreError
from app.core.logger import setup_logging
from app.schemas.message import PublicThread
from app.services.threads import build_threads
from app.storage import MessageStore, RootFilter, build_store

logger = logging.getLogger("app.scripts.export_messages")

DEFAULT_OUTPUT = Path("public/data/messages.json")


def collect_threads(store: MessageStore) -> list:
    roots = store.list_roots(RootFilter(status="approved"))
    replies = store.list_replies([root.id for root in roots], status="approved")
    return [
        PublicThread.model_validate(thread.to_dict()).model_dump(mode="json")
        for thread in build_threads(roots, replies)
    ]


def export_messages(store: MessageStore, output: Path) -> int:
    """Write approved threads to ``output``; returns the number of threads.

    On a store failure an existing export is left untouched and the error is
    re-raised. An empty list is written only when no export exists yet.
    """
    try:
        threads = collect_threads(store)
    except StoreError as e:
        logger.error("Export failed, store error: %s", e.detail)
        if not output.exists():
            output.parent.mkdir(parents=True, exist_ok=True)
            output.write_text("[]", encoding="utf-8")
            logger.warning("No previous export at %s, wrote an empty list", output)
        raise

    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_text(json.dumps(threads, ensure_ascii=False, indent=2), encoding="utf-8")
    logger.info("Exported %d threads to %s", len(threads), output)
    return len(threads)


def main(argv=None):
    parser = argparse.ArgumentParser(description="Export approved guestbook messages as JSON")
    parser.add_argument("--output", type=Path, default=DEFAULT_OUTPUT)
    args = parser.parse_args(argv)

    settings = get_settings()
    setup_logging(settings)
    store = build_store(settings)
    try:
        export_messages(store, args.output)
    except StoreError:
        sys.exit(1)
    finally:
        store.close()


if __name__ == "__main__":
    main()
