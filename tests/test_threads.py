from datetime import datetime, timedelta

from app.schemas.message import MessageRecord
from app.services.threads import build_threads

BASE = datetime(2025, 10, 1, 10, 0, 0)


def make(id, parent_id=None, minutes=0, status="approved"):
    ts = BASE + timedelta(minutes=minutes)
    return MessageRecord(
        id=id, name=f"user{id}", message=f"message {id}", parent_id=parent_id,
        status=status, created_at=ts, updated_at=ts,
    )


def test_replies_attach_to_their_roots_oldest_first():
    roots = [make(2, minutes=10), make(1, minutes=0)]
    replies = [make(12, parent_id=1, minutes=30), make(11, parent_id=1, minutes=20), make(21, parent_id=2, minutes=15)]

    threads = build_threads(roots, replies)

    assert [t.root.id for t in threads] == [2, 1]
    assert [r.id for r in threads[0].replies] == [21]
    assert [r.id for r in threads[1].replies] == [11, 12]


def test_reply_count_matches_replies():
    roots = [make(1), make(2), make(3)]
    replies = [make(10, parent_id=1), make(11, parent_id=1), make(12, parent_id=3)]

    for thread in build_threads(roots, replies):
        assert thread.reply_count == len(thread.replies)
        assert thread.to_dict()["reply_count"] == len(thread.to_dict()["replies"])


def test_roots_without_replies_get_empty_list():
    threads = build_threads([make(1)], [])
    assert threads[0].replies == []
    assert threads[0].reply_count == 0


def test_orphan_replies_are_dropped():
    threads = build_threads([make(1)], [make(50, parent_id=999), make(51, parent_id=1)])
    assert [r.id for r in threads[0].replies] == [51]
    all_ids = {t.root.id for t in threads} | {r.id for t in threads for r in t.replies}
    assert 50 not in all_ids


def test_same_input_same_output():
    roots = [make(2, minutes=5), make(1)]
    replies = [make(3, parent_id=1, minutes=9), make(4, parent_id=1, minutes=1)]
    first = [t.to_dict() for t in build_threads(roots, replies)]
    second = [t.to_dict() for t in build_threads(roots, replies)]
    assert first == second
    # input order untouched
    assert [r.id for r in replies] == [3, 4]


def test_ties_on_created_at_break_by_id():
    replies = [make(8, parent_id=1), make(7, parent_id=1)]
    threads = build_threads([make(1)], replies)
    assert [r.id for r in threads[0].replies] == [7, 8]
