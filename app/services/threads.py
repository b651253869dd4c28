"""
留言分组: 主留言 + 回复 -> 留言串
"""
from dataclasses import dataclass, field
from typing import Dict, Iterable, List

from app.schemas.message import MessageRecord


@dataclass
class Thread:
    root: MessageRecord
    replies: List[MessageRecord] = field(default_factory=list)

    @property
    def reply_count(self) -> int:
        return len(self.replies)

    def to_dict(self) -> dict:
        data = self.root.model_dump()
        data["replies"] = [reply.model_dump() for reply in self.replies]
        data["reply_count"] = self.reply_count
        return data


def build_threads(roots: Iterable[MessageRecord], replies: Iterable[MessageRecord]) -> List[Thread]:
    """
    将回复挂到对应的主留言下

    主留言保持传入顺序 (存储层返回最新在前)
    回复按 ``parent_id`` 分组, 按时间正序排列; 父留言不在 ``roots`` 中的回复会被丢弃
    """
    replies_map: Dict[int, List[MessageRecord]] = {}
    for reply in replies:
        if reply.parent_id is None:
            continue
        replies_map.setdefault(reply.parent_id, []).append(reply)

    for group in replies_map.values():
        group.sort(key=lambda r: (r.created_at, r.id))

    return [Thread(root=root, replies=replies_map.get(root.id, [])) for root in roots]
