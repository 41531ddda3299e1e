"""SnapshotStore SQLite 实现

每次乐观更新后保存完整 canonical 树（checklists_{project_id}），
用于恢复与调试。
"""

import contextlib
import json

import aiosqlite
from pydantic import TypeAdapter

from ..exceptions import StorageError
from ..models.checklist import Checklist

_TREE_ADAPTER = TypeAdapter(list[Checklist])


class SqliteSnapshotStore:
    """SnapshotStore 的 SQLite 实现"""

    def __init__(self, conn: aiosqlite.Connection) -> None:
        self._conn = conn

    async def save(self, key: str, checklists: list[Checklist], saved_at: float) -> None:
        """保存 canonical 树快照（覆盖写）"""
        try:
            tree = _TREE_ADAPTER.dump_json(checklists).decode("utf-8")
            await self._conn.execute(
                "INSERT OR REPLACE INTO snapshots (key, tree, saved_at) VALUES (?, ?, ?)",
                (key, tree, saved_at),
            )
            await self._conn.commit()
        except (aiosqlite.Error, ValueError) as e:
            with contextlib.suppress(aiosqlite.Error, ValueError):
                await self._conn.rollback()
            raise StorageError("write", key, e) from e

    async def load(self, key: str) -> list[Checklist] | None:
        """读取快照，不存在时返回 None"""
        try:
            cursor = await self._conn.execute(
                "SELECT tree FROM snapshots WHERE key = ?",
                (key,),
            )
            row = await cursor.fetchone()
            if row is None:
                return None
            return _TREE_ADAPTER.validate_python(json.loads(row[0]))
        except (aiosqlite.Error, ValueError) as e:
            raise StorageError("read", key, e) from e
