"""CacheStore SQLite 实现

payload 与写入时间分两张表存放：cache_payloads / cache_timestamps。
所有 aiosqlite 或序列化异常统一包装为 StorageError。
"""

import contextlib
import json
from typing import Any

import aiosqlite

from ..exceptions import StorageError


class SqliteCacheStore:
    """CacheStore 的 SQLite 实现"""

    def __init__(self, conn: aiosqlite.Connection) -> None:
        self._conn = conn

    async def get(self, key: str) -> tuple[Any, float] | None:
        """读取缓存 payload 与写入时间

        Returns:
            (payload, written_at)；无 payload 时返回 None，
            有 payload 但缺少时间戳时 written_at 为 0.0
        """
        try:
            cursor = await self._conn.execute(
                """
                SELECT p.payload, t.written_at
                FROM cache_payloads p
                LEFT JOIN cache_timestamps t ON t.key = p.key
                WHERE p.key = ?
                """,
                (key,),
            )
            row = await cursor.fetchone()
            if row is None:
                return None
            return json.loads(row[0]), float(row[1] or 0.0)
        except (aiosqlite.Error, ValueError) as e:
            raise StorageError("read", key, e) from e

    async def put(self, key: str, payload: Any, written_at: float) -> None:
        """写入 payload 与时间戳（同一事务）"""
        try:
            serialized = json.dumps(payload, ensure_ascii=False)
        except (TypeError, ValueError) as e:
            raise StorageError("write", key, e) from e

        try:
            await self._conn.execute(
                "INSERT OR REPLACE INTO cache_payloads (key, payload) VALUES (?, ?)",
                (key, serialized),
            )
            await self._conn.execute(
                "INSERT OR REPLACE INTO cache_timestamps (key, written_at) VALUES (?, ?)",
                (key, written_at),
            )
            await self._conn.commit()
        except (aiosqlite.Error, ValueError) as e:
            with contextlib.suppress(aiosqlite.Error, ValueError):
                await self._conn.rollback()
            raise StorageError("write", key, e) from e

    async def delete(self, key: str) -> None:
        """删除 payload 与时间戳"""
        try:
            await self._conn.execute("DELETE FROM cache_payloads WHERE key = ?", (key,))
            await self._conn.execute("DELETE FROM cache_timestamps WHERE key = ?", (key,))
            await self._conn.commit()
        except (aiosqlite.Error, ValueError) as e:
            with contextlib.suppress(aiosqlite.Error, ValueError):
                await self._conn.rollback()
            raise StorageError("delete", key, e) from e
