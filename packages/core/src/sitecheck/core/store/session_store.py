"""SessionStore -- 会话值持久化边界

durable 值写入 SQLite（跨进程保留），session 值仅保存在内存（进程结束即失效）。
token 同时写入两处，读取时 durable 优先。
"""

import contextlib

import aiosqlite

from ..exceptions import StorageError


class SqliteSessionStore:
    """SessionStore 的 SQLite + 内存实现"""

    def __init__(self, conn: aiosqlite.Connection) -> None:
        self._conn = conn
        self._session_values: dict[str, str] = {}

    async def get(self, key: str) -> str | None:
        """读取值：durable 优先，其次 session"""
        try:
            cursor = await self._conn.execute(
                "SELECT value FROM session_values WHERE key = ?",
                (key,),
            )
            row = await cursor.fetchone()
        except (aiosqlite.Error, ValueError) as e:
            raise StorageError("read", key, e) from e
        if row is not None:
            return row[0]
        return self._session_values.get(key)

    async def set(self, key: str, value: str, durable: bool = True) -> None:
        """写入 session 值，durable=True 时同时写入 SQLite"""
        self._session_values[key] = value
        if not durable:
            return
        try:
            await self._conn.execute(
                "INSERT OR REPLACE INTO session_values (key, value) VALUES (?, ?)",
                (key, value),
            )
            await self._conn.commit()
        except (aiosqlite.Error, ValueError) as e:
            with contextlib.suppress(aiosqlite.Error, ValueError):
                await self._conn.rollback()
            raise StorageError("write", key, e) from e

    async def delete(self, key: str) -> None:
        """从两处同时删除"""
        self._session_values.pop(key, None)
        try:
            await self._conn.execute("DELETE FROM session_values WHERE key = ?", (key,))
            await self._conn.commit()
        except (aiosqlite.Error, ValueError) as e:
            with contextlib.suppress(aiosqlite.Error, ValueError):
                await self._conn.rollback()
            raise StorageError("delete", key, e) from e
