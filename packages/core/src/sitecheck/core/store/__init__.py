"""SiteCheck Core Store -- SQLite 本地持久化实现

提供工厂函数创建共享数据库连接的 Store 实例组。
"""

from pathlib import Path

import aiosqlite

from .cache_store import SqliteCacheStore
from .session_store import SqliteSessionStore
from .snapshot_store import SqliteSnapshotStore
from .sqlite_init import init_db


class StoreGroup:
    """Store 实例组 -- 共享同一个数据库连接"""

    def __init__(self, conn: aiosqlite.Connection) -> None:
        self.conn = conn
        self.cache_store = SqliteCacheStore(conn)
        self.snapshot_store = SqliteSnapshotStore(conn)
        self.session_store = SqliteSessionStore(conn)

    async def close(self) -> None:
        await self.conn.close()


async def create_store_group(db_path: str) -> StoreGroup:
    """创建 Store 实例组

    Args:
        db_path: SQLite 数据库文件路径（":memory:" 表示内存数据库）

    Returns:
        StoreGroup 实例
    """
    if db_path != ":memory:":
        # 确保数据库目录存在
        Path(db_path).parent.mkdir(parents=True, exist_ok=True)

    conn = await aiosqlite.connect(db_path)
    await init_db(conn)

    return StoreGroup(conn=conn)


__all__ = [
    "StoreGroup",
    "create_store_group",
    "SqliteCacheStore",
    "SqliteSessionStore",
    "SqliteSnapshotStore",
    "init_db",
]
