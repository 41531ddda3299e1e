"""SQLite 数据库初始化

PRAGMA 配置 + 本地持久化表 DDL。
使用 aiosqlite 异步操作。
"""

import aiosqlite

# 原始 payload 缓存（不含时间戳）
_CACHE_PAYLOADS_DDL = """
CREATE TABLE IF NOT EXISTS cache_payloads (
    key      TEXT PRIMARY KEY,
    payload  TEXT NOT NULL
);
"""

# 缓存时间戳映射，与 payload 分开存放
_CACHE_TIMESTAMPS_DDL = """
CREATE TABLE IF NOT EXISTS cache_timestamps (
    key         TEXT PRIMARY KEY,
    written_at  REAL NOT NULL
);
"""

# 乐观更新后的 canonical 树快照
_SNAPSHOTS_DDL = """
CREATE TABLE IF NOT EXISTS snapshots (
    key       TEXT PRIMARY KEY,
    tree      TEXT NOT NULL,
    saved_at  REAL NOT NULL
);
"""

# 会话值（token、选中项目）
_SESSION_VALUES_DDL = """
CREATE TABLE IF NOT EXISTS session_values (
    key    TEXT PRIMARY KEY,
    value  TEXT NOT NULL
);
"""


async def init_db(conn: aiosqlite.Connection) -> None:
    """初始化数据库：设置 PRAGMA + 创建表

    Args:
        conn: aiosqlite 数据库连接
    """
    await conn.execute("PRAGMA journal_mode = WAL;")
    await conn.execute("PRAGMA busy_timeout = 5000;")

    for ddl in (
        _CACHE_PAYLOADS_DDL,
        _CACHE_TIMESTAMPS_DDL,
        _SNAPSHOTS_DDL,
        _SESSION_VALUES_DDL,
    ):
        await conn.execute(ddl)

    await conn.commit()
