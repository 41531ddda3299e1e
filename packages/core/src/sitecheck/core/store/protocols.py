"""Store Protocol 接口定义

定义 CacheStore、SnapshotStore、SessionStore 的抽象接口，
使用 Python Protocol 实现结构化子类型（duck typing）。
实现方在任何存储失败时抛出 StorageError。
"""

from typing import Any, Protocol

from ..models.checklist import Checklist


class CacheStore(Protocol):
    """原始 payload 缓存接口"""

    async def get(self, key: str) -> tuple[Any, float] | None:
        """读取 (payload, written_at)"""
        ...

    async def put(self, key: str, payload: Any, written_at: float) -> None:
        """写入 payload 与时间戳"""
        ...

    async def delete(self, key: str) -> None:
        """删除条目"""
        ...


class SnapshotStore(Protocol):
    """canonical 树快照接口"""

    async def save(self, key: str, checklists: list[Checklist], saved_at: float) -> None:
        """保存快照"""
        ...

    async def load(self, key: str) -> list[Checklist] | None:
        """读取快照"""
        ...


class SessionStore(Protocol):
    """会话值接口"""

    async def get(self, key: str) -> str | None:
        """读取值"""
        ...

    async def set(self, key: str, value: str, durable: bool = True) -> None:
        """写入值"""
        ...

    async def delete(self, key: str) -> None:
        """删除值"""
        ...
