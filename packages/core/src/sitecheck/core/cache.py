"""Local Cache Layer -- 按项目 ID 的限时 read-through 缓存

- TTL 从写入时刻起算，默认 5 分钟
- 过期条目仍返回 payload，仅以 status=expired 提示
- 写入尽力而为：StorageError 被记录后吞掉，表现为无缓存
"""

import time
from collections.abc import Callable
from typing import Any

import structlog

from .config import cache_key, get_cache_ttl_s
from .exceptions import StorageError
from .models.cache import CacheEntry
from .models.enums import CacheStatus
from .store.protocols import CacheStore

log = structlog.get_logger()


class ChecklistCache:
    """checklist 原始 payload 缓存"""

    def __init__(
        self,
        store: CacheStore,
        ttl_s: float | None = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        """初始化缓存

        Args:
            store: 底层存储（失败时抛 StorageError）
            ttl_s: 有效期（秒），None 时读取 SITECHECK_CACHE_TTL_S
            clock: 时钟函数，返回 epoch 秒（测试可注入）
        """
        self._store = store
        self._ttl_s = ttl_s if ttl_s is not None else get_cache_ttl_s()
        self._clock = clock

    @property
    def ttl_s(self) -> float:
        return self._ttl_s

    async def read(self, project_id: str | int) -> CacheEntry | None:
        """读取缓存条目，存储失败时视为无缓存"""
        key = cache_key(project_id)
        try:
            found = await self._store.get(key)
        except StorageError as e:
            log.warning("cache_read_failed", key=key, error=str(e))
            return None
        if found is None:
            return None

        payload, written_at = found
        age_s = self._clock() - written_at
        status = CacheStatus.CACHED if age_s < self._ttl_s else CacheStatus.EXPIRED
        return CacheEntry(key=key, payload=payload, written_at=written_at, status=status)

    async def write(self, project_id: str | int, payload: Any) -> bool:
        """写入缓存，返回是否成功（失败不影响调用方）"""
        key = cache_key(project_id)
        try:
            await self._store.put(key, payload, self._clock())
        except StorageError as e:
            log.warning("cache_write_failed", key=key, error=str(e))
            return False
        return True

    async def invalidate(self, project_id: str | int) -> bool:
        """删除缓存条目，返回是否成功"""
        key = cache_key(project_id)
        try:
            await self._store.delete(key)
        except StorageError as e:
            log.warning("cache_invalidate_failed", key=key, error=str(e))
            return False
        log.debug("cache_invalidated", key=key)
        return True
