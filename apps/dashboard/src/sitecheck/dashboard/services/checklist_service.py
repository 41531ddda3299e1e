"""ChecklistService -- Reconciliation / Mutation Engine

负责 checklist 视图状态：
1. refresh: 缓存优先的拉取状态机（cached / expired / fresh）
2. toggle_task: 乐观更新 -> 快照 -> 网络请求 -> 失败时强制重新同步
3. 为展示层提供聚合与排序后的视图模型

canonical 树只通过整体替换更新；切换项目（generation 变化）后，
旧项目在途请求的结果被丢弃。
"""

import asyncio
import time
from collections.abc import Callable
from datetime import UTC, datetime
from typing import Any

import structlog
from pydantic import BaseModel, ConfigDict, Field
from sitecheck.core.aggregation import aggregate_by_name, sort_checklists, sort_summaries
from sitecheck.core.cache import ChecklistCache
from sitecheck.core.config import INFO_NOTICE_DISMISS_S, NOTICE_DISMISS_S, snapshot_key
from sitecheck.core.exceptions import ProjectNotSelectedError, SiteCheckError, StorageError
from sitecheck.core.models.checklist import Checklist, Task
from sitecheck.core.models.enums import CacheStatus, ErrorKind, SortOrder
from sitecheck.core.models.summary import OverallStats, SectionSummary
from sitecheck.core.normalizer import normalize
from sitecheck.core.projection import (
    apply_task_completion,
    expand_section_by_name,
    find_task,
    overall_stats,
    set_checklist_expanded,
    set_section_expanded,
)
from sitecheck.core.store.protocols import SnapshotStore
from sitecheck.provider.exceptions import AuthError, GatewayError, NotFoundError
from sitecheck.provider.gateway import ChecklistGateway

from ..session import SessionContext
from .notices import NoticeBoard, NoticeLevel

log = structlog.get_logger()

# (checklist_id, task_id, completed_at)
PendingToggle = tuple[Any, Any, str | None]

FETCH_NOT_FOUND_MESSAGE = (
    "Failed to fetch checklists: The requested endpoint was not found (404). "
    "This could indicate that the checklists feature is not available in your "
    "CompanyCam account or the API structure has changed."
)
FETCH_AUTH_MESSAGE = (
    "Authentication error: Your API token may be invalid or you don't have "
    "permission to access checklists for this project."
)
UPDATE_NOT_FOUND_MESSAGE = (
    "Failed to update task: The task endpoint was not found (404). "
    "The API structure may have changed."
)
UPDATE_AUTH_MESSAGE = (
    "Authentication error: Your API token may be invalid or you don't have "
    "permission to update tasks."
)
CACHE_CLEARED_MESSAGE = "Cache cleared successfully. Click refresh to load fresh data."
CACHE_CLEAR_FAILED_MESSAGE = "Failed to clear cache"


class FetchFailure(BaseModel):
    """拉取失败信息（阻塞式内联展示）"""

    kind: ErrorKind
    message: str
    status_code: int | None = None


class DashboardState(BaseModel):
    """视图状态快照（只读）"""

    model_config = ConfigDict(frozen=True)

    checklists: list[Checklist] = Field(default_factory=list)
    cache_status: CacheStatus | None = Field(default=None, description="最近一次数据来源")
    last_updated: datetime | None = None
    error: FetchFailure | None = None
    is_loading: bool = False
    updating: frozenset[str] = Field(
        default_factory=frozenset,
        description="在途更新的 task ID（字符串形式）",
    )


def describe_fetch_error(error: SiteCheckError) -> FetchFailure:
    """拉取错误 -> 用户可见的失败信息"""
    status_code = getattr(error, "status_code", None)
    if isinstance(error, NotFoundError):
        message = FETCH_NOT_FOUND_MESSAGE
    elif isinstance(error, AuthError):
        message = FETCH_AUTH_MESSAGE
    elif isinstance(error, GatewayError):
        message = f"Failed to fetch checklists: {error.message}"
    else:
        message = error.message
    return FetchFailure(kind=error.kind, message=message, status_code=status_code)


def describe_mutation_error(error: Exception) -> str:
    """task 更新错误 -> 通知文本"""
    if isinstance(error, NotFoundError):
        return UPDATE_NOT_FOUND_MESSAGE
    if isinstance(error, AuthError):
        return UPDATE_AUTH_MESSAGE
    message = error.message if isinstance(error, SiteCheckError) else str(error)
    return f"Failed to update task status: {message}"


class ChecklistService:
    """checklist 视图状态与变更协调"""

    def __init__(
        self,
        session: SessionContext,
        gateway: ChecklistGateway,
        cache: ChecklistCache,
        snapshot_store: SnapshotStore,
        notices: NoticeBoard,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._session = session
        self._gateway = gateway
        self._cache = cache
        self._snapshots = snapshot_store
        self._notices = notices
        self._clock = clock

        self._checklists: list[Checklist] = []
        self._cache_status: CacheStatus | None = None
        self._last_updated: datetime | None = None
        self._error: FetchFailure | None = None
        self._loading = 0
        # 在途 toggle: task ID -> (checklist_id, task_id, completed_at)
        self._updating: dict[str, PendingToggle] = {}
        self._pending: set[asyncio.Task] = set()
        self._view_generation = session.generation

    # ============================================================
    # 视图状态
    # ============================================================

    @property
    def state(self) -> DashboardState:
        self._sync_generation()
        return DashboardState(
            checklists=list(self._checklists),
            cache_status=self._cache_status,
            last_updated=self._last_updated,
            error=self._error,
            is_loading=self._loading > 0,
            updating=frozenset(self._updating),
        )

    @property
    def checklists(self) -> list[Checklist]:
        self._sync_generation()
        return list(self._checklists)

    def is_updating(self, task_id: Any) -> bool:
        return str(task_id) in self._updating

    def _sync_generation(self) -> None:
        """项目切换后丢弃上一个项目的视图状态"""
        generation = self._session.generation
        if generation == self._view_generation:
            return
        log.debug(
            "view_state_reset",
            previous_generation=self._view_generation,
            generation=generation,
        )
        self._view_generation = generation
        self._checklists = []
        self._cache_status = None
        self._last_updated = None
        self._error = None
        self._updating.clear()

    def _is_current(self, generation: int) -> bool:
        return generation == self._session.generation

    def _timestamp(self, epoch_s: float | None = None) -> datetime:
        return datetime.fromtimestamp(
            self._clock() if epoch_s is None else epoch_s, UTC
        )

    # ============================================================
    # refresh 状态机
    # ============================================================

    async def refresh(self, force_fresh: bool = False) -> list[Checklist]:
        """拉取并安装当前项目的 checklist

        Args:
            force_fresh: True 时跳过缓存直接请求 API

        Returns:
            当前视图中的 checklist 列表

        Raises:
            ProjectNotSelectedError: 未选择项目（不发起网络请求）
            GatewayError: 拉取失败，已记录到 state.error，原有 checklist 保留
        """
        self._sync_generation()
        try:
            project, token = self._session.require()
        except ProjectNotSelectedError as e:
            self._error = describe_fetch_error(e)
            log.warning("refresh_rejected", error=e.message)
            raise

        generation = self._session.generation
        self._loading += 1
        self._error = None
        try:
            if not force_fresh:
                entry = await self._cache.read(project.id)
                if entry is not None and not entry.is_expired:
                    checklists = normalize(entry.payload, project.id)
                    if not self._is_current(generation):
                        return self._discard_stale(project.id, generation)
                    self._install(
                        checklists,
                        CacheStatus.CACHED,
                        self._timestamp(entry.written_at),
                    )
                    log.info(
                        "checklists_loaded_from_cache",
                        project_id=project.id,
                        count=len(checklists),
                    )
                    return list(self._checklists)
                self._cache_status = (
                    CacheStatus.EXPIRED if entry is not None else CacheStatus.FRESH
                )
            else:
                self._cache_status = CacheStatus.FRESH

            try:
                result = await self._gateway.fetch_checklists(project.id, token)
            except GatewayError as e:
                if self._is_current(generation):
                    self._error = describe_fetch_error(e)
                log.warning(
                    "checklists_fetch_failed",
                    project_id=project.id,
                    error_kind=e.kind,
                    error=e.message,
                )
                raise

            await self._cache.write(project.id, result.payload)
            checklists = normalize(result.payload, project.id)
            if not self._is_current(generation):
                return self._discard_stale(project.id, generation)

            self._install(checklists, CacheStatus.FRESH, self._timestamp())
            log.info(
                "checklists_fetched",
                project_id=project.id,
                count=len(checklists),
                is_fallback=result.is_fallback,
            )
            return list(self._checklists)
        finally:
            self._loading -= 1

    def _install(
        self,
        checklists: list[Checklist],
        status: CacheStatus,
        updated_at: datetime,
    ) -> None:
        self._checklists = self._reapply_pending(checklists)
        self._cache_status = status
        self._last_updated = updated_at
        self._error = None

    def _reapply_pending(self, checklists: list[Checklist]) -> list[Checklist]:
        """新安装的树上重放仍在途的 toggle，其乐观状态不被重新同步覆盖"""
        for toggle in self._updating.values():
            checklists = apply_task_completion(checklists, *toggle)
        return checklists

    def _discard_stale(self, project_id: Any, generation: int) -> list[Checklist]:
        log.info(
            "stale_refresh_discarded",
            project_id=project_id,
            generation=generation,
            current_generation=self._session.generation,
        )
        self._sync_generation()
        return list(self._checklists)

    # ============================================================
    # toggle_task 两阶段协议
    # ============================================================

    def toggle_task(
        self,
        checklist_id: Any,
        task_id: Any,
        is_completed: bool,
    ) -> asyncio.Task:
        """切换 task 完成状态

        乐观阶段在返回前同步完成（标记 updating、替换 canonical 树）；
        网络阶段在返回的 asyncio.Task 中执行，失败时不会向外抛出异常。

        Args:
            checklist_id: 所属 checklist ID
            task_id: task ID
            is_completed: 调用方看到的当前完成状态（请求值取反）

        Raises:
            ProjectNotSelectedError: 未选择项目
        """
        self._sync_generation()
        project, token = self._session.require()

        completed_at = None if is_completed else datetime.now(UTC).isoformat()
        toggle: PendingToggle = (checklist_id, task_id, completed_at)
        self._updating[str(task_id)] = toggle
        self._checklists = apply_task_completion(self._checklists, *toggle)
        log.info(
            "task_toggled_optimistically",
            checklist_id=checklist_id,
            task_id=task_id,
            completed=completed_at is not None,
        )

        task = asyncio.create_task(
            self._commit_toggle(
                project.id,
                token,
                toggle,
                self._session.generation,
                list(self._checklists),
            )
        )
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)
        return task

    async def _commit_toggle(
        self,
        project_id: Any,
        token: str,
        toggle: PendingToggle,
        generation: int,
        tree: list[Checklist],
    ) -> None:
        """网络阶段：保存快照 -> PUT -> 成功更新时间戳 / 失败通知并重新同步"""
        _, task_id, completed_at = toggle
        await self._save_snapshot(project_id, tree)

        try:
            await self._gateway.update_task_completion(task_id, token, completed_at)
        except GatewayError as e:
            self._settle(toggle)
            if not self._is_current(generation):
                log.info("stale_toggle_failure_ignored", task_id=task_id)
                return
            self._notices.post(
                describe_mutation_error(e),
                level=NoticeLevel.ERROR,
                kind=ErrorKind.MUTATION,
                ttl_s=NOTICE_DISMISS_S,
            )
            log.warning(
                "task_update_failed",
                task_id=task_id,
                error_kind=e.kind,
                error=e.message,
            )
            await self._resync()
            return

        self._settle(toggle)
        if self._is_current(generation):
            self._last_updated = self._timestamp()
        log.info("task_update_confirmed", task_id=task_id)

    def _settle(self, toggle: PendingToggle) -> None:
        """结束在途 toggle；同一 task 已有更新的 toggle 时保留后者"""
        key = str(toggle[1])
        if self._updating.get(key) is toggle:
            del self._updating[key]

    async def _resync(self) -> None:
        """失败补偿：强制重新拉取，整体替换 canonical 树"""
        try:
            await self.refresh(force_fresh=True)
        except SiteCheckError as e:
            # 失败已记录在 state.error
            log.warning("resync_failed", error_kind=e.kind, error=e.message)

    async def _save_snapshot(self, project_id: Any, tree: list[Checklist]) -> None:
        key = snapshot_key(project_id)
        try:
            await self._snapshots.save(key, tree, self._clock())
        except StorageError as e:
            log.warning("snapshot_save_failed", key=key, error=str(e))

    async def wait_idle(self) -> None:
        """等待所有在途 toggle 结束（包括失败后触发的重新同步）"""
        while self._pending:
            await asyncio.gather(*list(self._pending))

    # ============================================================
    # 缓存
    # ============================================================

    async def clear_cache(self) -> bool:
        """清除当前项目的缓存条目，并发布 3 秒后消失的提示"""
        project, _ = self._session.require()
        cleared = await self._cache.invalidate(project.id)
        if cleared:
            self._cache_status = CacheStatus.FRESH
            self._notices.post(
                CACHE_CLEARED_MESSAGE,
                level=NoticeLevel.INFO,
                ttl_s=INFO_NOTICE_DISMISS_S,
            )
        else:
            self._notices.post(
                CACHE_CLEAR_FAILED_MESSAGE,
                level=NoticeLevel.ERROR,
                kind=ErrorKind.STORAGE,
                ttl_s=INFO_NOTICE_DISMISS_S,
            )
        return cleared

    # ============================================================
    # 展示层视图模型
    # ============================================================

    def overall_stats(self) -> OverallStats:
        return overall_stats(self.checklists)

    def section_summaries(
        self,
        order: SortOrder | str = SortOrder.DEFAULT,
    ) -> list[SectionSummary]:
        return sort_summaries(aggregate_by_name(self.checklists), order)

    def sorted_checklists(self, order: SortOrder | str = SortOrder.DEFAULT) -> list[Checklist]:
        return sort_checklists(self.checklists, order)

    def find_task(self, checklist_id: Any, task_id: Any) -> Task | None:
        return find_task(self.checklists, checklist_id, task_id)

    def toggle_checklist(self, checklist_id: Any) -> None:
        self._checklists = set_checklist_expanded(self.checklists, checklist_id)

    def toggle_section(self, checklist_id: Any, section_id: Any) -> None:
        self._checklists = set_section_expanded(self.checklists, checklist_id, section_id)

    def jump_to_section(self, checklist_id: Any, section_name: str) -> None:
        """汇总视图跳转：展开目标 checklist 及其中同名 section"""
        self._checklists = expand_section_by_name(
            self.checklists, checklist_id, section_name
        )
