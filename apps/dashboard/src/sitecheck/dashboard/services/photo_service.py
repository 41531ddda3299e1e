"""PhotoService -- 项目照片查看与 per-task 照片预取

API 不提供按 task 过滤的照片，per-task 展示复用项目照片列表的前若干张。
预取状态按 task ID 记录，已加载或加载中的 task 不会重复请求。
"""

import asyncio
from collections.abc import Iterable, Sequence
from typing import Any

import structlog
from sitecheck.core.config import NOTICE_DISMISS_S, TASK_PHOTO_LIMIT
from sitecheck.core.exceptions import SiteCheckError
from sitecheck.core.models.checklist import Checklist, Task
from sitecheck.core.models.photo import Photo
from sitecheck.provider.gateway import ChecklistGateway

from ..session import SessionContext
from .notices import NoticeBoard, NoticeLevel

log = structlog.get_logger()


class NoPhotosFoundError(SiteCheckError):
    """项目没有任何照片"""

    def __init__(self, message: str = "No photos found for this project") -> None:
        super().__init__(message)


def task_needs_photos(task: Task) -> bool:
    return task.photo_count > 0 or task.photo_required


def tasks_awaiting_photos(checklists: Sequence[Checklist]) -> list[Task]:
    """需要预取照片的 task：无 section 的 task，以及已展开 section 中的 task"""
    found: list[Task] = []
    for checklist in checklists:
        found.extend(t for t in checklist.sectionless_tasks if task_needs_photos(t))
        for section in checklist.sections:
            if section.expanded:
                found.extend(t for t in section.tasks if task_needs_photos(t))
    return found


class PhotoService:
    """照片服务"""

    def __init__(
        self,
        session: SessionContext,
        gateway: ChecklistGateway,
        notices: NoticeBoard,
        limit: int = TASK_PHOTO_LIMIT,
    ) -> None:
        self._session = session
        self._gateway = gateway
        self._notices = notices
        self._limit = limit
        self._task_photos: dict[str, list[Photo]] = {}
        self._loading: set[str] = set()
        self._generation = session.generation

    def photos_for(self, task_id: Any) -> list[Photo]:
        self._sync_generation()
        return list(self._task_photos.get(str(task_id), []))

    def is_loading(self, task_id: Any) -> bool:
        return str(task_id) in self._loading

    def _sync_generation(self) -> None:
        if self._session.generation != self._generation:
            self._generation = self._session.generation
            self._task_photos.clear()
            self._loading.clear()

    async def prefetch(self, checklists: Sequence[Checklist]) -> int:
        """为需要照片的 task 并发预取，返回本次发起的请求数

        失败只记录日志，不向用户展示。
        """
        self._sync_generation()
        task_ids = self._claim(t.id for t in tasks_awaiting_photos(checklists))
        if not task_ids:
            return 0
        await asyncio.gather(*(self._fetch_for_task(task_id) for task_id in task_ids))
        return len(task_ids)

    def _claim(self, task_ids: Iterable[Any]) -> list[str]:
        claimed: list[str] = []
        for task_id in task_ids:
            key = str(task_id)
            if key in self._task_photos or key in self._loading or key in claimed:
                continue
            claimed.append(key)
        self._loading.update(claimed)
        return claimed

    async def _fetch_for_task(self, task_id: str) -> None:
        generation = self._generation
        try:
            project, token = self._session.require()
            photos = await self._gateway.fetch_project_photos(project.id, token)
        except SiteCheckError as e:
            log.warning("task_photos_fetch_failed", task_id=task_id, error=e.message)
            return
        finally:
            self._loading.discard(task_id)

        if generation != self._session.generation:
            return
        if photos:
            self._task_photos[task_id] = photos[: self._limit]
        log.debug("task_photos_loaded", task_id=task_id, count=len(photos[: self._limit]))

    async def show_project_photos(self) -> list[Photo]:
        """拉取项目全部照片（查看全部照片入口）

        Raises:
            NoPhotosFoundError: 项目没有照片
            GatewayError: 请求失败

        失败时同时发布 5 秒后消失的通知。
        """
        try:
            project, token = self._session.require()
            photos = await self._gateway.fetch_project_photos(project.id, token)
            if not photos:
                raise NoPhotosFoundError()
        except SiteCheckError as e:
            self._notices.post(
                f"Error loading photos: {e.message}",
                level=NoticeLevel.ERROR,
                kind=e.kind,
                ttl_s=NOTICE_DISMISS_S,
            )
            raise
        log.info("project_photos_loaded", project_id=project.id, count=len(photos))
        return photos
