"""NoticeBoard -- 非致命、自动消失的用户通知

任务更新失败、照片加载失败、清空缓存提示等都通过通知展示，
不阻塞 checklist 内容的渲染。
"""

import asyncio
from datetime import UTC, datetime
from enum import StrEnum

import structlog
from pydantic import BaseModel, Field
from sitecheck.core.config import NOTICE_DISMISS_S
from sitecheck.core.models.enums import ErrorKind
from ulid import ULID

log = structlog.get_logger()


class NoticeLevel(StrEnum):
    """通知级别"""

    INFO = "info"
    ERROR = "error"


class Notice(BaseModel):
    """单条通知"""

    notice_id: str = Field(description="ULID")
    message: str
    level: NoticeLevel = NoticeLevel.ERROR
    kind: ErrorKind | None = Field(default=None, description="错误分类，INFO 通知为 None")
    created_at: datetime
    ttl_s: float | None = Field(default=None, description="自动消失时间（秒），None 表示常驻")


class NoticeBoard:
    """通知面板

    active 为当前显示的通知，history 保留全部已发布通知。
    有运行中的事件循环时，通过 call_later 在 ttl_s 后自动移除。
    """

    def __init__(self) -> None:
        self._active: dict[str, Notice] = {}
        self._history: list[Notice] = []
        self._timers: dict[str, asyncio.TimerHandle] = {}

    @property
    def active(self) -> list[Notice]:
        return list(self._active.values())

    @property
    def history(self) -> list[Notice]:
        return list(self._history)

    @property
    def latest(self) -> Notice | None:
        return self._history[-1] if self._history else None

    def post(
        self,
        message: str,
        level: NoticeLevel = NoticeLevel.ERROR,
        kind: ErrorKind | None = None,
        ttl_s: float | None = NOTICE_DISMISS_S,
    ) -> Notice:
        """发布通知"""
        notice = Notice(
            notice_id=str(ULID()),
            message=message,
            level=level,
            kind=kind,
            created_at=datetime.now(UTC),
            ttl_s=ttl_s,
        )
        self._active[notice.notice_id] = notice
        self._history.append(notice)

        if ttl_s is not None:
            try:
                loop = asyncio.get_running_loop()
            except RuntimeError:
                loop = None
            if loop is not None:
                self._timers[notice.notice_id] = loop.call_later(
                    ttl_s, self.dismiss, notice.notice_id
                )

        log.info(
            "notice_posted",
            notice_id=notice.notice_id,
            level=level,
            kind=kind,
            notice_message=message,
        )
        return notice

    def dismiss(self, notice_id: str) -> bool:
        """移除通知，返回是否存在"""
        timer = self._timers.pop(notice_id, None)
        if timer is not None:
            timer.cancel()
        return self._active.pop(notice_id, None) is not None

    def clear(self) -> None:
        """移除全部 active 通知（history 保留）"""
        for notice_id in list(self._active):
            self.dismiss(notice_id)
