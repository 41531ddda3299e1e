"""Dashboard 组装 -- 组件创建与生命周期管理

open_dashboard() 打开 SQLite、创建 API 客户端与各服务，退出时等待在途更新并关闭连接。
"""

import time
from collections.abc import AsyncGenerator, Callable
from contextlib import asynccontextmanager
from dataclasses import dataclass

import httpx
import structlog
from sitecheck.core.cache import ChecklistCache
from sitecheck.core.config import get_db_path
from sitecheck.core.store import StoreGroup, create_store_group
from sitecheck.provider import (
    ChecklistApiClient,
    ChecklistGateway,
    ProviderConfig,
    load_provider_config,
)

from .services.checklist_service import ChecklistService
from .services.notices import NoticeBoard
from .services.photo_service import PhotoService
from .session import SessionContext

log = structlog.get_logger()


@dataclass
class Dashboard:
    """运行期组件集合"""

    store_group: StoreGroup
    gateway: ChecklistGateway
    session: SessionContext
    notices: NoticeBoard
    checklists: ChecklistService
    photos: PhotoService
    provider_config: ProviderConfig


@asynccontextmanager
async def open_dashboard(
    db_path: str | None = None,
    provider_config: ProviderConfig | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
    clock: Callable[[], float] = time.time,
) -> AsyncGenerator[Dashboard, None]:
    """创建 Dashboard 组件

    Args:
        db_path: SQLite 路径，None 时读取 SITECHECK_DB_PATH
        provider_config: API 配置，None 时从环境变量加载
        transport: httpx transport（测试注入）
        clock: 时钟函数（测试注入）
    """
    db_path = db_path or get_db_path()
    provider_config = provider_config or load_provider_config()

    store_group = await create_store_group(db_path)
    client = ChecklistApiClient(
        base_url=provider_config.api_base_url,
        timeout_s=provider_config.timeout_s,
        transport=transport,
    )
    gateway = ChecklistGateway(client)
    notices = NoticeBoard()
    session = SessionContext(
        store_group.session_store,
        gateway,
        project_limit=provider_config.project_limit,
    )
    cache = ChecklistCache(store_group.cache_store, clock=clock)
    dashboard = Dashboard(
        store_group=store_group,
        gateway=gateway,
        session=session,
        notices=notices,
        checklists=ChecklistService(
            session,
            gateway,
            cache,
            store_group.snapshot_store,
            notices,
            clock=clock,
        ),
        photos=PhotoService(session, gateway, notices),
        provider_config=provider_config,
    )
    log.info(
        "dashboard_opened",
        db_path=db_path,
        api_base_url=provider_config.api_base_url,
        cache_ttl_s=cache.ttl_s,
    )

    try:
        yield dashboard
        # 退出前等待在途 toggle 与重新同步结束
        await dashboard.checklists.wait_idle()
    finally:
        notices.clear()
        await store_group.close()
        log.info("dashboard_closed")
