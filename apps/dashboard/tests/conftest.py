"""apps/dashboard 测试配置 -- Dashboard 组件 fixture"""

from collections.abc import AsyncGenerator
from pathlib import Path

import pytest
import pytest_asyncio
from sitecheck.core.models.project import Project
from sitecheck.core.store import StoreGroup, create_store_group
from sitecheck.dashboard.app import Dashboard, open_dashboard


class FakeClock:
    """可手动推进的时钟（epoch 秒）"""

    def __init__(self, now: float = 1_700_000_000.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest_asyncio.fixture
async def store_group(tmp_path: Path) -> AsyncGenerator[StoreGroup, None]:
    """独立的 StoreGroup（不经过 open_dashboard 组装）"""
    group = await create_store_group(str(tmp_path / "parts.db"))
    yield group
    await group.close()


@pytest_asyncio.fixture
async def dashboard(
    tmp_path: Path, fake_api, provider_config, clock
) -> AsyncGenerator[Dashboard, None]:
    """连接模拟 API 的 Dashboard（未连接、未选择项目）"""
    async with open_dashboard(
        db_path=str(tmp_path / "dashboard.db"),
        provider_config=provider_config,
        transport=fake_api.transport,
        clock=clock,
    ) as dash:
        yield dash


@pytest_asyncio.fixture
async def connected(dashboard: Dashboard, fake_api) -> Dashboard:
    """已连接并选中项目 5 的 Dashboard，请求记录已清空"""
    fake_api.add("GET", "/projects", json_body=[{"id": 5, "name": "Harbor View"}])
    assert await dashboard.session.connect("test-token")
    await dashboard.session.select_project(Project(id=5, name="Harbor View"))
    fake_api.requests.clear()
    return dashboard
