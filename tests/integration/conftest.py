"""集成测试共享 fixture"""

from collections.abc import Callable
from pathlib import Path

import pytest
from sitecheck.dashboard.app import open_dashboard

API_URL = "https://api.test/v2"


@pytest.fixture
def integration_env(monkeypatch, tmp_path: Path) -> Path:
    """通过环境变量配置数据库路径与 API 地址"""
    db_path = tmp_path / "sqlite" / "sitecheck.db"
    monkeypatch.setenv("SITECHECK_DB_PATH", str(db_path))
    monkeypatch.setenv("SITECHECK_API_URL", API_URL)
    monkeypatch.delenv("SITECHECK_API_TOKEN", raising=False)
    monkeypatch.delenv("SITECHECK_CACHE_TTL_S", raising=False)
    return db_path


@pytest.fixture
def open_app(integration_env, fake_api) -> Callable:
    """按环境变量打开 Dashboard（每次调用模拟一次进程启动）"""

    def _open(clock: Callable[[], float] | None = None):
        if clock is None:
            return open_dashboard(transport=fake_api.transport)
        return open_dashboard(transport=fake_api.transport, clock=clock)

    return _open
