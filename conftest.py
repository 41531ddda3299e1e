"""全局 pytest 配置 -- 临时 SQLite 数据库 + 模拟 CompanyCam API fixture"""

import json
from collections.abc import AsyncGenerator
from pathlib import Path
from typing import Any

import aiosqlite
import httpx
import pytest
import pytest_asyncio

API_BASE_URL = "https://api.test/v2"


class FakeApi:
    """按 (method, path) 路由的模拟 API，记录收到的全部请求

    同一路由可注册多个响应，按顺序消费，最后一个响应重复使用。
    未注册的路由返回 404。
    """

    def __init__(self) -> None:
        self._routes: dict[tuple[str, str], list[dict[str, Any]]] = {}
        self.requests: list[httpx.Request] = []

    def add(
        self,
        method: str,
        path: str,
        status_code: int = 200,
        json_body: Any = None,
        text: str | None = None,
    ) -> "FakeApi":
        response: dict[str, Any] = {"status_code": status_code}
        if text is not None:
            response["text"] = text
        elif json_body is not None:
            response["json"] = json_body
        self._routes.setdefault((method, f"/v2{path}"), []).append(response)
        return self

    def _handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        queue = self._routes.get((request.method, request.url.path))
        if not queue:
            return httpx.Response(404, json={"message": "Not Found"})
        kwargs = queue.pop(0) if len(queue) > 1 else queue[0]
        return httpx.Response(**kwargs)

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self._handle)

    def paths(self, method: str | None = None) -> list[str]:
        """已收到请求的路径（去掉 /v2 前缀）"""
        return [
            r.url.path.removeprefix("/v2")
            for r in self.requests
            if method is None or r.method == method
        ]

    def body(self, index: int = -1) -> Any:
        return json.loads(self.requests[index].content)


@pytest.fixture
def fake_api() -> FakeApi:
    """模拟 CompanyCam API"""
    return FakeApi()


@pytest.fixture
def punch_list_payload() -> dict[str, Any]:
    """单个 checklist（项目 5），两个无 section 的 task，完成一个"""
    return {
        "data": [
            {
                "id": 1,
                "project_id": "5",
                "name": "Punch List",
                "tasks": [
                    {"id": 10, "name": "Paint", "completed_at": None},
                    {"id": 11, "name": "Clean", "completed_at": "2024-01-01"},
                ],
            }
        ]
    }


@pytest.fixture
def sectioned_payload() -> dict[str, Any]:
    """两个 checklist（项目 5），含同名 section 与无 section task"""
    return {
        "checklists": [
            {
                "id": "c1",
                "project_id": 5,
                "name": "Kitchen",
                "sections": [
                    {
                        "id": "s1",
                        "name": "Electrical",
                        "tasks": [
                            {"id": "t1", "title": "Outlets", "completed_at": "2024-02-01"},
                            {"id": "t2", "title": "Lights", "completed_at": None},
                        ],
                    },
                    {
                        "id": "s2",
                        "name": "Plumbing",
                        "tasks": [
                            {"id": "t3", "name": "Sink", "completed_at": "2024-02-02"},
                        ],
                    },
                ],
                "sectionless_tasks": [
                    {"id": "t4", "name": "Final walkthrough", "photo_required": True},
                ],
            },
            {
                "id": "c2",
                "project_id": "5",
                "name": "Bathroom",
                "sections": [
                    {
                        "id": "s3",
                        "name": "Electrical",
                        "tasks": [
                            {"id": "t5", "name": "Fan", "completed_at": None},
                        ],
                    },
                ],
            },
        ]
    }


@pytest_asyncio.fixture
async def tmp_db_path(tmp_path: Path) -> Path:
    """提供临时 SQLite 数据库路径"""
    return tmp_path / "test.db"


@pytest_asyncio.fixture
async def db_conn(tmp_db_path: Path) -> AsyncGenerator[aiosqlite.Connection, None]:
    """提供已初始化的临时 SQLite 数据库连接"""
    from sitecheck.core.store.sqlite_init import init_db

    conn = await aiosqlite.connect(str(tmp_db_path))
    await init_db(conn)
    yield conn
    await conn.close()


@pytest.fixture
def api_client(fake_api: FakeApi):
    """连接模拟 API 的 ChecklistApiClient"""
    from sitecheck.provider.client import ChecklistApiClient

    return ChecklistApiClient(API_BASE_URL, timeout_s=5, transport=fake_api.transport)


@pytest.fixture
def gateway(api_client):
    """连接模拟 API 的 ChecklistGateway"""
    from sitecheck.provider.gateway import ChecklistGateway

    return ChecklistGateway(api_client)


@pytest.fixture
def provider_config():
    """指向模拟 API 的 ProviderConfig"""
    from pydantic import SecretStr
    from sitecheck.provider.config import ProviderConfig

    return ProviderConfig(api_base_url=API_BASE_URL, api_token=SecretStr("test-token"))
