"""ChecklistGateway -- Remote Checklist Gateway

对外暴露 checklist 拉取、task 完成状态更新、项目照片与项目列表查询。
不接触缓存或 canonical 状态。
"""

from typing import Any

import structlog

from sitecheck.core.models.photo import Photo, parse_photos
from sitecheck.core.models.project import Project, parse_projects

from .client import ChecklistApiClient
from .fallback import EndpointFallback
from .models import ApiCallResult

log = structlog.get_logger()

CHECKLISTS_PATH = "/checklists"
TODOS_PATH = "/todos"
TASKS_PATH = "/tasks"
FIELDS_PATH = "/fields"
PROJECTS_PATH = "/projects"


class ChecklistGateway:
    """远端 checklist API 网关"""

    def __init__(
        self,
        client: ChecklistApiClient,
        fallback: EndpointFallback | None = None,
    ) -> None:
        self._client = client
        self._fallback = fallback or EndpointFallback(client)

    async def fetch_checklists(self, project_id: str | int, token: str) -> ApiCallResult:
        """拉取项目 checklist 原始 payload

        GET /checklists?project_id=..，404 时改用 GET /todos（相同查询参数）。
        """
        return await self._fallback.call_with_fallback(
            "GET",
            CHECKLISTS_PATH,
            TODOS_PATH,
            token,
            params={"project_id": str(project_id)},
        )

    async def update_task_completion(
        self,
        task_id: str | int,
        token: str,
        completed_at: str | None,
    ) -> ApiCallResult:
        """更新 task 完成时间

        PUT /tasks/{id}，404 时改用 PUT /fields/{id}（相同请求体）。
        completed_at 为 None 表示标记为未完成。
        """
        body: dict[str, Any] = {"completed_at": completed_at}
        return await self._fallback.call_with_fallback(
            "PUT",
            f"{TASKS_PATH}/{task_id}",
            f"{FIELDS_PATH}/{task_id}",
            token,
            json_body=body,
            expect_json=False,
        )

    async def fetch_project_photos(self, project_id: str | int, token: str) -> list[Photo]:
        """拉取项目全部照片（API 不提供按 task 过滤的照片）"""
        result = await self._client.request(
            "GET",
            f"{PROJECTS_PATH}/{project_id}/photos",
            token,
        )
        photos = parse_photos(result.payload)
        log.debug("project_photos_fetched", project_id=project_id, count=len(photos))
        return photos

    async def list_projects(self, token: str, limit: int = 100) -> list[Project]:
        """拉取项目列表（供项目选择器使用）"""
        result = await self._client.request(
            "GET",
            PROJECTS_PATH,
            token,
            params={"limit": limit},
        )
        return parse_projects(result.payload)
