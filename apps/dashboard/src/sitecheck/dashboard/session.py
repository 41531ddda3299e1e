"""SessionContext -- 显式会话上下文

持有 bearer token、当前项目与 generation 计数，是 token 与选中项目的唯一持久化边界。
切换项目时 generation 递增，旧项目在途请求的结果据此丢弃。
"""

import structlog
from sitecheck.core.config import SELECTED_PROJECT_KEY, TOKEN_KEY
from sitecheck.core.exceptions import ProjectNotSelectedError, StorageError
from sitecheck.core.models.project import Project
from sitecheck.core.store.protocols import SessionStore
from sitecheck.provider.exceptions import AuthError, GatewayError, NotFoundError
from sitecheck.provider.gateway import ChecklistGateway

log = structlog.get_logger()

STATUS_CONNECTED = "Connected"
STATUS_INVALID_TOKEN = "Invalid API token"
STATUS_ENDPOINT_NOT_FOUND = "API endpoint not found"
STATUS_NOT_CONFIGURED = "Not configured"


def describe_connect_error(error: GatewayError) -> str:
    """token 校验失败时的状态文本"""
    if isinstance(error, NotFoundError):
        return STATUS_ENDPOINT_NOT_FOUND
    if isinstance(error, AuthError):
        return STATUS_INVALID_TOKEN
    return f"Authentication failed: {error.message}"


class SessionContext:
    """会话上下文"""

    def __init__(
        self,
        store: SessionStore,
        gateway: ChecklistGateway,
        project_limit: int = 100,
    ) -> None:
        self._store = store
        self._gateway = gateway
        self._project_limit = project_limit
        self._token: str | None = None
        self._project: Project | None = None
        self._generation = 0
        self.api_status = STATUS_NOT_CONFIGURED

    @property
    def token(self) -> str | None:
        return self._token

    @property
    def project(self) -> Project | None:
        return self._project

    @property
    def generation(self) -> int:
        return self._generation

    @property
    def is_connected(self) -> bool:
        return self._token is not None

    def require(self) -> tuple[Project, str]:
        """返回 (project, token)，未选择项目或缺少 ID 时抛 ProjectNotSelectedError"""
        if self._project is None or self._project.id in (None, ""):
            raise ProjectNotSelectedError()
        if not self._token:
            raise ProjectNotSelectedError("No API token configured")
        return self._project, self._token

    async def connect(self, token: str) -> bool:
        """校验 token（GET /projects?limit=1）并持久化

        失败时清除已保存的 token，api_status 记录失败原因。
        """
        try:
            await self._gateway.list_projects(token, limit=1)
        except GatewayError as e:
            self.api_status = describe_connect_error(e)
            self._token = None
            log.warning("token_validation_failed", api_status=self.api_status)
            await self._forget(TOKEN_KEY)
            return False

        self._token = token
        self.api_status = STATUS_CONNECTED
        await self._remember(TOKEN_KEY, token, durable=True)
        log.info("api_connected")
        return True

    async def restore(self) -> bool:
        """从存储恢复 token（durable 优先）与选中项目，并重新校验 token"""
        token = await self._recall(TOKEN_KEY)
        if not token:
            return False

        connected = await self.connect(token)
        if not connected:
            return False

        raw_project = await self._recall(SELECTED_PROJECT_KEY)
        if raw_project:
            try:
                self._project = Project.model_validate_json(raw_project)
            except ValueError as e:
                log.warning("selected_project_restore_failed", error=str(e))
        return True

    async def list_projects(self) -> list[Project]:
        """拉取项目选择器使用的项目列表"""
        if not self._token:
            raise ProjectNotSelectedError("No API token configured")
        return await self._gateway.list_projects(self._token, limit=self._project_limit)

    async def select_project(self, project: Project) -> int:
        """切换当前项目，返回新的 generation"""
        self._project = project
        self._generation += 1
        await self._remember(
            SELECTED_PROJECT_KEY, project.model_dump_json(), durable=True
        )
        log.info(
            "project_selected",
            project_id=project.id,
            generation=self._generation,
        )
        return self._generation

    async def disconnect(self) -> None:
        """清除 token 与当前项目"""
        self._token = None
        self._project = None
        self._generation += 1
        self.api_status = STATUS_NOT_CONFIGURED
        await self._forget(TOKEN_KEY)
        await self._forget(SELECTED_PROJECT_KEY)

    async def _recall(self, key: str) -> str | None:
        try:
            return await self._store.get(key)
        except StorageError as e:
            log.warning("session_read_failed", key=key, error=str(e))
            return None

    async def _remember(self, key: str, value: str, durable: bool) -> None:
        try:
            await self._store.set(key, value, durable=durable)
        except StorageError as e:
            log.warning("session_write_failed", key=key, error=str(e))

    async def _forget(self, key: str) -> None:
        try:
            await self._store.delete(key)
        except StorageError as e:
            log.warning("session_delete_failed", key=key, error=str(e))
