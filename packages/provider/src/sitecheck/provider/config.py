"""ProviderConfig -- Provider 配置加载

从环境变量加载配置，token 以 SecretStr 保存，避免出现在日志中。
"""

import os

import structlog
from pydantic import BaseModel, Field, SecretStr

log = structlog.get_logger()

DEFAULT_API_BASE_URL = "https://api.companycam.com/v2"


class ProviderConfig(BaseModel):
    """Provider 包配置 -- 从环境变量加载

    环境变量:
        SITECHECK_API_URL: API 基础地址（默认 https://api.companycam.com/v2）
        SITECHECK_API_TOKEN: bearer token
        SITECHECK_API_TIMEOUT_S: 请求超时（秒，默认 30）
        SITECHECK_PROJECT_LIMIT: 项目列表拉取上限（默认 100）
    """

    api_base_url: str = Field(
        default=DEFAULT_API_BASE_URL,
        description="API 基础 URL",
    )
    api_token: SecretStr = Field(
        default=SecretStr(""),
        description="bearer token，透传给 API",
    )
    timeout_s: int = Field(
        default=30,
        ge=1,
        description="请求超时（秒）",
    )
    project_limit: int = Field(
        default=100,
        ge=1,
        description="项目列表 limit 参数",
    )


def _int_from_env(kwargs: dict, env_var: str, field: str, fallback: int) -> None:
    val = os.environ.get(env_var)
    if not val:
        return
    try:
        kwargs[field] = int(val)
    except ValueError:
        log.warning(
            "invalid_int_config",
            env_var=env_var,
            value=val,
            fallback=fallback,
        )
        # 使用默认值，不阻塞启动


def load_provider_config() -> ProviderConfig:
    """从环境变量加载 Provider 配置

    Returns:
        ProviderConfig 实例
    """
    kwargs: dict = {}

    if val := os.environ.get("SITECHECK_API_URL"):
        kwargs["api_base_url"] = val

    if val := os.environ.get("SITECHECK_API_TOKEN"):
        kwargs["api_token"] = SecretStr(val)

    _int_from_env(kwargs, "SITECHECK_API_TIMEOUT_S", "timeout_s", 30)
    _int_from_env(kwargs, "SITECHECK_PROJECT_LIMIT", "project_limit", 100)

    return ProviderConfig(**kwargs)
