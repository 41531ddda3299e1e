"""SiteCheck Provider -- Remote Checklist Gateway

packages/provider 的公开接口导出。
"""

# 核心组件
from .client import ChecklistApiClient, extract_error_message

# 配置
from .config import ProviderConfig, load_provider_config

# 异常
from .exceptions import (
    AuthError,
    GatewayError,
    GatewayUnreachableError,
    GenericApiError,
    NotFoundError,
    error_for_status,
)
from .fallback import EndpointFallback
from .gateway import ChecklistGateway

# 数据模型
from .models import ApiCallResult

__all__ = [
    "ApiCallResult",
    "ChecklistApiClient",
    "ChecklistGateway",
    "EndpointFallback",
    "extract_error_message",
    "ProviderConfig",
    "load_provider_config",
    "GatewayError",
    "NotFoundError",
    "AuthError",
    "GenericApiError",
    "GatewayUnreachableError",
    "error_for_status",
]
