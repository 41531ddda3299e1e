"""枚举定义

包含缓存状态、payload 形态、照片 URI 类型、错误分类、排序方式等枚举，
以及照片 URI 降级顺序 PHOTO_URI_FALLBACKS。
"""

from enum import StrEnum


class CacheStatus(StrEnum):
    """checklist 数据来源状态"""

    FRESH = "fresh"
    CACHED = "cached"
    EXPIRED = "expired"


class PayloadShape(StrEnum):
    """原始 payload 解码后识别出的形态"""

    LIST = "list"
    CHECKLISTS = "checklists"
    TODOS = "todos"
    EMPTY = "empty"


class PhotoUriType(StrEnum):
    """照片 URI 变体类型"""

    THUMBNAIL = "thumbnail"
    WEB = "web"
    ORIGINAL = "original"


# 请求的 URI 类型缺失时的降级顺序
PHOTO_URI_FALLBACKS: dict[PhotoUriType, tuple[PhotoUriType, ...]] = {
    PhotoUriType.THUMBNAIL: (
        PhotoUriType.THUMBNAIL,
        PhotoUriType.WEB,
        PhotoUriType.ORIGINAL,
    ),
    PhotoUriType.WEB: (
        PhotoUriType.WEB,
        PhotoUriType.ORIGINAL,
        PhotoUriType.THUMBNAIL,
    ),
    PhotoUriType.ORIGINAL: (
        PhotoUriType.ORIGINAL,
        PhotoUriType.WEB,
        PhotoUriType.THUMBNAIL,
    ),
}


class ErrorKind(StrEnum):
    """错误分类"""

    VALIDATION = "validation"
    NOT_FOUND = "not_found"
    AUTH = "auth"
    GENERIC_API = "generic_api"
    STORAGE = "storage"
    MUTATION = "mutation"


class SortOrder(StrEnum):
    """checklist / section 汇总排序方式"""

    DEFAULT = "default"
    NAME = "name"
    COMPLETION_ASC = "completion-asc"
    COMPLETION_DESC = "completion-desc"
