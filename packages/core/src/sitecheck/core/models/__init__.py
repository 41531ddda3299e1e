"""SiteCheck Core Domain Models -- 公共类型导出

所有公共模型类型从此入口导入。
"""

from .cache import CacheEntry
from .checklist import Checklist, Section, Task, completion_percentage
from .enums import (
    PHOTO_URI_FALLBACKS,
    CacheStatus,
    ErrorKind,
    PayloadShape,
    PhotoUriType,
    SortOrder,
)
from .photo import Photo, PhotoUri, parse_photos
from .project import NO_ADDRESS, Project, format_address, parse_projects
from .summary import ChecklistBreakdown, OverallStats, SectionSummary, SummaryTask

__all__ = [
    # 枚举
    "CacheStatus",
    "ErrorKind",
    "PayloadShape",
    "PhotoUriType",
    "SortOrder",
    "PHOTO_URI_FALLBACKS",
    # Checklist 树
    "Checklist",
    "Section",
    "Task",
    "completion_percentage",
    # Photo
    "Photo",
    "PhotoUri",
    "parse_photos",
    # Project
    "Project",
    "NO_ADDRESS",
    "format_address",
    "parse_projects",
    # 汇总
    "ChecklistBreakdown",
    "OverallStats",
    "SectionSummary",
    "SummaryTask",
    # 缓存
    "CacheEntry",
]
