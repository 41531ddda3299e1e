"""配置常量模块 -- 可通过环境变量覆盖

包含数据库路径、缓存 TTL、照片预取上限、外链地址等可配置常量。
"""

import os
from pathlib import Path


def _get_base_dir() -> Path:
    """获取项目 data 基础目录"""
    return Path(os.environ.get("SITECHECK_DATA_DIR", "data"))


def get_db_path() -> str:
    """获取 SQLite 数据库路径"""
    return os.environ.get(
        "SITECHECK_DB_PATH",
        str(_get_base_dir() / "sqlite" / "sitecheck.db"),
    )


def get_cache_ttl_s() -> float:
    """获取 checklist 缓存 TTL（秒），默认 5 分钟"""
    return float(os.environ.get("SITECHECK_CACHE_TTL_S", "300"))


# 每个 task 最多保留的照片数量
TASK_PHOTO_LIMIT: int = int(os.environ.get("SITECHECK_TASK_PHOTO_LIMIT", "10"))

# 非致命通知自动消失时间（秒）
NOTICE_DISMISS_S: float = 5.0

# 信息类通知（如清空缓存）自动消失时间（秒）
INFO_NOTICE_DISMISS_S: float = 3.0

# CompanyCam Web 端 / 移动端外链前缀
WEB_APP_BASE_URL: str = os.environ.get(
    "SITECHECK_WEB_APP_URL", "https://app.companycam.com"
)
MOBILE_DEEP_LINK_SCHEME: str = "ccam://"

# 缓存 / 快照 / 会话 key 约定
CACHE_KEY_PREFIX: str = "checklists-"
SNAPSHOT_KEY_PREFIX: str = "checklists_"
TOKEN_KEY: str = "companycamApiToken"
SELECTED_PROJECT_KEY: str = "selectedProject"

# 无 section 的 task 在汇总视图中的分组名
GENERAL_SECTION_NAME: str = "General Items"


def cache_key(project_id: str | int) -> str:
    """checklist 原始 payload 缓存 key"""
    return f"{CACHE_KEY_PREFIX}{project_id}"


def snapshot_key(project_id: str | int) -> str:
    """乐观更新后 canonical 树快照 key"""
    return f"{SNAPSHOT_KEY_PREFIX}{project_id}"
