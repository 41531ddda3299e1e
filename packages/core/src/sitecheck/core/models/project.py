"""Project Domain Model

当前选中的项目上下文，address 统一格式化为单行字符串。
"""

from typing import Any

import structlog
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from .photo import loose_id

log = structlog.get_logger()

NO_ADDRESS = "No address provided"


class Project(BaseModel):
    """Project 数据模型"""

    model_config = ConfigDict(frozen=True)

    id: str | int = Field(description="项目 ID")
    name: str = Field(default="Unnamed Project", description="项目名称")
    address: str = Field(default=NO_ADDRESS, description="单行地址")

    @field_validator("id", mode="before")
    @classmethod
    def _loose_id(cls, value: Any) -> Any:
        return loose_id(value)


def format_address(raw: Any) -> str:
    """将地址对象格式化为单行字符串

    规则: 街道行 -> "city, state postal_code" -> country，逗号连接。
    字符串地址原样返回；缺失或全部为空时返回 "No address provided"。
    """
    if isinstance(raw, str):
        return raw or NO_ADDRESS
    if not isinstance(raw, dict):
        return NO_ADDRESS

    parts: list[str] = []
    for key in ("street_address_1", "street_address_2"):
        if raw.get(key):
            parts.append(str(raw[key]))

    city_line = ""
    if raw.get("city"):
        city_line += str(raw["city"])
    if raw.get("state"):
        city_line += f", {raw['state']}" if city_line else str(raw["state"])
    if raw.get("postal_code"):
        city_line += f" {raw['postal_code']}" if city_line else str(raw["postal_code"])
    if city_line:
        parts.append(city_line)

    if raw.get("country"):
        parts.append(str(raw["country"]))

    return ", ".join(parts) or NO_ADDRESS


def project_from_record(record: dict[str, Any]) -> Project:
    """从 API 项目记录构建 Project"""
    name = record.get("name")
    return Project(
        id=record["id"],
        name=name if isinstance(name, str) and name else "Unnamed Project",
        address=format_address(record.get("address")),
    )


def parse_projects(raw: Any) -> list[Project]:
    """宽松解析项目列表，兼容 list 与 {"data": [...]}，跳过缺少 id 的记录"""
    if isinstance(raw, dict):
        raw = raw.get("data")
    if not isinstance(raw, list):
        return []
    projects: list[Project] = []
    for record in raw:
        if not isinstance(record, dict) or record.get("id") in (None, ""):
            continue
        try:
            projects.append(project_from_record(record))
        except ValidationError as e:
            log.warning("project_record_rejected", project_id=record.get("id"), error=str(e))
    return projects
