"""Response Normalizer -- 原始 API payload -> canonical Checklist 树

两步走：
1. decode_payload(): 依次尝试命名解析器（list / checklists / todos），
   第一个成功的胜出，全部失败时返回 EMPTY 形态，不抛异常
2. normalize(): 按 project_id 过滤记录，合并四类 task 来源并构建 Checklist

纯函数：不访问网络、不读时钟、不修改输入。
"""

import math
from collections.abc import Callable
from typing import Any

import structlog
from pydantic import BaseModel, Field

from .config import MOBILE_DEEP_LINK_SCHEME, WEB_APP_BASE_URL
from .models.checklist import Checklist, Section, Task, completion_percentage
from .models.enums import PayloadShape
from .models.photo import parse_photos

log = structlog.get_logger()


class DecodedPayload(BaseModel):
    """payload 解码结果"""

    shape: PayloadShape = Field(description="识别出的 payload 形态")
    records: list[dict[str, Any]] = Field(
        default_factory=list,
        description="候选 checklist 记录（已剔除非 mapping 条目）",
    )


def _parse_list(body: Any) -> list | None:
    return body if isinstance(body, list) else None


def _parse_keyed(key: str) -> Callable[[Any], list | None]:
    def parser(body: Any) -> list | None:
        if isinstance(body, dict) and isinstance(body.get(key), list):
            return body[key]
        return None

    return parser


# 按优先级排列的解析器
_SHAPE_PARSERS: tuple[tuple[PayloadShape, Callable[[Any], list | None]], ...] = (
    (PayloadShape.LIST, _parse_list),
    (PayloadShape.CHECKLISTS, _parse_keyed("checklists")),
    (PayloadShape.TODOS, _parse_keyed("todos")),
)


def decode_payload(payload: Any) -> DecodedPayload:
    """识别 payload 形态并取出候选 checklist 记录

    {"data": ...} 信封先解开，再依次尝试 _SHAPE_PARSERS。
    """
    body = payload
    if isinstance(payload, dict) and payload.get("data") is not None:
        body = payload["data"]

    for shape, parser in _SHAPE_PARSERS:
        records = parser(body)
        if records is not None:
            return DecodedPayload(
                shape=shape,
                records=[r for r in records if isinstance(r, dict)],
            )

    log.warning("unexpected_payload_shape", payload_type=type(body).__name__)
    return DecodedPayload(shape=PayloadShape.EMPTY)


def same_id(a: Any, b: Any) -> bool:
    """宽松 ID 比较，吸收数字 / 字符串漂移"""
    if a is None or b is None:
        return False
    return a == b or str(a) == str(b)


def _coerce_id(value: Any) -> str | int | None:
    if value is None or value == "":
        return None
    if isinstance(value, bool):
        return str(value).lower()
    if isinstance(value, (str, int)):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    return str(value)


def _first_text(*values: Any, default: str) -> str:
    """返回第一个非空值（转为字符串），全部为空时返回 default"""
    for value in values:
        if value:
            return str(value)
    return default


def _mappings(value: Any) -> list[dict[str, Any]]:
    if not isinstance(value, list):
        return []
    return [item for item in value if isinstance(item, dict)]


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _collect_raw_tasks(record: dict[str, Any]) -> list[dict[str, Any]]:
    """合并四类 task 来源（均可选、相互独立）

    1. 顶层 tasks
    2. 旧版 fields（name 优先于 title）
    3. 每个 section 自带的 tasks（打上该 section 的 id）
    4. 专用的 sectionless_tasks
    """
    raw_tasks: list[dict[str, Any]] = list(_mappings(record.get("tasks")))

    for field in _mappings(record.get("fields")):
        raw_tasks.append({**field, "name": field.get("name") or field.get("title")})

    for section in _mappings(record.get("sections")):
        for task in _mappings(section.get("tasks")):
            raw_tasks.append(
                {
                    **task,
                    "section_id": section.get("id"),
                    "name": task.get("name") or task.get("title"),
                }
            )

    for task in _mappings(record.get("sectionless_tasks")):
        raw_tasks.append({**task, "name": task.get("name") or task.get("title")})

    return raw_tasks


def build_task(raw: dict[str, Any]) -> Task | None:
    """将单条原始 task 记录转换为 Task，缺少 id 时返回 None"""
    task_id = _coerce_id(raw.get("id"))
    if task_id is None:
        log.debug("task_without_id_skipped", keys=sorted(raw))
        return None

    completed_at = raw.get("completed_at")
    return Task(
        id=task_id,
        text=_first_text(
            raw.get("name"),
            raw.get("title"),
            raw.get("description"),
            default="Unnamed Task",
        ),
        completed_at=str(completed_at) if completed_at else None,
        notes=_first_text(raw.get("notes"), raw.get("description"), default=""),
        required=bool(raw.get("required")),
        photo_required=bool(raw.get("photo_required")),
        photos=parse_photos(raw.get("photos")),
        section_id=_coerce_id(raw.get("section_id")),
    )


def _dedupe(tasks: list[Task]) -> list[Task]:
    """同一容器内按 id 去重，保留首次出现"""
    seen: set[str] = set()
    unique: list[Task] = []
    for task in tasks:
        key = str(task.id)
        if key not in seen:
            seen.add(key)
            unique.append(task)
    return unique


def _api_percentage(record: dict[str, Any]) -> int | None:
    """API 汇总计数：两者均为数字且 total > 0 时才采用"""
    done = record.get("completed_tasks_count")
    total = record.get("tasks_count")
    if not (_is_number(done) and _is_number(total)) or total <= 0:
        return None
    return max(0, min(100, math.floor(done / total * 100 + 0.5)))


def build_checklist(record: dict[str, Any], project_id: str | int) -> Checklist | None:
    """将单条 checklist / todo 记录转换为 Checklist"""
    checklist_id = _coerce_id(record.get("id"))
    if checklist_id is None:
        log.debug("checklist_without_id_skipped", project_id=project_id)
        return None

    tasks = [t for t in map(build_task, _collect_raw_tasks(record)) if t is not None]

    sections: list[Section] = []
    for raw_section in _mappings(record.get("sections")):
        section_id = _coerce_id(raw_section.get("id"))
        sections.append(
            Section(
                id=section_id,
                name=_first_text(
                    raw_section.get("name"),
                    raw_section.get("title"),
                    default="Unnamed Section",
                ),
                tasks=_dedupe([t for t in tasks if same_id(t.section_id, section_id)]),
            )
        )

    sectionless = _dedupe([t for t in tasks if t.section_id is None])

    orphaned = sum(
        1
        for t in tasks
        if t.section_id is not None
        and not any(same_id(t.section_id, s.id) for s in sections)
    )
    if orphaned:
        log.debug(
            "orphaned_tasks_dropped",
            checklist_id=checklist_id,
            count=orphaned,
        )

    percentage = _api_percentage(record)
    if percentage is None:
        all_tasks = sectionless + [t for s in sections for t in s.tasks]
        percentage = completion_percentage(
            sum(1 for t in all_tasks if t.completed),
            len(all_tasks),
        )

    return Checklist(
        id=checklist_id,
        name=_first_text(record.get("name"), record.get("title"), default="Unnamed Checklist"),
        project_id=project_id,
        sections=sections,
        sectionless_tasks=sectionless,
        completion_percentage=percentage,
        web_url=f"{WEB_APP_BASE_URL}/projects/{project_id}/todos/{checklist_id}",
        mobile_deep_link=f"{MOBILE_DEEP_LINK_SCHEME}projects/{project_id}",
    )


def normalize(payload: Any, project_id: str | int) -> list[Checklist]:
    """将任意形态的 payload 规整为当前项目的 Checklist 列表

    Args:
        payload: 原始 API 响应（已 JSON 解码）
        project_id: 当前选中项目 ID

    Returns:
        Checklist 列表；project_id 不匹配的记录被静默丢弃，
        无法识别的形态返回空列表
    """
    decoded = decode_payload(payload)

    checklists: list[Checklist] = []
    for record in decoded.records:
        if not same_id(record.get("project_id"), project_id):
            continue
        try:
            checklist = build_checklist(record, project_id)
        except (TypeError, ValueError) as e:
            # pydantic ValidationError 继承自 ValueError
            log.warning(
                "checklist_record_rejected",
                checklist_id=record.get("id"),
                error=str(e),
            )
            continue
        if checklist is not None:
            checklists.append(checklist)

    log.debug(
        "checklists_normalized",
        shape=decoded.shape.value,
        record_count=len(decoded.records),
        checklist_count=len(checklists),
        project_id=project_id,
    )
    return checklists
