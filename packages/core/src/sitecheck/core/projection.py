"""Projection 模块 -- canonical Checklist 树的 replace-on-write 更新

所有函数返回新的 checklist 列表，被修改的 checklist / section / task 均为新对象，
未受影响的对象原样复用（frozen 模型可安全共享）。
"""

from collections.abc import Sequence
from typing import Any

from .models.checklist import Checklist, Section, Task, completion_percentage
from .models.summary import OverallStats
from .normalizer import same_id


def recompute_checklist(checklist: Checklist) -> Checklist:
    """按当前 task 重新计算 checklist 完成百分比"""
    return checklist.model_copy(
        update={
            "completion_percentage": completion_percentage(
                checklist.completed_tasks, checklist.total_tasks
            )
        }
    )


def find_task(
    checklists: Sequence[Checklist],
    checklist_id: Any,
    task_id: Any,
) -> Task | None:
    """在指定 checklist 中查找 task（含无 section 与各 section）"""
    for checklist in checklists:
        if not same_id(checklist.id, checklist_id):
            continue
        for task in checklist.all_tasks():
            if same_id(task.id, task_id):
                return task
    return None


def _replace_task(tasks: list[Task], task_id: Any, completed_at: str | None) -> list[Task]:
    return [
        task.model_copy(update={"completed_at": completed_at})
        if same_id(task.id, task_id)
        else task
        for task in tasks
    ]


def apply_task_completion(
    checklists: Sequence[Checklist],
    checklist_id: Any,
    task_id: Any,
    completed_at: str | None,
) -> list[Checklist]:
    """设置 task 的完成时间，并自底向上重算 section 与 checklist 百分比

    Args:
        checklists: 当前 canonical 树
        checklist_id: 所属 checklist ID
        task_id: 目标 task ID
        completed_at: 完成时间（ISO 8601），None 表示未完成

    Returns:
        新的 checklist 列表
    """
    updated: list[Checklist] = []
    for checklist in checklists:
        if not same_id(checklist.id, checklist_id):
            updated.append(checklist)
            continue

        sections = [
            section.model_copy(
                update={"tasks": _replace_task(section.tasks, task_id, completed_at)}
            )
            for section in checklist.sections
        ]
        rebuilt = checklist.model_copy(
            update={
                "sections": sections,
                "sectionless_tasks": _replace_task(
                    checklist.sectionless_tasks, task_id, completed_at
                ),
            }
        )
        updated.append(recompute_checklist(rebuilt))
    return updated


def set_checklist_expanded(
    checklists: Sequence[Checklist],
    checklist_id: Any,
    expanded: bool | None = None,
) -> list[Checklist]:
    """切换（expanded=None）或设置 checklist 的展开状态"""
    return [
        c.model_copy(update={"expanded": (not c.expanded) if expanded is None else expanded})
        if same_id(c.id, checklist_id)
        else c
        for c in checklists
    ]


def set_section_expanded(
    checklists: Sequence[Checklist],
    checklist_id: Any,
    section_id: Any,
    expanded: bool | None = None,
) -> list[Checklist]:
    """切换（expanded=None）或设置 section 的展开状态"""

    def _update(section: Section) -> Section:
        if not same_id(section.id, section_id):
            return section
        value = (not section.expanded) if expanded is None else expanded
        return section.model_copy(update={"expanded": value})

    return [
        c.model_copy(update={"sections": [_update(s) for s in c.sections]})
        if same_id(c.id, checklist_id)
        else c
        for c in checklists
    ]


def expand_section_by_name(
    checklists: Sequence[Checklist],
    checklist_id: Any,
    section_name: str,
) -> list[Checklist]:
    """展开 checklist 以及其中同名的 section（汇总视图跳转用）"""
    updated: list[Checklist] = []
    for checklist in checklists:
        if not same_id(checklist.id, checklist_id):
            updated.append(checklist)
            continue
        sections = [
            s.model_copy(update={"expanded": True}) if s.name == section_name else s
            for s in checklist.sections
        ]
        updated.append(
            checklist.model_copy(update={"expanded": True, "sections": sections})
        )
    return updated


def overall_stats(checklists: Sequence[Checklist]) -> OverallStats:
    """汇总全部 checklist 的 task 完成情况"""
    total = sum(c.total_tasks for c in checklists)
    done = sum(c.completed_tasks for c in checklists)
    return OverallStats(
        total_tasks=total,
        completed_tasks=done,
        completion_percentage=completion_percentage(done, total),
    )
