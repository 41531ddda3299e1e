"""Checklist 导出 -- CSV 与可打印 HTML

CSV 每行一个 task，所有字段加双引号；HTML 为独立文档，
进度条按完成百分比分三档着色（红 < 30，黄 < 70，其余绿）。
"""

import csv
import io
import re
from html import escape

from sitecheck.core.models.checklist import Checklist, Task
from sitecheck.core.models.project import Project

CSV_HEADER = ["Task", "Section", "Status", "Notes", "Required", "Photo Required"]
NO_SECTION = "No Section"


def _yes_no(value: bool) -> str:
    return "Yes" if value else "No"


def _csv_row(task: Task, section_name: str) -> list[str]:
    return [
        task.text,
        section_name,
        "Completed" if task.completed else "Incomplete",
        task.notes or "",
        _yes_no(task.required),
        _yes_no(task.photo_required),
    ]


def export_csv(checklist: Checklist) -> str:
    """导出 checklist 为 CSV 文本（无 section 的 task 在前）"""
    buf = io.StringIO()
    writer = csv.writer(buf, quoting=csv.QUOTE_ALL, lineterminator="\n")
    # 表头不加引号
    buf.write(",".join(CSV_HEADER) + "\n")
    for task in checklist.sectionless_tasks:
        writer.writerow(_csv_row(task, NO_SECTION))
    for section in checklist.sections:
        for task in section.tasks:
            writer.writerow(_csv_row(task, section.name))
    return buf.getvalue()


def csv_filename(checklist: Checklist) -> str:
    """下载文件名：空白替换为下划线"""
    stem = re.sub(r"\s+", "_", checklist.name)
    return f"{stem}_checklist.csv"


def progress_tier(percentage: int) -> str:
    """进度条颜色档位"""
    if percentage < 30:
        return "red"
    if percentage < 70:
        return "yellow"
    return "green"


_STYLE = """
    body { font-family: Arial, sans-serif; margin: 30px; }
    h1 { color: #333; }
    .checklist-header { margin-bottom: 20px; }
    .section { margin-top: 20px; border-top: 1px solid #eee; padding-top: 10px; }
    .section-header { font-weight: bold; margin-bottom: 10px; }
    .task { margin-bottom: 8px; display: flex; align-items: flex-start; }
    .task-status { margin-right: 10px; }
    .completed { text-decoration: line-through; color: #888; }
    .project-info { color: #666; margin-bottom: 20px; }
    .progress { margin: 10px 0; background-color: #f3f4f6; border-radius: 9999px; height: 10px; }
    .progress-bar { height: 10px; border-radius: 9999px; }
    .progress-red { background-color: #ef4444; }
    .progress-yellow { background-color: #f59e0b; }
    .progress-green { background-color: #10b981; }
    @media print {
      body { margin: 0.5cm; }
      .no-print { display: none; }
    }
"""


def _progress_bar(percentage: int) -> str:
    return (
        '<div class="progress">'
        f'<div class="progress-bar progress-{progress_tier(percentage)}" '
        f'style="width: {percentage}%"></div>'
        "</div>"
    )


def _task_html(task: Task) -> str:
    lines = [
        '<div class="task">',
        f'<div class="task-status">{"&#9745;" if task.completed else "&#9744;"}</div>',
        f'<div class="{"completed" if task.completed else ""}">',
    ]
    required = ' <span style="color: red">*</span>' if task.required else ""
    lines.append(f"<div>{escape(task.text)}{required}</div>")
    if task.notes:
        lines.append(f'<div class="notes">{escape(task.notes)}</div>')
    if task.photo_required:
        label = "Photos attached" if task.has_photos else "Photo required"
        lines.append(f'<div class="photo-status">{label}</div>')
    lines.append("</div>")
    lines.append("</div>")
    return "\n".join(lines)


def render_printable_html(checklist: Checklist, project: Project | None = None) -> str:
    """生成可打印的独立 HTML 文档"""
    name = escape(checklist.name)
    project_name = escape(project.name) if project is not None else "Unknown Project"
    parts = [
        "<!DOCTYPE html>",
        "<html>",
        "<head>",
        '<meta charset="utf-8">',
        f"<title>{name} - Checklist</title>",
        f"<style>{_STYLE}</style>",
        "</head>",
        "<body>",
        '<div class="checklist-header">',
        f"<h1>{name}</h1>",
        f'<div class="project-info">Project: {project_name}</div>',
        f"<div>Completion: {checklist.completion_percentage}%</div>",
        _progress_bar(checklist.completion_percentage),
        "</div>",
    ]

    if checklist.sectionless_tasks:
        parts.append("<div>")
        parts.extend(_task_html(task) for task in checklist.sectionless_tasks)
        parts.append("</div>")

    for section in checklist.sections:
        parts.append('<div class="section">')
        parts.append(
            f'<div class="section-header">{escape(section.name)} '
            f"({section.completion_percentage}%)</div>"
        )
        parts.append(_progress_bar(section.completion_percentage))
        parts.extend(_task_html(task) for task in section.tasks)
        parts.append("</div>")

    parts.extend(
        [
            '<div class="no-print" style="margin-top: 30px; text-align: center;">',
            '<button onclick="window.print();">Print Checklist</button>',
            "</div>",
            "</body>",
            "</html>",
        ]
    )
    return "\n".join(parts)
