"""CLI 入口模块 -- python -m sitecheck.dashboard <command>

支持的命令：
  projects                           列出可访问的项目
  checklists <project_id> [--fresh]  拉取并显示项目 checklist 进度
  summary <project_id>               按 section 名称汇总进度
  export-csv <project_id> <checklist_id>  输出 checklist CSV
  clear-cache <project_id>           清除项目的 checklist 缓存

token 来源：SITECHECK_API_TOKEN 环境变量，否则使用上次保存的 token。
"""

import asyncio
import sys

from sitecheck.core.exceptions import SiteCheckError
from sitecheck.core.models.project import Project
from sitecheck.core.normalizer import same_id

from .app import Dashboard, open_dashboard
from .exporters import export_csv
from .logging_config import setup_logging
from .services.checklist_service import describe_fetch_error

USAGE = """用法: python -m sitecheck.dashboard <command>
命令:
  projects                                列出可访问的项目
  checklists <project_id> [--fresh]       拉取并显示项目 checklist 进度
  summary <project_id>                    按 section 名称汇总进度
  export-csv <project_id> <checklist_id>  输出 checklist CSV
  clear-cache <project_id>                清除项目的 checklist 缓存"""

# 命令 -> 必需的位置参数个数
COMMANDS: dict[str, int] = {
    "projects": 0,
    "checklists": 1,
    "summary": 1,
    "export-csv": 2,
    "clear-cache": 1,
}


def main() -> None:
    """CLI 主入口"""
    if len(sys.argv) < 2:
        print(USAGE)
        sys.exit(1)

    command = sys.argv[1]
    args = [a for a in sys.argv[2:] if not a.startswith("--")]
    flags = {a for a in sys.argv[2:] if a.startswith("--")}

    if command not in COMMANDS:
        print(f"未知命令: {command}")
        print(f"可用命令: {', '.join(COMMANDS)}")
        sys.exit(1)
    if len(args) < COMMANDS[command]:
        print(USAGE)
        sys.exit(1)

    setup_logging()
    sys.exit(asyncio.run(run(command, args, flags)))


async def run(command: str, args: list[str], flags: set[str]) -> int:
    """执行命令，返回退出码"""
    async with open_dashboard() as dashboard:
        if not await _connect(dashboard):
            print(f"API 连接失败: {dashboard.session.api_status}")
            return 1

        try:
            if command == "projects":
                return await _list_projects(dashboard)

            await dashboard.session.select_project(Project(id=args[0]))
            if command == "checklists":
                return await _show_checklists(dashboard, "--fresh" in flags)
            if command == "summary":
                return await _show_summary(dashboard)
            if command == "export-csv":
                return await _export_csv(dashboard, args[1])
            if command == "clear-cache":
                cleared = await dashboard.checklists.clear_cache()
                print("缓存已清除" if cleared else "缓存清除失败")
                return 0 if cleared else 1
        except SiteCheckError as e:
            failure = dashboard.checklists.state.error or describe_fetch_error(e)
            print(f"错误: {failure.message}")
            return 1
    return 1


async def _connect(dashboard: Dashboard) -> bool:
    token = dashboard.provider_config.api_token.get_secret_value()
    if token:
        return await dashboard.session.connect(token)
    return await dashboard.session.restore()


async def _list_projects(dashboard: Dashboard) -> int:
    projects = await dashboard.session.list_projects()
    for project in projects:
        print(f"{project.id}\t{project.name}\t{project.address}")
    print(f"共 {len(projects)} 个项目")
    return 0


async def _show_checklists(dashboard: Dashboard, force_fresh: bool) -> int:
    checklists = await dashboard.checklists.refresh(force_fresh=force_fresh)
    state = dashboard.checklists.state
    for checklist in checklists:
        print(
            f"{checklist.id}\t{checklist.name}\t"
            f"{checklist.completed_tasks}/{checklist.total_tasks}\t"
            f"{checklist.completion_percentage}%"
        )
    stats = dashboard.checklists.overall_stats()
    print(
        f"总体进度: {stats.completed_tasks}/{stats.total_tasks} "
        f"({stats.completion_percentage}%)，数据来源: {state.cache_status}"
    )
    return 0


async def _show_summary(dashboard: Dashboard) -> int:
    await dashboard.checklists.refresh()
    for summary in dashboard.checklists.section_summaries():
        print(
            f"{summary.name}\t{summary.completed_tasks}/{summary.total_tasks}\t"
            f"{summary.completion_percentage}%\t"
            f"已完成 checklist: {len(summary.completed_checklists)}/{summary.checklists_count}"
        )
    return 0


async def _export_csv(dashboard: Dashboard, checklist_id: str) -> int:
    checklists = await dashboard.checklists.refresh()
    for checklist in checklists:
        if same_id(checklist.id, checklist_id):
            sys.stdout.write(export_csv(checklist))
            return 0
    print(f"未找到 checklist: {checklist_id}")
    return 1


if __name__ == "__main__":
    main()
