"""NoticeBoard 单元测试"""

import asyncio

from sitecheck.core.models.enums import ErrorKind
from sitecheck.dashboard.services.notices import NoticeBoard, NoticeLevel


def test_post_without_loop_stays_active():
    board = NoticeBoard()

    notice = board.post("Failed", kind=ErrorKind.MUTATION)

    assert board.active == [notice]
    assert notice.level == NoticeLevel.ERROR
    assert notice.ttl_s == 5.0
    assert len(notice.notice_id) == 26


async def test_auto_dismiss_after_ttl():
    board = NoticeBoard()

    board.post("gone soon", level=NoticeLevel.INFO, ttl_s=0.01)
    await asyncio.sleep(0.05)

    assert board.active == []
    assert [n.message for n in board.history] == ["gone soon"]


async def test_sticky_notice_without_ttl():
    board = NoticeBoard()

    board.post("sticky", ttl_s=None)
    await asyncio.sleep(0.02)

    assert len(board.active) == 1


async def test_dismiss_and_clear():
    board = NoticeBoard()
    first = board.post("a")
    board.post("b")

    assert board.dismiss(first.notice_id) is True
    assert board.dismiss(first.notice_id) is False
    board.clear()

    assert board.active == []
    assert board.latest.message == "b"
    assert len(board.history) == 2
