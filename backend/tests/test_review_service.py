"""评价用例测试：评价写入后显式刷新工具平均分"""
import logging

import pytest
from sqlalchemy.exc import OperationalError

from app.crud.tool import tool_crud
from app.crud.tool_review import tool_review_crud
from app.exceptions import ToolNotFoundError
from app.schemas.tool_review import ToolReviewCreate
from app.schemas.tool_usage import ToolUsageCreate
from app.services.tools import reviews as review_service
from app.services.tools.usage import record_usage


async def reload_rating(db, tool_id) -> float:
    tool = await tool_crud.get(db, tool_id)
    await db.refresh(tool)
    return tool.average_rating


class TestSubmitReview:
    async def test_submit_refreshes_rating(self, db, make_tool, make_user):
        tool = await make_tool()
        for rating in (4, 5, 3):
            user = await make_user()
            await review_service.submit_review(db, tool.id, user.id, ToolReviewCreate(rating=rating))

        assert await reload_rating(db, tool.id) == 4.0

    async def test_inactive_tool_rejected(self, db, make_tool, make_user):
        tool = await make_tool(is_active=False)
        user = await make_user()
        with pytest.raises(ToolNotFoundError):
            await review_service.submit_review(db, tool.id, user.id, ToolReviewCreate(rating=5))

    async def test_verified_when_user_used_tool(self, db, make_tool, make_user):
        tool = await make_tool()
        user = await make_user()
        stranger = await make_user()
        await record_usage(db, tool.id, ToolUsageCreate(), user_id=user.id)

        review = await review_service.submit_review(db, tool.id, user.id, ToolReviewCreate(rating=5))
        other = await review_service.submit_review(db, tool.id, stranger.id, ToolReviewCreate(rating=3))
        assert review.verified is True
        assert other.verified is False


class TestRatingRefresh:
    async def test_remove_refreshes_rating(self, db, make_tool, make_user):
        tool = await make_tool()
        keep = await review_service.submit_review(
            db, tool.id, (await make_user()).id, ToolReviewCreate(rating=5)
        )
        drop = await review_service.submit_review(
            db, tool.id, (await make_user()).id, ToolReviewCreate(rating=1)
        )
        assert await reload_rating(db, tool.id) == 3.0

        await review_service.remove_review(db, drop)
        assert await reload_rating(db, tool.id) == keep.rating

    async def test_remove_last_review_resets_to_zero(self, db, make_tool, make_user):
        tool = await make_tool()
        review = await review_service.submit_review(
            db, tool.id, (await make_user()).id, ToolReviewCreate(rating=4)
        )
        await review_service.remove_review(db, review)
        assert await reload_rating(db, tool.id) == 0.0

    async def test_moderation_refreshes_rating(self, db, make_tool, make_user):
        tool = await make_tool()
        moderator = await make_user(role="admin")
        await review_service.submit_review(db, tool.id, (await make_user()).id, ToolReviewCreate(rating=5))
        bad = await review_service.submit_review(
            db, tool.id, (await make_user()).id, ToolReviewCreate(rating=1)
        )

        await review_service.moderate_review(db, bad, moderator.id, approved=False)
        assert await reload_rating(db, tool.id) == 5.0

        await review_service.moderate_review(db, bad, moderator.id, approved=True)
        assert await reload_rating(db, tool.id) == 3.0

    async def test_failed_refresh_keeps_review(self, db, make_tool, make_user, monkeypatch, caplog):
        tool = await make_tool()
        user = await make_user()

        async def broken(*args, **kwargs):
            raise OperationalError("UPDATE tools", {}, Exception("database is locked"))

        monkeypatch.setattr(tool_crud, "update_average_rating", broken)
        with caplog.at_level(logging.ERROR, logger="uvicorn.error"):
            review = await review_service.submit_review(db, tool.id, user.id, ToolReviewCreate(rating=5))

        assert review.rating == 5
        assert await tool_review_crud.get(db, review.id) is not None
        assert "tool-rating-refresh-failed" in caplog.text

        monkeypatch.undo()
        assert await reload_rating(db, tool.id) == 0.0

    async def test_vote_returns_updated_review(self, db, make_tool, make_user):
        tool = await make_tool()
        review = await review_service.submit_review(
            db, tool.id, (await make_user()).id, ToolReviewCreate(rating=4)
        )
        review = await review_service.vote_review(db, review, (await make_user()).id, True)
        assert review.helpful_count == 1


class TestRefreshToolRating:
    async def test_missing_tool_is_not_a_failure(self, db, caplog):
        with caplog.at_level(logging.INFO, logger="uvicorn.error"):
            assert await review_service.refresh_tool_rating(db, "missing") is True
        assert "tool-rating-refresh-skipped" in caplog.text
        assert "tool-rating-refresh-failed" not in caplog.text

    async def test_error_reported_as_failure(self, db, make_tool, monkeypatch):
        tool = await make_tool()

        async def broken(*args, **kwargs):
            raise OperationalError("UPDATE tools", {}, Exception("disk I/O error"))

        monkeypatch.setattr(tool_crud, "update_average_rating", broken)
        assert await review_service.refresh_tool_rating(db, tool.id) is False

    async def test_missing_tool_skips_review_reload(self, db, make_user, monkeypatch):
        user = await make_user()
        # SQLite 默认不校验外键，可构造指向已删除工具的评价
        review = await tool_review_crud.create(db, "gone", user.id, ToolReviewCreate(rating=3))

        reloads = []
        original_refresh = db.refresh

        async def counting_refresh(obj, *args, **kwargs):
            reloads.append(obj)
            return await original_refresh(obj, *args, **kwargs)

        monkeypatch.setattr(db, "refresh", counting_refresh)
        await review_service.flag_review(db, review, "spam")
        # 只有 flag 自身的一次 refresh
        assert len(reloads) == 1
