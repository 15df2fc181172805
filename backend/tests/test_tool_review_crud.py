"""评价CRUD与统计测试"""
import pytest

from app.crud.tool_review import tool_review_crud
from app.exceptions import DuplicateReviewError
from app.models import ToolReview
from app.schemas.tool_review import ToolReviewCreate


async def add_review(db, tool_id, user_id, rating, **overrides) -> ToolReview:
    review = ToolReview(tool_id=tool_id, user_id=user_id, rating=rating, **overrides)
    db.add(review)
    await db.commit()
    return review


class TestCreateReview:
    async def test_second_review_for_same_tool_fails(self, db, make_tool, make_user):
        tool = await make_tool()
        user = await make_user()
        await tool_review_crud.create(db, tool.id, user.id, ToolReviewCreate(rating=5))

        with pytest.raises(DuplicateReviewError) as exc_info:
            await tool_review_crud.create(db, tool.id, user.id, ToolReviewCreate(rating=1))
        assert exc_info.value.status_code == 409

    async def test_same_user_can_review_other_tools(self, db, make_tool, make_user):
        first = await make_tool(name="First")
        second = await make_tool(name="Second")
        user = await make_user()
        await tool_review_crud.create(db, first.id, user.id, ToolReviewCreate(rating=5))
        review = await tool_review_crud.create(db, second.id, user.id, ToolReviewCreate(rating=4))
        assert review.rating == 4

    def test_rating_range(self):
        with pytest.raises(ValueError):
            ToolReviewCreate(rating=6)
        with pytest.raises(ValueError):
            ToolReviewCreate(rating=0)

    def test_comment_length(self):
        with pytest.raises(ValueError):
            ToolReviewCreate(rating=3, comment="x" * 1001)
        assert ToolReviewCreate(rating=3, comment="  fine  ").comment == "fine"


class TestReviewStats:
    async def test_distribution(self, db, make_tool, make_user):
        tool = await make_tool()
        for rating in (5, 5, 4, 3, 3):
            user = await make_user()
            await add_review(db, tool.id, user.id, rating, recommend=rating >= 4)

        stats = await tool_review_crud.get_tool_review_stats(db, tool.id)
        assert stats["total_reviews"] == 5
        assert stats["average_rating"] == 4.0
        assert stats["rating_distribution"] == {1: 0, 2: 0, 3: 2, 4: 1, 5: 2}
        assert stats["recommendation_rate"] == 60.0

    async def test_no_reviews(self, db, make_tool):
        tool = await make_tool()
        stats = await tool_review_crud.get_tool_review_stats(db, tool.id)
        assert stats["total_reviews"] == 0
        assert stats["average_rating"] == 0.0
        assert stats["rating_distribution"] == {1: 0, 2: 0, 3: 0, 4: 0, 5: 0}

    async def test_inactive_reviews_excluded(self, db, make_tool, make_user):
        tool = await make_tool()
        await add_review(db, tool.id, (await make_user()).id, 5)
        await add_review(db, tool.id, (await make_user()).id, 1, is_active=False)

        stats = await tool_review_crud.get_tool_review_stats(db, tool.id)
        assert stats["total_reviews"] == 1
        assert stats["average_rating"] == 5.0

    async def test_rating_summaries(self, db, make_tool, make_user):
        rated = await make_tool(name="Rated")
        unrated = await make_tool(name="Unrated")
        await add_review(db, rated.id, (await make_user()).id, 4)
        await add_review(db, rated.id, (await make_user()).id, 5)

        summaries = await tool_review_crud.get_rating_summaries(db, [rated.id, unrated.id])
        assert summaries == {rated.id: (4.5, 2)}


class TestHelpfulVotes:
    async def test_revote_replaces_previous(self, db, make_tool, make_user):
        tool = await make_tool()
        author = await make_user()
        voter = await make_user()
        review = await add_review(db, tool.id, author.id, 4)

        review = await tool_review_crud.add_helpful_vote(db, review, voter.id, True)
        assert (review.helpful_count, review.total_votes) == (1, 1)

        review = await tool_review_crud.add_helpful_vote(db, review, voter.id, False)
        assert (review.helpful_count, review.total_votes) == (0, 1)

        votes = await tool_review_crud.get_votes(db, review.id)
        assert len(votes) == 1
        assert votes[0].helpful is False

    async def test_helpful_percentage(self, db, make_tool, make_user):
        tool = await make_tool()
        review = await add_review(db, tool.id, (await make_user()).id, 4)
        for helpful in (True, True, False):
            review = await tool_review_crud.add_helpful_vote(db, review, (await make_user()).id, helpful)

        assert review.helpful_percentage == 67
        assert review.rating_display == "★★★★☆"


class TestReviewLifecycle:
    async def test_response(self, db, make_tool, make_user):
        tool = await make_tool()
        admin = await make_user(role="admin", first_name="Site", last_name="Admin")
        author = await make_user()
        review = await add_review(db, tool.id, author.id, 2)

        await tool_review_crud.add_response(db, review, admin.id, "Thanks, fixed.")
        mine = await tool_review_crud.get_user_review(db, tool.id, author.id)
        assert mine.response.message == "Thanks, fixed."
        assert mine.response.responder_name == "Site Admin"

    async def test_flag_keeps_review_visible(self, db, make_tool, make_user):
        tool = await make_tool()
        review = await add_review(db, tool.id, (await make_user()).id, 1)

        review = await tool_review_crud.flag(db, review, "spam")
        assert review.flagged is True
        assert review.flag_reason == "spam"
        assert review.is_active is True

    async def test_moderation_rejection_hides_review(self, db, make_tool, make_user):
        tool = await make_tool()
        moderator = await make_user(role="admin")
        review = await add_review(db, tool.id, (await make_user()).id, 1)

        review = await tool_review_crud.moderate(db, review, moderator.id, approved=False)
        assert review.is_active is False
        assert review.flagged is True
        assert review.moderated_by == moderator.id

        reviews, total = await tool_review_crud.list_by_tool(db, tool.id)
        assert total == 0

    async def test_recent_reviews_with_author(self, db, make_tool, make_user):
        tool = await make_tool()
        author = await make_user(first_name="Tirunesh", last_name="Dibaba", profile_image="/img/t.png")
        await add_review(db, tool.id, author.id, 5, comment="Great")

        recent = await tool_review_crud.get_recent_reviews(db, tool.id, limit=5)
        assert len(recent) == 1
        assert recent[0].user_name == "Tirunesh Dibaba"
        assert recent[0].user_profile_image == "/img/t.png"
        assert recent[0].response is None

    async def test_list_filters_by_rating(self, db, make_tool, make_user):
        tool = await make_tool()
        for rating in (5, 4, 5):
            await add_review(db, tool.id, (await make_user()).id, rating)

        reviews, total = await tool_review_crud.list_by_tool(db, tool.id, page=1, limit=1, rating=5)
        assert total == 2
        assert len(reviews) == 1

    async def test_user_without_review(self, db, make_tool, make_user):
        tool = await make_tool()
        user = await make_user()
        assert await tool_review_crud.get_user_review(db, tool.id, user.id) is None

    async def test_delete_removes_votes(self, db, make_tool, make_user):
        tool = await make_tool()
        review = await add_review(db, tool.id, (await make_user()).id, 3)
        review = await tool_review_crud.add_helpful_vote(db, review, (await make_user()).id, True)
        review_id = review.id

        await tool_review_crud.delete(db, review)
        assert await tool_review_crud.get(db, review_id) is None
        assert await tool_review_crud.get_votes(db, review_id) == []


class TestHelpfulPercentage:
    def test_half_rounds_up(self):
        review = ToolReview(rating=4, helpful_count=1, total_votes=8)
        assert review.helpful_percentage == 13

    def test_no_votes(self):
        review = ToolReview(rating=4, helpful_count=0, total_votes=0)
        assert review.helpful_percentage == 0
