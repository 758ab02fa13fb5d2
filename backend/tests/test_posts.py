"""
unMute Backend: Post and Like Endpoint Tests
==============================================

What we test:
    ✅ Create requires a token and the three text fields
    ✅ Feed: newest first, fallback titles, normalized topics, topic filter
    ✅ Anonymous posts hide the author except from the author and admins
    ✅ Like toggling, like summary and likers
    ✅ Flagging sets is_flagged and flagged_at together
    ✅ Delete: owner or admin only; comments and likes go with the post
"""

import asyncio
from unittest.mock import MagicMock

import pytest
from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError

from unmute.models.post import Comment, Post, PostLike
from unmute.security import Principal
from unmute.services.post_service import post_service


async def create_post(client, headers, **overrides):
    body = {
        "title": "A hard week",
        "topic": "Anxiety",
        "content": "Writing it down helps.",
        "is_anonymous": False,
    }
    body.update(overrides)
    response = await client.post("/posts", json=body, headers=headers)
    assert response.status_code == 201, response.text
    return response.json()["data"]


async def insert_post(session, **fields):
    post = Post(**fields)
    session.add(post)
    await session.commit()
    return post.post_id


class TestCreatePost:

    @pytest.mark.asyncio
    async def test_create_post(self, test_client, user):
        post = await create_post(test_client, user["headers"], title="  Hello  ")

        assert post["user_id"] == user["id"]
        assert post["username"] == "alice"
        assert post["title"] == "Hello"
        assert post["topic"] == "Anxiety"
        assert post["is_flagged"] is False
        assert post["flagged_at"] is None
        assert post["like_count"] == 0

    @pytest.mark.asyncio
    async def test_create_requires_token(self, test_client):
        response = await test_client.post(
            "/posts", json={"title": "t", "topic": "x", "content": "c"}
        )
        assert response.status_code == 401

    @pytest.mark.asyncio
    async def test_missing_fields(self, test_client, user):
        response = await test_client.post(
            "/posts", json={"title": "t", "topic": "  ", "content": "c"}, headers=user["headers"]
        )
        assert response.status_code == 400
        assert response.json()["error"] == "Missing required fields"

    @pytest.mark.asyncio
    async def test_long_title_is_truncated(self, test_client, user):
        post = await create_post(test_client, user["headers"], title="x" * 400)
        assert len(post["title"]) == 255


class TestFeed:

    @pytest.mark.asyncio
    async def test_feed_newest_first(self, test_client, user):
        first = await create_post(test_client, user["headers"], title="first")
        second = await create_post(test_client, user["headers"], title="second")

        response = await test_client.get("/posts/public")

        assert response.status_code == 200
        ids = [p["post_id"] for p in response.json()["data"]]
        assert ids == [second["post_id"], first["post_id"]]

    @pytest.mark.asyncio
    async def test_feed_always_has_a_title(self, test_client, user, db_session):
        from_content = await insert_post(
            db_session, user_id=user["id"], title="   ", content="\n\n  First line  \nsecond", topic="Sleep"
        )
        untitled = await insert_post(
            db_session, user_id=user["id"], title=None, content="   ", topic=None
        )

        response = await test_client.get("/posts/public")
        by_id = {p["post_id"]: p for p in response.json()["data"]}

        assert by_id[from_content]["title"] == "First line"
        assert by_id[untitled]["title"] == f"Post {untitled}"
        for post in by_id.values():
            assert post["title"].strip()

    @pytest.mark.asyncio
    async def test_topics_are_normalized(self, test_client, user, db_session):
        spaced = await insert_post(
            db_session, user_id=user["id"], title="a", content="c", topic="  Self   care "
        )
        literal_null = await insert_post(
            db_session, user_id=user["id"], title="b", content="c", topic="NULL"
        )

        response = await test_client.get("/posts/public")
        by_id = {p["post_id"]: p for p in response.json()["data"]}

        assert by_id[spaced]["topic"] == "Self care"
        assert by_id[literal_null]["topic"] == "Other"

    @pytest.mark.asyncio
    async def test_topic_filter(self, test_client, user):
        anxiety = await create_post(test_client, user["headers"], topic="Anxiety")
        await create_post(test_client, user["headers"], topic="Sleep")

        response = await test_client.get("/posts/public", params={"topic": "Anxiety"})

        data = response.json()["data"]
        assert [p["post_id"] for p in data] == [anxiety["post_id"]]

    @pytest.mark.asyncio
    async def test_get_single_post_and_404(self, test_client, user):
        post = await create_post(test_client, user["headers"])

        response = await test_client.get(f"/posts/{post['post_id']}")
        assert response.status_code == 200
        assert response.json()["data"]["post_id"] == post["post_id"]

        missing = await test_client.get("/posts/99999")
        assert missing.status_code == 404
        assert missing.json()["error"] == "Post not found"


class TestAnonymousPosts:

    @pytest.mark.asyncio
    async def test_author_hidden_from_others(self, test_client, user, other_user, admin):
        post = await create_post(test_client, user["headers"], is_anonymous=True)
        url = f"/posts/{post['post_id']}"

        public = (await test_client.get(url)).json()["data"]
        assert public["user_id"] is None
        assert public["username"] is None

        as_other = (await test_client.get(url, headers=other_user["headers"])).json()["data"]
        assert as_other["user_id"] is None

        as_author = (await test_client.get(url, headers=user["headers"])).json()["data"]
        assert as_author["user_id"] == user["id"]

        as_admin = (await test_client.get(url, headers=admin["headers"])).json()["data"]
        assert as_admin["username"] == "alice"

    @pytest.mark.asyncio
    async def test_author_can_still_delete(self, test_client, user):
        post = await create_post(test_client, user["headers"], is_anonymous=True)
        response = await test_client.delete(f"/posts/{post['post_id']}", headers=user["headers"])
        assert response.status_code == 200


class TestLikes:

    @pytest.mark.asyncio
    async def test_toggle_like(self, test_client, user, other_user):
        post = await create_post(test_client, user["headers"])
        url = f"/posts/{post['post_id']}/like"

        liked = await test_client.post(url, headers=other_user["headers"])
        assert liked.status_code == 200
        assert liked.json()["data"]["action"] == "liked"
        assert liked.json()["data"]["like_count"] == 1
        assert liked.json()["data"]["like_id"] is not None

        unliked = await test_client.post(url, headers=other_user["headers"])
        assert unliked.json()["data"]["action"] == "unliked"
        assert unliked.json()["data"]["like_count"] == 0

    @pytest.mark.asyncio
    async def test_like_summary_and_likers(self, test_client, user, other_user):
        post = await create_post(test_client, user["headers"])
        post_id = post["post_id"]
        await test_client.post(f"/posts/{post_id}/like", headers=other_user["headers"])

        mine = await test_client.get(f"/posts/{post_id}/likes", headers=other_user["headers"])
        assert mine.json()["data"] == {"count": 1, "liked_by_user": True}

        anonymous = await test_client.get(f"/posts/{post_id}/likes")
        assert anonymous.json()["data"] == {"count": 1, "liked_by_user": False}

        likers = (await test_client.get(f"/posts/{post_id}/likers")).json()["data"]
        assert [(liker["user_id"], liker["username"]) for liker in likers] == [(other_user["id"], "bob")]

        feed = (await test_client.get("/posts/public")).json()["data"]
        assert feed[0]["like_count"] == 1

    @pytest.mark.asyncio
    async def test_like_missing_post(self, test_client, user):
        response = await test_client.post("/posts/424242/like", headers=user["headers"])
        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_double_click_like_toggles(self, test_client, user, other_user):
        post = await create_post(test_client, user["headers"])
        url = f"/posts/{post['post_id']}/like"

        first, second = await asyncio.gather(
            test_client.post(url, headers=other_user["headers"]),
            test_client.post(url, headers=other_user["headers"]),
        )

        assert [first.status_code, second.status_code] == [200, 200]
        actions = sorted([first.json()["data"]["action"], second.json()["data"]["action"]])
        assert actions == ["liked", "unliked"]
        summary = await test_client.get(f"/posts/{post['post_id']}/likes")
        assert summary.json()["data"]["count"] == 0

    @pytest.mark.asyncio
    async def test_duplicate_key_on_insert_unlikes(self, mock_db_session):
        principal = Principal(id=7)
        existing = PostLike(post_id=3, user_id=7)

        missing_result = MagicMock()
        missing_result.scalar_one_or_none.return_value = None
        existing_result = MagicMock()
        existing_result.scalar_one_or_none.return_value = existing
        count_result = MagicMock()
        count_result.scalar.return_value = 0

        mock_db_session.get.return_value = Post(post_id=3, user_id=1, content="x")
        mock_db_session.execute.side_effect = [missing_result, existing_result, count_result]
        mock_db_session.flush.side_effect = [
            IntegrityError("INSERT INTO PostLikes", {}, Exception("UNIQUE constraint failed")),
            None,
        ]

        result = await post_service.toggle_like(mock_db_session, principal, 3)

        assert result.action == "unliked"
        assert result.like_count == 0
        mock_db_session.rollback.assert_awaited_once()
        mock_db_session.delete.assert_awaited_once_with(existing)


class TestFlagAndDelete:

    @pytest.mark.asyncio
    async def test_flag_sets_both_fields(self, test_client, user, other_user):
        post = await create_post(test_client, user["headers"])

        response = await test_client.post(
            f"/posts/{post['post_id']}/flag", headers=other_user["headers"]
        )
        assert response.status_code == 200

        data = (await test_client.get(f"/posts/{post['post_id']}")).json()["data"]
        assert data["is_flagged"] is True
        assert data["flagged_at"] is not None

    @pytest.mark.asyncio
    async def test_flag_requires_token(self, test_client, user):
        post = await create_post(test_client, user["headers"])
        response = await test_client.post(f"/posts/{post['post_id']}/flag")
        assert response.status_code == 401

    @pytest.mark.asyncio
    async def test_non_owner_cannot_delete(self, test_client, user, other_user):
        post = await create_post(test_client, user["headers"])

        response = await test_client.delete(
            f"/posts/{post['post_id']}", headers=other_user["headers"]
        )

        assert response.status_code == 403
        assert (await test_client.get(f"/posts/{post['post_id']}")).status_code == 200

    @pytest.mark.asyncio
    async def test_delete_removes_comments_and_likes(
        self, test_client, user, other_user, db_session
    ):
        post = await create_post(test_client, user["headers"])
        post_id = post["post_id"]
        await test_client.post(f"/posts/{post_id}/like", headers=other_user["headers"])
        await test_client.post(
            f"/posts/{post_id}/comments", json={"content": "hang in there"},
            headers=other_user["headers"],
        )

        response = await test_client.delete(f"/posts/{post_id}", headers=user["headers"])
        assert response.status_code == 200

        for model in (Post, PostLike, Comment):
            count = await db_session.scalar(
                select(func.count()).select_from(model).where(model.post_id == post_id)
            )
            assert count == 0

    @pytest.mark.asyncio
    async def test_admin_can_delete_any_post(self, test_client, user, admin):
        post = await create_post(test_client, user["headers"])
        response = await test_client.delete(f"/posts/{post['post_id']}", headers=admin["headers"])
        assert response.status_code == 200

    @pytest.mark.asyncio
    async def test_delete_missing_post(self, test_client, user):
        response = await test_client.delete("/posts/99999", headers=user["headers"])
        assert response.status_code == 404
