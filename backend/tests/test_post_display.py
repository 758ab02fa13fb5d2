"""
unMute Backend: Post Display Helper Tests
===========================================

Title fallback, topic normalization, author hiding and the flag mixin.
"""

from datetime import datetime, timezone

import pytest

from unmute.models.post import Comment, Post
from unmute.security import Principal
from unmute.services.post_service import display_title, normalize_topic, to_post_out


class TestDisplayTitle:

    @pytest.mark.parametrize(
        "title, content, expected",
        [
            ("  My title ", "body", "My title"),
            ("", "first line\nsecond", "first line"),
            (None, "\n   \n  after blanks \n", "after blanks"),
            ("   ", "", "Post 9"),
            (None, None, "Post 9"),
        ],
    )
    def test_fallbacks(self, title, content, expected):
        assert display_title(title, content, 9) == expected

    def test_content_line_is_capped(self):
        assert len(display_title(None, "z" * 600, 1)) == 255


class TestNormalizeTopic:

    @pytest.mark.parametrize(
        "raw, expected",
        [
            ("Anxiety", "Anxiety"),
            ("  Self \t  care ", "Self care"),
            ("", "Other"),
            ("   ", "Other"),
            (None, "Other"),
            ("NULL", "Other"),
            ("null", "Other"),
        ],
    )
    def test_normalize(self, raw, expected):
        assert normalize_topic(raw) == expected


class TestToPostOut:

    def _post(self, **fields):
        defaults = dict(
            post_id=3,
            user_id=11,
            title="t",
            content="c",
            topic="x",
            is_anonymous=True,
            is_flagged=False,
            flagged_at=None,
            created_at=datetime.now(timezone.utc),
        )
        defaults.update(fields)
        return Post(**defaults)

    def test_anonymous_hidden_from_strangers(self):
        out = to_post_out(self._post(), "sam", Principal(id=12))
        assert out.user_id is None
        assert out.username is None

    def test_anonymous_visible_to_author_and_admin(self):
        assert to_post_out(self._post(), "sam", Principal(id=11)).username == "sam"
        assert to_post_out(self._post(), "sam", Principal(id=1, is_admin=True)).user_id == 11

    def test_public_post_shows_author_to_anonymous_viewer(self):
        out = to_post_out(self._post(is_anonymous=False), "sam", None, like_count=2)
        assert out.user_id == 11
        assert out.like_count == 2


class TestFlaggableMixin:

    @pytest.mark.parametrize("model", [Post, Comment])
    def test_flag_and_unflag_move_together(self, model):
        item = model()
        when = datetime(2024, 5, 1, tzinfo=timezone.utc)

        item.flag(when)
        assert item.is_flagged is True
        assert item.flagged_at == when

        item.unflag()
        assert item.is_flagged is False
        assert item.flagged_at is None

    def test_flag_defaults_to_now(self):
        item = Comment()
        item.flag()
        assert item.flagged_at is not None
