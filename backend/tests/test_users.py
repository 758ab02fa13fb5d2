"""
unMute Backend: User Profile Endpoint Tests
=============================================

What we test:
    ✅ Profile read and update, including uniqueness conflicts
    ✅ Password change with camelCase keys
    ✅ Account deletion requires the password and removes content
    ✅ Profile picture upload: type checks, replacement, serving
"""

from pathlib import Path

import pytest
from sqlalchemy import func, select

from unmute.models.post import Post
from unmute.models.user import User
from unmute.services.file_service import file_service


class TestProfile:

    @pytest.mark.asyncio
    async def test_get_profile(self, test_client, user):
        response = await test_client.get("/user/profile", headers=user["headers"])

        assert response.status_code == 200
        assert response.json()["data"] == {
            "id": user["id"],
            "email": "alice@example.com",
            "username": "alice",
            "is_admin": False,
            "profile_picture": None,
        }

    @pytest.mark.asyncio
    async def test_update_profile(self, test_client, user):
        response = await test_client.put(
            "/user/profile",
            json={"username": "alice2", "email": "Alice2@Example.com"},
            headers=user["headers"],
        )

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["username"] == "alice2"
        assert data["email"] == "alice2@example.com"

    @pytest.mark.asyncio
    async def test_update_nothing(self, test_client, user):
        response = await test_client.put("/user/profile", json={}, headers=user["headers"])
        assert response.status_code == 400
        assert response.json()["error"] == "Nothing to update"

    @pytest.mark.asyncio
    async def test_update_to_taken_values(self, test_client, user, other_user):
        taken_name = await test_client.put(
            "/user/profile", json={"username": "bob"}, headers=user["headers"]
        )
        assert taken_name.status_code == 409

        taken_email = await test_client.put(
            "/user/profile", json={"email": "bob@example.com"}, headers=user["headers"]
        )
        assert taken_email.status_code == 409

    @pytest.mark.asyncio
    async def test_keeping_own_username_is_not_a_conflict(self, test_client, user):
        response = await test_client.put(
            "/user/profile", json={"username": "alice"}, headers=user["headers"]
        )
        assert response.status_code == 200


class TestPassword:

    @pytest.mark.asyncio
    async def test_change_password(self, test_client, user):
        response = await test_client.put(
            "/user/password",
            json={"currentPassword": user["password"], "newPassword": "brand-new-pass"},
            headers=user["headers"],
        )
        assert response.status_code == 200

        old = await test_client.post(
            "/auth/login", json={"identifier": user["email"], "password": user["password"]}
        )
        assert old.status_code == 400
        new = await test_client.post(
            "/auth/login", json={"identifier": user["email"], "password": "brand-new-pass"}
        )
        assert new.status_code == 200

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "body",
        [
            {"newPassword": "brand-new-pass"},
            {"currentPassword": "secret123", "newPassword": "123"},
            {"currentPassword": "wrong-pass", "newPassword": "brand-new-pass"},
        ],
    )
    async def test_rejected_changes(self, test_client, user, body):
        response = await test_client.put("/user/password", json=body, headers=user["headers"])
        assert response.status_code == 400


class TestDeleteAccount:

    @pytest.mark.asyncio
    async def test_requires_correct_password(self, test_client, user):
        missing = await test_client.request(
            "DELETE", "/user/account", json={}, headers=user["headers"]
        )
        assert missing.status_code == 400

        wrong = await test_client.request(
            "DELETE", "/user/account", json={"password": "nope-nope"}, headers=user["headers"]
        )
        assert wrong.status_code == 400

    @pytest.mark.asyncio
    async def test_deletes_user_and_posts(self, test_client, user, db_session):
        await test_client.post(
            "/posts", json={"title": "t", "topic": "x", "content": "c"}, headers=user["headers"]
        )

        response = await test_client.request(
            "DELETE", "/user/account", json={"password": user["password"]},
            headers=user["headers"],
        )
        assert response.status_code == 200

        assert await db_session.scalar(select(func.count(User.id))) == 0
        assert await db_session.scalar(select(func.count(Post.post_id))) == 0

        # The token outlives the account, but the profile is gone
        profile = await test_client.get("/user/profile", headers=user["headers"])
        assert profile.status_code == 404


class TestProfilePicture:

    @pytest.mark.asyncio
    async def test_upload_and_serve(self, test_client, user, png_bytes):
        response = await test_client.post(
            "/user/profile/picture",
            files={"file": ("me.png", png_bytes, "image/png")},
            headers=user["headers"],
        )

        assert response.status_code == 200
        url = response.json()["data"]["profile_picture"]
        assert url.startswith("/files/avatars/")
        assert url.endswith(".png")

        served = await test_client.get(url)
        assert served.status_code == 200
        assert served.content == png_bytes

    @pytest.mark.asyncio
    async def test_replacing_removes_previous_file(self, test_client, user, png_bytes, jpeg_bytes):
        first = await test_client.post(
            "/user/profile/picture",
            files={"file": ("a.png", png_bytes, "image/png")},
            headers=user["headers"],
        )
        first_path = first.json()["data"]["profile_picture"][len("/files/"):]

        second = await test_client.post(
            "/user/profile/picture",
            files={"file": ("b.jpg", jpeg_bytes, "image/jpeg")},
            headers=user["headers"],
        )
        assert second.status_code == 200
        assert not (Path(file_service.storage_root) / first_path).exists()

    @pytest.mark.asyncio
    async def test_rejects_non_images(self, test_client, user):
        bad_ext = await test_client.post(
            "/user/profile/picture",
            files={"file": ("notes.txt", b"hello", "text/plain")},
            headers=user["headers"],
        )
        assert bad_ext.status_code == 400

        disguised = await test_client.post(
            "/user/profile/picture",
            files={"file": ("evil.png", b"MZ\x90\x00not an image", "image/png")},
            headers=user["headers"],
        )
        assert disguised.status_code == 400

    @pytest.mark.asyncio
    async def test_requires_token(self, test_client, png_bytes):
        response = await test_client.post(
            "/user/profile/picture", files={"file": ("me.png", png_bytes, "image/png")}
        )
        assert response.status_code == 401


class TestFilesRoute:

    @pytest.mark.asyncio
    async def test_missing_file(self, test_client):
        response = await test_client.get("/files/avatars/2024/01/nothing.png")
        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_path_escaping_storage_root(self, test_client):
        # Encoded dots survive client-side URL normalization
        response = await test_client.get("/files/%2E%2E/%2E%2E/etc/passwd")
        assert response.status_code in (400, 404)
        assert response.json()["status"] == "error"
