"""
tests/test_api_routes.py — FastAPI Route Integration Tests
============================================================

Covers auth guards, role gates, the stats/achievements payloads, the ledger
endpoints and error mapping, with repositories patched out.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from unittest.mock import AsyncMock

import asyncpg
import pytest

from auth import repository as auth_repository
from auth import security
from conftest import bearer, make_user
from core import media
from core.db import StoreUnavailableError
from interactions import repository as interactions_repository
from posts import repository as posts_repository
from stats import repository as stats_repository


@pytest.fixture
def student_counts(monkeypatch):
    monkeypatch.setattr(stats_repository, "count_likes_by_user", AsyncMock(return_value=4))
    monkeypatch.setattr(stats_repository, "count_saves_by_user", AsyncMock(return_value=2))
    monkeypatch.setattr(stats_repository, "count_comments_by_user", AsyncMock(return_value=0))


# ===========================================================================
# Health
# ===========================================================================
class TestHealthEndpoint:
    def test_health_returns_ok(self, client):
        resp = client.get("/api/health")
        assert resp.status_code == 200
        assert resp.json() == {"status": "OK", "message": "Fashion Hub is running!"}


# ===========================================================================
# Auth guards
# ===========================================================================
class TestAuthGuards:
    PROTECTED = [
        ("get", "/api/me"),
        ("get", "/api/my-posts"),
        ("get", "/api/teacher-stats"),
        ("get", "/api/student-stats"),
        ("get", "/api/student-achievements"),
        ("post", "/api/posts/1/like"),
        ("post", "/api/posts/1/save"),
        ("get", "/api/posts/1/like-status"),
        ("delete", "/api/posts/1"),
    ]

    @pytest.mark.parametrize("method, path", PROTECTED)
    def test_missing_token_is_401(self, client, method, path):
        resp = getattr(client, method)(path)
        assert resp.status_code == 401

    @pytest.mark.parametrize("method, path", PROTECTED)
    def test_garbage_token_is_401(self, client, known_users, method, path):
        resp = getattr(client, method)(path, headers={"Authorization": "Bearer not-a-jwt"})
        assert resp.status_code == 401
        assert resp.json()["detail"] == "Invalid token."

    def test_non_bearer_scheme_is_401(self, client):
        resp = client.get("/api/me", headers={"Authorization": "Basic abc"})
        assert resp.status_code == 401

    def test_deleted_user_is_401(self, client, known_users):
        ghost = make_user(404)
        resp = client.get("/api/me", headers=bearer(ghost))
        assert resp.status_code == 401
        assert resp.json()["detail"] == "User no longer exists"

    def test_me_returns_resolved_identity(self, client, student):
        resp = client.get("/api/me", headers=bearer(student))
        assert resp.status_code == 200
        assert resp.json() == {
            "success": True,
            "user": {
                "id": student.id,
                "username": student.username,
                "email": student.email,
                "role": "student",
            },
        }


# ===========================================================================
# Role gates
# ===========================================================================
class TestRoleGates:
    def test_teacher_cannot_read_student_stats(self, client, teacher):
        resp = client.get("/api/student-stats", headers=bearer(teacher))
        assert resp.status_code == 403

    def test_teacher_cannot_read_achievements(self, client, teacher):
        resp = client.get("/api/student-achievements", headers=bearer(teacher))
        assert resp.status_code == 403

    def test_student_cannot_read_teacher_stats(self, client, student):
        resp = client.get("/api/teacher-stats", headers=bearer(student))
        assert resp.status_code == 403


# ===========================================================================
# Statistics
# ===========================================================================
class TestStats:
    def test_teacher_stats(self, client, teacher, monkeypatch):
        totals = AsyncMock(
            return_value={"total_posts": 4, "blog_posts": 3, "social_posts": 1, "total_views": 120, "total_likes": 5}
        )
        monkeypatch.setattr(stats_repository, "author_post_totals", totals)

        resp = client.get("/api/teacher-stats", headers=bearer(teacher))
        assert resp.status_code == 200
        assert resp.json() == {
            "success": True,
            "stats": {
                "totalPosts": 4,
                "blogPosts": 3,
                "socialPosts": 1,
                "totalViews": 120,
                "totalLikes": 5,
                "engagementRate": 125,
            },
        }
        totals.assert_awaited_once_with(teacher.id)

    def test_teacher_stats_store_failure_is_500(self, client, teacher, monkeypatch):
        monkeypatch.setattr(
            stats_repository,
            "author_post_totals",
            AsyncMock(side_effect=StoreUnavailableError("down")),
        )
        resp = client.get("/api/teacher-stats", headers=bearer(teacher))
        assert resp.status_code == 500
        assert resp.json() == {"detail": "Internal server error."}

    def test_store_failure_log_keeps_traceback(self, client, teacher, monkeypatch, caplog):
        monkeypatch.setattr(
            stats_repository,
            "author_post_totals",
            AsyncMock(side_effect=StoreUnavailableError("down")),
        )
        with caplog.at_level(logging.ERROR, logger="main"):
            client.get("/api/teacher-stats", headers=bearer(teacher))

        records = [r for r in caplog.records if r.getMessage().startswith("store_unavailable")]
        assert len(records) == 1
        assert records[0].exc_info is not None
        assert records[0].exc_info[0] is StoreUnavailableError

    def test_student_stats(self, client, student, student_counts):
        resp = client.get("/api/student-stats", headers=bearer(student))
        assert resp.status_code == 200
        stats = resp.json()["stats"]
        assert stats["likedPosts"] == 4
        assert stats["savedPosts"] == 2
        assert stats["categoriesExplored"] == 3
        assert stats["explorationProgress"] == 50
        assert stats["engagementLevel"] == "Beginner"
        assert stats["learningStreak"] == 3

    def test_student_stats_survive_comment_failure(self, client, student, student_counts, monkeypatch):
        monkeypatch.setattr(
            stats_repository,
            "count_comments_by_user",
            AsyncMock(side_effect=StoreUnavailableError("comments gone")),
        )
        resp = client.get("/api/student-stats", headers=bearer(student))
        assert resp.status_code == 200
        assert resp.json()["stats"]["commentsMade"] == 0

    def test_student_achievements(self, client, student, student_counts):
        resp = client.get("/api/student-achievements", headers=bearer(student))
        assert resp.status_code == 200
        body = resp.json()
        assert body["success"] is True
        assert body["totalAchievements"] == 6
        assert len(body["achievements"]) == 6
        unlocked = {a["id"] for a in body["achievements"] if a["unlocked"]}
        assert unlocked == {"first_like", "first_save", "three_day_streak", "category_explorer"}
        assert body["unlockedCount"] == 4
        assert body["progress"] == 67


# ===========================================================================
# Ledger endpoints
# ===========================================================================
class TestInteractions:
    def test_like_toggle(self, client, student, monkeypatch):
        monkeypatch.setattr(posts_repository, "post_exists", AsyncMock(return_value=True))
        toggle = AsyncMock(side_effect=[True, False])
        monkeypatch.setattr(interactions_repository, "toggle_fact", toggle)

        first = client.post("/api/posts/10/like", headers=bearer(student))
        second = client.post("/api/posts/10/like", headers=bearer(student))

        assert first.json() == {"success": True, "liked": True, "message": "Post liked"}
        assert second.json() == {"success": True, "liked": False, "message": "Post unliked"}

    def test_save_toggle(self, client, student, monkeypatch):
        monkeypatch.setattr(posts_repository, "post_exists", AsyncMock(return_value=True))
        monkeypatch.setattr(interactions_repository, "toggle_fact", AsyncMock(return_value=True))

        resp = client.post("/api/posts/10/save", headers=bearer(student))
        assert resp.json() == {"success": True, "saved": True, "message": "Post saved"}

    def test_like_missing_post_is_404(self, client, student, monkeypatch):
        monkeypatch.setattr(posts_repository, "post_exists", AsyncMock(return_value=False))
        toggle = AsyncMock()
        monkeypatch.setattr(interactions_repository, "toggle_fact", toggle)

        resp = client.post("/api/posts/999/like", headers=bearer(student))
        assert resp.status_code == 404
        toggle.assert_not_awaited()

    def test_like_on_post_deleted_mid_toggle_is_404(self, client, student, monkeypatch):
        monkeypatch.setattr(posts_repository, "post_exists", AsyncMock(return_value=True))
        monkeypatch.setattr(
            interactions_repository,
            "toggle_fact",
            AsyncMock(side_effect=asyncpg.ForeignKeyViolationError("likes_post_id_fkey")),
        )

        resp = client.post("/api/posts/10/like", headers=bearer(student))
        assert resp.status_code == 404
        assert resp.json() == {"detail": "Post not found"}

    def test_comment_on_post_deleted_mid_insert_is_404(self, client, student, monkeypatch):
        monkeypatch.setattr(posts_repository, "post_exists", AsyncMock(return_value=True))
        monkeypatch.setattr(
            interactions_repository,
            "insert_comment",
            AsyncMock(side_effect=asyncpg.ForeignKeyViolationError("comments_post_id_fkey")),
        )

        resp = client.post("/api/posts/10/comments", json={"content": "Nice"}, headers=bearer(student))
        assert resp.status_code == 404
        assert resp.json() == {"detail": "Post not found"}

    def test_like_status(self, client, student, monkeypatch):
        monkeypatch.setattr(interactions_repository, "fact_exists", AsyncMock(return_value=True))
        monkeypatch.setattr(interactions_repository, "count_facts_for_post", AsyncMock(return_value=12))

        resp = client.get("/api/posts/10/like-status", headers=bearer(student))
        assert resp.json() == {"success": True, "liked": True, "likeCount": 12}

    def test_view_count_failure_is_soft(self, client, monkeypatch):
        monkeypatch.setattr(
            posts_repository,
            "increment_view_count",
            AsyncMock(side_effect=StoreUnavailableError("down")),
        )
        resp = client.post("/api/posts/10/view")
        assert resp.status_code == 200
        assert resp.json() == {"success": False}

    def test_view_count(self, client, monkeypatch):
        bump = AsyncMock(return_value=True)
        monkeypatch.setattr(posts_repository, "increment_view_count", bump)
        resp = client.post("/api/posts/10/view")
        assert resp.json() == {"success": True}
        bump.assert_awaited_once_with(10)

    def test_add_comment(self, client, student, monkeypatch):
        monkeypatch.setattr(posts_repository, "post_exists", AsyncMock(return_value=True))
        created = datetime(2026, 3, 1, tzinfo=timezone.utc)
        insert = AsyncMock(
            return_value={
                "id": 3,
                "post_id": 10,
                "user_id": student.id,
                "author_name": student.username,
                "content": "Love the drape",
                "created_at": created,
            }
        )
        monkeypatch.setattr(interactions_repository, "insert_comment", insert)

        resp = client.post("/api/posts/10/comments", json={"content": "  Love the drape "}, headers=bearer(student))
        assert resp.status_code == 200
        assert resp.json()["comment"]["content"] == "Love the drape"
        insert.assert_awaited_once_with(user_id=student.id, post_id=10, content="Love the drape")

    def test_blank_comment_is_rejected(self, client, student, monkeypatch):
        monkeypatch.setattr(posts_repository, "post_exists", AsyncMock(return_value=True))
        resp = client.post("/api/posts/10/comments", json={"content": "   "}, headers=bearer(student))
        assert resp.status_code == 400


# ===========================================================================
# Posts
# ===========================================================================
class TestPosts:
    def test_delete_not_owned_is_404(self, client, student, monkeypatch):
        monkeypatch.setattr(posts_repository, "get_owned_post", AsyncMock(return_value=None))
        delete = AsyncMock()
        monkeypatch.setattr(posts_repository, "delete_post", delete)

        resp = client.delete("/api/posts/5", headers=bearer(student))
        assert resp.status_code == 404
        assert resp.json()["detail"] == "Post not found or access denied"
        delete.assert_not_awaited()

    def test_delete_survives_image_destroy_failure(self, client, teacher, monkeypatch):
        monkeypatch.setattr(
            posts_repository,
            "get_owned_post",
            AsyncMock(return_value={"id": 5, "author_id": teacher.id, "image_public_id": "fashion-hub/abc"}),
        )
        destroy = AsyncMock(side_effect=media.MediaStoreError("cloud down"))
        monkeypatch.setattr(media, "destroy_image", destroy)
        delete = AsyncMock(return_value=True)
        monkeypatch.setattr(posts_repository, "delete_post", delete)

        resp = client.delete("/api/posts/5", headers=bearer(teacher))
        assert resp.status_code == 200
        assert resp.json() == {"success": True, "message": "Post deleted successfully"}
        destroy.assert_awaited_once_with("fashion-hub/abc")
        delete.assert_awaited_once_with(5)

    def test_create_text_post(self, client, student, monkeypatch):
        insert = AsyncMock(return_value={"id": 8, "title": "Hello", "post_type": "social"})
        monkeypatch.setattr(posts_repository, "insert_post", insert)

        resp = client.post(
            "/api/posts",
            data={"title": "Hello", "content": "First look", "post_type": "social"},
            headers=bearer(student),
        )
        assert resp.status_code == 200
        assert resp.json()["post"]["id"] == 8
        kwargs = insert.await_args.kwargs
        assert kwargs["author_id"] == student.id
        assert kwargs["post_type"] == "social"
        assert kwargs["image_url"] is None

    def test_create_post_with_image(self, client, teacher, monkeypatch):
        upload = AsyncMock(return_value=media.UploadedImage(url="https://img/x.jpg", public_id="fashion-hub/x"))
        monkeypatch.setattr(media, "upload_image", upload)
        insert = AsyncMock(return_value={"id": 9})
        monkeypatch.setattr(posts_repository, "insert_post", insert)

        resp = client.post(
            "/api/posts",
            data={"title": "Lookbook", "content": "Spring"},
            files={"image": ("look.png", b"\x89PNG....", "image/png")},
            headers=bearer(teacher),
        )
        assert resp.status_code == 200
        kwargs = insert.await_args.kwargs
        assert kwargs["image_url"] == "https://img/x.jpg"
        assert kwargs["image_public_id"] == "fashion-hub/x"
        assert kwargs["post_type"] == "blog"

    def test_create_post_unknown_category_is_400(self, client, student, monkeypatch):
        monkeypatch.setattr(
            posts_repository,
            "insert_post",
            AsyncMock(side_effect=asyncpg.ForeignKeyViolationError("posts_category_id_fkey")),
        )

        resp = client.post(
            "/api/posts",
            data={"title": "Hello", "content": "First look", "category_id": "999"},
            headers=bearer(student),
        )
        assert resp.status_code == 400
        assert resp.json() == {"detail": "Invalid category"}

    def test_create_post_unknown_category_destroys_uploaded_image(self, client, teacher, monkeypatch):
        upload = AsyncMock(return_value=media.UploadedImage(url="https://img/x.jpg", public_id="fashion-hub/x"))
        monkeypatch.setattr(media, "upload_image", upload)
        destroy = AsyncMock(return_value=True)
        monkeypatch.setattr(media, "destroy_image", destroy)
        monkeypatch.setattr(
            posts_repository,
            "insert_post",
            AsyncMock(side_effect=asyncpg.ForeignKeyViolationError("posts_category_id_fkey")),
        )

        resp = client.post(
            "/api/posts",
            data={"title": "Lookbook", "content": "Spring", "category_id": "999"},
            files={"image": ("look.png", b"\x89PNG....", "image/png")},
            headers=bearer(teacher),
        )
        assert resp.status_code == 400
        assert resp.json() == {"detail": "Invalid category"}
        destroy.assert_awaited_once_with("fashion-hub/x")

    def test_upload_rejects_non_image(self, client, student, monkeypatch):
        upload = AsyncMock()
        monkeypatch.setattr(media, "upload_image", upload)

        resp = client.post(
            "/api/upload",
            files={"image": ("notes.txt", b"hello", "text/plain")},
            headers=bearer(student),
        )
        assert resp.status_code == 400
        upload.assert_not_awaited()

    def test_upload_rejects_oversize_image(self, client, student, monkeypatch):
        monkeypatch.setenv("MAX_IMAGE_BYTES", "8")
        upload = AsyncMock()
        monkeypatch.setattr(media, "upload_image", upload)

        resp = client.post(
            "/api/upload",
            files={"image": ("big.jpg", b"0123456789", "image/jpeg")},
            headers=bearer(student),
        )
        assert resp.status_code == 413
        upload.assert_not_awaited()

    def test_list_posts_ignores_unknown_type(self, client, monkeypatch):
        listing = AsyncMock(return_value=[])
        monkeypatch.setattr(posts_repository, "list_posts", listing)

        resp = client.get("/api/posts", params={"type": "video", "author": "ana"})
        assert resp.json() == {"success": True, "posts": []}
        listing.assert_awaited_once_with(post_type=None, category_id=None, author="ana")

    def test_list_posts_filters_by_type(self, client, monkeypatch):
        listing = AsyncMock(return_value=[])
        monkeypatch.setattr(posts_repository, "list_posts", listing)

        client.get("/api/posts", params={"type": "blog", "category": 2})
        listing.assert_awaited_once_with(post_type="blog", category_id=2, author=None)


# ===========================================================================
# Register / login
# ===========================================================================
class TestAuthFlow:
    def test_register_duplicate(self, client, monkeypatch):
        monkeypatch.setattr(auth_repository, "user_exists", AsyncMock(return_value=True))
        resp = client.post(
            "/api/register",
            json={"username": "ana", "email": "ana@example.com", "password": "secret123"},
        )
        assert resp.status_code == 400
        assert resp.json()["detail"] == "User already exists"

    def test_register_defaults_to_student(self, client, monkeypatch):
        monkeypatch.setattr(auth_repository, "user_exists", AsyncMock(return_value=False))
        create = AsyncMock(
            return_value={"id": 11, "username": "ana", "email": "ana@example.com", "role": "student"}
        )
        monkeypatch.setattr(auth_repository, "create_user", create)

        resp = client.post(
            "/api/register",
            json={"username": "ana", "email": "ana@example.com", "password": "secret123"},
        )
        assert resp.status_code == 200
        body = resp.json()
        assert body["user"]["role"] == "student"
        assert create.await_args.kwargs["role"] == "student"
        claims = security.decode_access_token(body["token"])
        assert claims["sub"] == "11"
        assert claims["role"] == "student"

    def test_register_rejects_unknown_role(self, client):
        resp = client.post(
            "/api/register",
            json={"username": "ana", "email": "ana@example.com", "password": "secret123", "role": "admin"},
        )
        assert resp.status_code == 422

    def test_login_bad_password(self, client, monkeypatch):
        row = {
            "id": 11,
            "username": "ana",
            "email": "ana@example.com",
            "role": "teacher",
            "password_hash": security.hash_password("right-password"),
        }
        monkeypatch.setattr(auth_repository, "get_user_by_email", AsyncMock(return_value=row))

        bad = client.post("/api/login", json={"email": "ana@example.com", "password": "wrong"})
        assert bad.status_code == 401
        assert bad.json()["detail"] == "Invalid credentials"

        good = client.post("/api/login", json={"email": "ana@example.com", "password": "right-password"})
        assert good.status_code == 200
        assert good.json()["user"]["role"] == "teacher"

    def test_login_unknown_email(self, client, monkeypatch):
        monkeypatch.setattr(auth_repository, "get_user_by_email", AsyncMock(return_value=None))
        resp = client.post("/api/login", json={"email": "nobody@example.com", "password": "x"})
        assert resp.status_code == 401
