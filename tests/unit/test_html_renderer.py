"""Tests for the console's server-rendered HTML."""

from __future__ import annotations

from datetime import datetime

import pytest

from app.utils.html_renderer import ConsoleRenderer, format_date
from app.v1_0.entities import UsersPageDTO
from app.v1_0.schemas import PostOut, PreferencesOut, UserOut


def user(**overrides) -> UserOut:
    payload = {
        "id": "1",
        "username": "ada",
        "email": "ada@example.com",
        "name": "Ada",
        "roles": ["ADMIN", "USER"],
        "status": "ACTIVE",
        "createdAt": "2025-01-05T10:00:00",
        "updatedAt": "2025-02-10T10:00:00",
    }
    payload.update(overrides)
    return UserOut.model_validate(payload)


@pytest.fixture
def renderer() -> ConsoleRenderer:
    return ConsoleRenderer(app_name="Test Console")


def test_format_date() -> None:
    assert format_date(datetime(2025, 1, 5, 14, 3)) == "Jan 5, 2025"
    assert format_date(datetime(2025, 1, 5, 14, 3), with_time=True) == "Jan 5, 2025 14:03"
    assert format_date(None) == "-"


def test_user_payload_parsing() -> None:
    u = user(id=42, auditTrail=[{"action": "CREATED", "performedBy": "root", "timestamp": "2025-01-05T10:00:00"}])

    assert u.id == "42"
    assert u.audit_trail[0].performed_by == "root"


class TestUsersPage:
    def test_first_page(self, renderer) -> None:
        page = UsersPageDTO(users=[], total_pages=2, is_first=True, is_last=False, page_number=0)

        html = renderer.users_page(page, [user()])

        assert "Page 1 of 2" in html
        assert '<button class="btn" disabled>Previous</button>' in html
        assert 'href="?page=1">Next</a>' in html
        assert "Jan 5, 2025" in html
        assert "badge-destructive" in html
        assert "Deactivate" in html
        assert 'data-view="/users"' in html

    def test_row_numbers_continue_across_pages(self, renderer) -> None:
        page = UsersPageDTO(users=[], total_pages=3, is_first=False, is_last=True, page_number=2)

        html = renderer.users_page(page, [user(id="a"), user(id="b")])

        assert "<td>11</td>" in html
        assert "<td>12</td>" in html
        assert '<button class="btn" disabled>Next</button>' in html

    def test_empty_listing(self, renderer) -> None:
        html = renderer.users_page(UsersPageDTO(), [])

        assert "No users found" in html

    def test_text_is_escaped(self, renderer) -> None:
        html = renderer.users_page(UsersPageDTO(), [user(name="<script>x</script>")])

        assert "<script>x</script>" not in html
        assert "&lt;script&gt;" in html


class TestUserDetailPage:
    def test_without_preferences_offers_defaults(self, renderer) -> None:
        html = renderer.user_detail_page(user(status="INACTIVE"), None, [])

        assert "No preferences found" in html
        assert "Create Default Preferences" in html
        assert "No posts found" in html
        assert "Activate" in html
        assert "Audit Trail" not in html

    def test_full_detail(self, renderer) -> None:
        prefs = PreferencesOut.model_validate(
            {"theme": "dark", "language": "en", "notificationsEnabled": False, "updatedAt": "2025-03-01T00:00:00"}
        )
        posts = [PostOut.model_validate({"id": "p1", "title": "Hello", "content": "World"})]
        u = user(auditTrail=[{"action": "UPDATED", "performedBy": "root", "timestamp": "2025-03-01T09:30:00", "details": "status"}])

        html = renderer.user_detail_page(u, prefs, posts)

        assert "<strong>Theme:</strong> dark" in html
        assert "Disabled" in html
        assert 'action="/posts/p1/delete"' in html
        assert "Audit Trail" in html
        assert "Mar 1, 2025 09:30" in html
        assert 'data-view="/users/1"' in html


def test_add_user_page_banners(renderer) -> None:
    assert "User added successfully." in renderer.add_user_page(success=True)
    html = renderer.add_user_page(error="Failed to add user")
    assert "Failed to add user" in html
    for role in ("ADMIN", "EDITOR", "USER"):
        assert f'value="{role}"' in html


def test_error_page(renderer) -> None:
    html = renderer.error_page("Failed to fetch users")

    assert "Oops! Something went wrong." in html
    assert "Failed to fetch users" in html
    assert "Test Console" in html
