"""
Tests for account-side services: roles, profiles, favourites, chat, admin dashboard.
"""
from __future__ import annotations

from pathlib import Path

import pytest

import sys
sys.path.insert(0, str(Path(__file__).resolve().parent.parent.parent))

from sideline.persistence.db import get_connection, init_db, set_db_path
from sideline.services.admin_service import AdminService
from sideline.services.chat_service import ChatService
from sideline.services.errors import EmptyMessageError, InvalidRoleError, NotMessageOwnerError
from sideline.services.favorites_service import FavoritesService
from sideline.services.match_service import MatchService
from sideline.services.profile_service import ProfileService
from sideline.services.role_service import RoleService
from sideline.services.team_service import TeamService


@pytest.fixture
def db_conn(tmp_path):
    db_path = tmp_path / "accounts_test.db"
    set_db_path(db_path)
    init_db(db_path=db_path)
    conn = get_connection()
    try:
        yield conn
    finally:
        conn.close()


@pytest.fixture
def role_service():
    return RoleService()


@pytest.fixture
def alice(db_conn, role_service):
    assert role_service.create_user_profile(db_conn, "alice-id", "alice@example.com")
    return "alice-id"


@pytest.fixture
def match_id(db_conn):
    TeamService().create_team(db_conn, "FC Lions")
    return MatchService().create_match(
        db_conn, {"team_id": "fc-lions", "opponent_name": "Rivals", "date": "2024-04-01"}
    )


# ---------- Roles ----------


def test_create_user_profile_defaults_to_fan(db_conn, role_service, alice):
    user = role_service.get_user_role(db_conn, alice)
    assert user.email == "alice@example.com"
    assert user.role == "Fan"
    assert role_service.is_fan(db_conn, alice)
    assert not role_service.is_coach(db_conn, alice)
    assert ProfileService().get_profile(db_conn, alice).display_name == "alice"


def test_create_user_profile_duplicate_email_is_false(db_conn, role_service, alice):
    assert role_service.create_user_profile(db_conn, "other-id", "alice@example.com") is False
    assert role_service.get_user_role(db_conn, "other-id") is None


def test_create_user_profile_rejects_bad_role(db_conn, role_service):
    with pytest.raises(InvalidRoleError):
        role_service.create_user_profile(db_conn, "x", "x@example.com", role="Owner")


def test_update_user_role(db_conn, role_service, alice):
    assert role_service.update_user_role(db_conn, alice, "Coach")
    assert role_service.is_coach(db_conn, alice)
    assert role_service.update_user_role(db_conn, "missing", "Coach") is False
    with pytest.raises(InvalidRoleError):
        role_service.update_user_role(db_conn, alice, "coach")


def test_role_checks_for_unknown_user(db_conn, role_service):
    assert role_service.get_user_role(db_conn, "nobody") is None
    assert not role_service.is_admin(db_conn, "nobody")


# ---------- Profiles ----------


def test_upsert_and_ensure_profile(db_conn, alice):
    profiles = ProfileService()
    assert profiles.upsert_profile(db_conn, alice, "Ali", "Season ticket holder", "https://x/a.png")
    profile = profiles.get_profile(db_conn, alice)
    assert (profile.display_name, profile.bio) == ("Ali", "Season ticket holder")
    assert profile.updated_at is not None
    assert profiles.ensure_profile(db_conn, alice)
    assert profiles.get_profile(db_conn, alice).display_name == "Ali"


def test_profile_for_unknown_user_fails(db_conn):
    assert ProfileService().upsert_profile(db_conn, "nobody", "X") is False


# ---------- Favourites ----------


def test_favorites(db_conn, alice, match_id):
    TeamService().create_team(db_conn, "Rivals")
    favs = FavoritesService()
    assert favs.add_favorite(db_conn, alice, "fc-lions")
    assert favs.add_favorite(db_conn, alice, "fc-lions")
    assert favs.add_favorite(db_conn, alice, "rivals")
    assert favs.list_favorites(db_conn, alice) == ["fc-lions", "rivals"]
    assert favs.is_favorite(db_conn, alice, "rivals")
    assert favs.remove_favorite(db_conn, alice, "rivals")
    assert not favs.is_favorite(db_conn, alice, "rivals")


def test_toggle_favorite_returns_new_state(db_conn, alice, match_id):
    favs = FavoritesService()
    assert favs.toggle_favorite(db_conn, alice, "fc-lions") is True
    assert favs.toggle_favorite(db_conn, alice, "fc-lions") is False
    assert favs.list_favorites(db_conn, alice) == []


def test_favorite_unknown_team_fails(db_conn, alice):
    favs = FavoritesService()
    assert favs.add_favorite(db_conn, alice, "ghost") is False
    assert favs.toggle_favorite(db_conn, alice, "ghost") is None


# ---------- Chat ----------


def test_chat_send_trims_and_lists_oldest_first(db_conn, alice, match_id):
    chat = ChatService()
    first = chat.send_chat_message(db_conn, match_id, "alice", "  kick-off!  ", user_id=alice)
    chat.send_chat_message(db_conn, match_id, "guest", "goal")
    assert first.message == "kick-off!"
    assert [m.message for m in chat.list_chat_for_match(db_conn, match_id)] == ["kick-off!", "goal"]


def test_chat_blank_message_rejected(db_conn, match_id):
    with pytest.raises(EmptyMessageError):
        ChatService().send_chat_message(db_conn, match_id, "alice", "   ")


def test_chat_to_unknown_match_fails(db_conn):
    assert ChatService().send_chat_message(db_conn, "ghost", "alice", "hello") is None


def test_only_author_deletes_message(db_conn, role_service, alice, match_id):
    role_service.create_user_profile(db_conn, "bob-id", "bob@example.com")
    chat = ChatService()
    sent = chat.send_chat_message(db_conn, match_id, "alice", "mine", user_id=alice)
    with pytest.raises(NotMessageOwnerError):
        chat.delete_chat_message(db_conn, sent.id, "bob-id")
    assert chat.delete_chat_message(db_conn, sent.id, alice)
    assert chat.delete_chat_message(db_conn, sent.id, alice) is False


# ---------- Admin ----------


def test_delete_user_completely(db_conn, role_service, match_id):
    role_service.create_user_profile(db_conn, "coach-id", "coach@example.com", role="Coach")
    TeamService().update_team(db_conn, "fc-lions", {"coach_id": "coach-id"})
    FavoritesService().add_favorite(db_conn, "coach-id", "fc-lions")
    ChatService().send_chat_message(db_conn, match_id, "coach", "go lions", user_id="coach-id")

    assert AdminService().delete_user_completely(db_conn, "coach-id")

    assert role_service.get_user_role(db_conn, "coach-id") is None
    assert ProfileService().get_profile(db_conn, "coach-id") is None
    assert FavoritesService().list_favorites(db_conn, "coach-id") == []
    assert ChatService().list_chat_for_match(db_conn, match_id) == []
    team = TeamService().get_team(db_conn, "fc-lions")
    assert team is not None
    assert team.coach_id is None


def test_delete_unknown_user_is_false(db_conn):
    assert AdminService().delete_user_completely(db_conn, "nobody") is False


def test_admin_lists_users_newest_first(db_conn, role_service, alice):
    role_service.create_user_profile(db_conn, "bob-id", "bob@example.com", role="Coach")
    users = AdminService().list_users(db_conn)
    assert [u.id for u in users] == ["bob-id", alice]


def test_admin_lists_every_match_chat_newest_first(db_conn, alice, match_id):
    other = MatchService().create_match(
        db_conn, {"team_id": "fc-lions", "opponent_name": "Harbour", "date": "2024-04-08"}
    )
    chat = ChatService()
    chat.send_chat_message(db_conn, match_id, "alice", "first", user_id=alice)
    chat.send_chat_message(db_conn, other, "guest", "second")
    assert [m.message for m in AdminService().list_all_chats(db_conn)] == ["second", "first"]


def test_admin_deletes_message_regardless_of_author(db_conn, alice, match_id):
    sent = ChatService().send_chat_message(db_conn, match_id, "alice", "spam", user_id=alice)
    guest = ChatService().send_chat_message(db_conn, match_id, "guest", "anon spam")
    admin = AdminService()
    assert admin.delete_chat(db_conn, sent.id)
    assert admin.delete_chat(db_conn, guest.id)
    assert admin.delete_chat(db_conn, sent.id) is False
    assert ChatService().list_chat_for_match(db_conn, match_id) == []
