import pytest

from wanderai.core.errors import (
    DuplicateUserError,
    IncorrectPasswordError,
    InvalidCredentialsError,
    UserNotFoundError,
)
from wanderai.models.domain import ChatMessage, ItineraryDraft
from wanderai.services.auth import CURRENT_USER_EMAIL_KEY, USERS_KEY, UserDirectory
from wanderai.services.chat import ChatTranscriptStore

EMAIL = "traveler@example.com"


@pytest.fixture
def users(store):
    return UserDirectory(store)


def test_register_then_login(users):
    registered = users.register("Ada Lovelace", EMAIL, "secret123")
    assert registered.email == EMAIL
    assert registered.name == "Ada Lovelace"
    assert "password" not in registered.model_dump()

    logged_in = users.login(EMAIL, "secret123")
    assert logged_in.id == registered.id
    assert logged_in.name == "Ada Lovelace"
    assert "password" not in logged_in.model_dump(by_alias=True)
    assert users.session.email == EMAIL


def test_register_duplicate_email(users):
    users.register("Ada", EMAIL, "secret123")
    with pytest.raises(DuplicateUserError):
        users.register("Someone Else", EMAIL, "another1")


def test_login_unknown_email(users):
    with pytest.raises(UserNotFoundError):
        users.login("nobody@example.com", "secret123")


def test_login_wrong_password(users):
    users.register("Ada", EMAIL, "secret123")
    with pytest.raises(InvalidCredentialsError):
        users.login(EMAIL, "wrong-password")
    assert users.get_current_user() is None


def test_session_lifecycle(users, store):
    users.register("Ada", EMAIL, "secret123")
    assert users.get_current_user() is None
    assert not users.is_logged_in()

    users.login(EMAIL, "secret123")
    assert store.get(CURRENT_USER_EMAIL_KEY) == EMAIL
    # A fresh directory on the same store sees the persisted session
    assert UserDirectory(store).get_current_user().email == EMAIL

    users.logout()
    users.logout()
    assert users.get_current_user() is None
    assert store.get(CURRENT_USER_EMAIL_KEY) is None


def test_dangling_session_is_logged_out(users, store):
    store.set(CURRENT_USER_EMAIL_KEY, "ghost@example.com")
    assert users.get_current_user() is None


def test_update_profile_changes_name_only(users, store):
    original = users.register("Ada", EMAIL, "secret123")

    updated = users.update_profile(EMAIL, "Ada King")
    assert updated.name == "Ada King"
    assert updated.id == original.id
    assert users.login(EMAIL, "secret123").name == "Ada King"
    assert store.get_json(USERS_KEY)[0]["password"] == "secret123"


def test_update_profile_unknown_user(users):
    with pytest.raises(UserNotFoundError):
        users.update_profile("nobody@example.com", "Name")


def test_change_password(users):
    users.register("Ada", EMAIL, "secret123")
    users.change_password(EMAIL, "secret123", "newsecret")

    users.login(EMAIL, "newsecret")
    with pytest.raises(InvalidCredentialsError):
        users.login(EMAIL, "secret123")


def test_change_password_with_wrong_current_keeps_old(users):
    users.register("Ada", EMAIL, "secret123")
    with pytest.raises(IncorrectPasswordError):
        users.change_password(EMAIL, "not-it", "newsecret")

    assert users.login(EMAIL, "secret123").email == EMAIL


def test_change_password_unknown_user(users):
    with pytest.raises(UserNotFoundError):
        users.change_password("nobody@example.com", "a", "bcdefg")


def test_delete_account_cascades(users, store):
    users.register("Ada", EMAIL, "secret123")
    users.register("Bob", "bob@example.com", "secret123")
    users.login(EMAIL, "secret123")
    record = users.itineraries.save(
        EMAIL, ItineraryDraft(destination="Lisbon", content="Day 1: Arrive")
    )
    chats = ChatTranscriptStore(store)
    chats.save(EMAIL, record.id, [ChatMessage(role="user", content="Hi")])

    users.delete_account(EMAIL)

    assert users.get_current_user() is None
    assert users.itineraries.list(EMAIL) == []
    assert chats.load(EMAIL, record.id) == []
    with pytest.raises(UserNotFoundError):
        users.login(EMAIL, "secret123")
    assert users.login("bob@example.com", "secret123").name == "Bob"


def test_delete_account_unknown_user(users):
    with pytest.raises(UserNotFoundError):
        users.delete_account("nobody@example.com")


def test_corrupt_user_directory_reads_as_empty(users, store):
    store.set(USERS_KEY, "not json at all")
    with pytest.raises(UserNotFoundError):
        users.login(EMAIL, "secret123")
