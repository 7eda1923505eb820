import logging
from typing import List, Optional

from pydantic import ValidationError

from wanderai.core.errors import (
    DuplicateUserError,
    IncorrectPasswordError,
    InvalidCredentialsError,
    UserNotFoundError,
)
from wanderai.core.storage import KEY_PREFIX, KeyValueStore, generate_id
from wanderai.models.domain import PublicUser, UserRecord
from wanderai.services.itineraries import ItineraryRepository

logger = logging.getLogger("wanderai_server.auth")

USERS_KEY = f"{KEY_PREFIX}users"
CURRENT_USER_EMAIL_KEY = f"{KEY_PREFIX}currentUserEmail"


class SessionContext:
    """
    The single "current user" pointer of a store.

    `load()` reads the persisted email, `start()` sets it on login and
    `clear()` removes it on logout.
    """

    def __init__(self, store: KeyValueStore):
        self.store = store
        self.email: Optional[str] = None

    def load(self) -> Optional[str]:
        self.email = self.store.get(CURRENT_USER_EMAIL_KEY) or None
        return self.email

    def start(self, email: str) -> None:
        self.store.set(CURRENT_USER_EMAIL_KEY, email)
        self.email = email

    def clear(self) -> None:
        self.store.remove(CURRENT_USER_EMAIL_KEY)
        self.email = None

    @property
    def active(self) -> bool:
        return self.email is not None


class UserDirectory:
    """
    Email-keyed user records kept under one store key.

    Passwords are stored and compared as given. This is demo-grade and must
    not be used where real credentials are involved.
    """

    def __init__(
        self,
        store: KeyValueStore,
        session: Optional[SessionContext] = None,
        itineraries: Optional[ItineraryRepository] = None,
    ):
        self.store = store
        self.session = session or SessionContext(store)
        self.itineraries = itineraries or ItineraryRepository(store)

    def _load_users(self) -> List[UserRecord]:
        raw = self.store.get_json(USERS_KEY, [])
        if not isinstance(raw, list):
            logger.error("User directory is not a list, ignoring")
            return []
        users = []
        for item in raw:
            try:
                users.append(UserRecord.model_validate(item))
            except ValidationError as e:
                logger.error(f"Skipping malformed user record: {e}")
        return users

    def _save_users(self, users: List[UserRecord]) -> None:
        self.store.set_json(USERS_KEY, [u.model_dump(by_alias=True) for u in users])

    def _find(self, users: List[UserRecord], email: str) -> Optional[UserRecord]:
        return next((u for u in users if u.email == email), None)

    def register(self, name: str, email: str, password: str) -> PublicUser:
        users = self._load_users()
        if self._find(users, email):
            raise DuplicateUserError()

        user = UserRecord(id=generate_id(), name=name, email=email, password=password)
        users.append(user)
        self._save_users(users)
        logger.info(f"Registered user {email}")
        return PublicUser.from_record(user)

    def login(self, email: str, password: str) -> PublicUser:
        user = self._find(self._load_users(), email)
        if not user:
            raise UserNotFoundError()
        if user.password != password:
            logger.warning(f"Failed login attempt for {email}")
            raise InvalidCredentialsError()

        self.session.start(email)
        logger.info(f"User {email} logged in")
        return PublicUser.from_record(user)

    def logout(self) -> None:
        self.session.clear()

    def get_current_user(self) -> Optional[PublicUser]:
        email = self.session.load()
        if not email:
            return None
        user = self._find(self._load_users(), email)
        return PublicUser.from_record(user) if user else None

    def is_logged_in(self) -> bool:
        return self.session.load() is not None

    def update_profile(self, email: str, name: str) -> PublicUser:
        users = self._load_users()
        user = self._find(users, email)
        if not user:
            raise UserNotFoundError("User not found for update.")

        user.name = name
        self._save_users(users)
        return PublicUser.from_record(user)

    def change_password(self, email: str, current_password: str, new_password: str) -> None:
        users = self._load_users()
        user = self._find(users, email)
        if not user:
            raise UserNotFoundError("User not found.")
        if user.password != current_password:
            raise IncorrectPasswordError()

        user.password = new_password
        self._save_users(users)
        logger.info(f"Password changed for {email}")

    def delete_account(self, email: str) -> None:
        """Removes the user, their itineraries and chats, and ends their session."""
        users = self._load_users()
        if not self._find(users, email):
            raise UserNotFoundError()

        self.itineraries.delete_all(email)
        self._save_users([u for u in users if u.email != email])
        if self.session.load() == email:
            self.session.clear()
        logger.info(f"Deleted account {email}")
