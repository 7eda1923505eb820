import logging

from fastapi import Depends, HTTPException

from wanderai.core.agent import WanderAgent
from wanderai.core.database import SessionLocal
from wanderai.core.errors import (
    DuplicateUserError,
    IncorrectPasswordError,
    InvalidCredentialsError,
    PersistenceUnavailableError,
    UserNotFoundError,
    WanderAIError,
)
from wanderai.core.storage import KeyValueStore
from wanderai.models.domain import PublicUser
from wanderai.services.auth import UserDirectory
from wanderai.services.chat import ChatTranscriptStore
from wanderai.services.itineraries import ItineraryRepository

logger = logging.getLogger("wanderai_server")

# Single agent instance, it holds no per-user state
agent = WanderAgent()

ERROR_STATUS = {
    DuplicateUserError: 400,
    UserNotFoundError: 404,
    InvalidCredentialsError: 401,
    IncorrectPasswordError: 400,
    PersistenceUnavailableError: 503,
}


def http_error(error: WanderAIError) -> HTTPException:
    status_code = ERROR_STATUS.get(type(error), 500)
    return HTTPException(status_code=status_code, detail=str(error))


def ai_http_error(error: Exception) -> HTTPException:
    """Maps an AI backend failure to a client-safe HTTP error."""
    error_msg = str(error)
    if "429" in error_msg or "RESOURCE_EXHAUSTED" in error_msg:
        return HTTPException(
            status_code=429,
            detail="High traffic volume. Please try again in a minute. (Quota Exceeded)",
        )
    if "404" in error_msg:
        return HTTPException(
            status_code=503,
            detail="AI Model currently unavailable. Please try again later.",
        )
    # Log the full error for server admins but show simple text to user
    logger.error(f"SERVER ERROR: {error_msg}")
    return HTTPException(
        status_code=500,
        detail="An unexpected error occurred while talking to the AI assistant.",
    )


def get_store() -> KeyValueStore:
    return KeyValueStore(SessionLocal)


def get_agent() -> WanderAgent:
    return agent


def require_agent(wander_agent: WanderAgent = Depends(get_agent)) -> WanderAgent:
    if not wander_agent.client:
        raise HTTPException(
            status_code=500, detail="Google API Key not configured on server."
        )
    return wander_agent


def get_chats(store: KeyValueStore = Depends(get_store)) -> ChatTranscriptStore:
    return ChatTranscriptStore(store)


def get_itineraries(
    store: KeyValueStore = Depends(get_store),
    chats: ChatTranscriptStore = Depends(get_chats),
) -> ItineraryRepository:
    return ItineraryRepository(store, chats)


def get_users(
    store: KeyValueStore = Depends(get_store),
    itineraries: ItineraryRepository = Depends(get_itineraries),
) -> UserDirectory:
    return UserDirectory(store, itineraries=itineraries)


def get_current_user(users: UserDirectory = Depends(get_users)) -> PublicUser:
    user = users.get_current_user()
    if not user:
        raise HTTPException(status_code=401, detail="Not logged in.")
    return user
