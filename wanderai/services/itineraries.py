import logging
from datetime import datetime, timezone
from typing import List, Optional

from pydantic import ValidationError

from wanderai.core.errors import PersistenceUnavailableError
from wanderai.core.storage import KEY_PREFIX, KeyValueStore, generate_id
from wanderai.models.domain import ItineraryDraft, ItineraryRecord
from wanderai.services.chat import ChatTranscriptStore

logger = logging.getLogger("wanderai_server.itineraries")


def itineraries_key(user_email: str) -> str:
    return f"{KEY_PREFIX}itineraries_{user_email}"


class ItineraryRepository:
    """Per-user itinerary history, newest first."""

    def __init__(self, store: KeyValueStore, chats: Optional[ChatTranscriptStore] = None):
        self.store = store
        self.chats = chats or ChatTranscriptStore(store)

    def list(self, user_email: str) -> List[ItineraryRecord]:
        if not user_email:
            return []
        raw = self.store.get_json(itineraries_key(user_email), [])
        if not isinstance(raw, list):
            logger.error(f"Itinerary history for {user_email} is not a list, ignoring")
            return []
        try:
            return [ItineraryRecord.model_validate(item) for item in raw]
        except ValidationError as e:
            logger.error(f"Error parsing itineraries for {user_email}: {e}")
            return []

    def get(self, user_email: str, itinerary_id: str) -> Optional[ItineraryRecord]:
        for record in self.list(user_email):
            if record.id == itinerary_id:
                return record
        return None

    def save(self, user_email: str, draft: ItineraryDraft) -> ItineraryRecord:
        if not user_email or not self.store.available:
            raise PersistenceUnavailableError()

        itineraries = self.list(user_email)
        record = ItineraryRecord(
            **draft.model_dump(),
            id=generate_id(),
            generated_date=datetime.now(timezone.utc).isoformat(),
        )
        itineraries.insert(0, record)
        self._write(user_email, itineraries)
        logger.info(f"Saved itinerary {record.id} ({record.destination}) for {user_email}")
        return record

    def delete(self, user_email: str, itinerary_id: str) -> None:
        if not user_email:
            return
        itineraries = self.list(user_email)
        remaining = [it for it in itineraries if it.id != itinerary_id]
        if len(remaining) != len(itineraries):
            self._write(user_email, remaining)
            logger.info(f"Deleted itinerary {itinerary_id} for {user_email}")
        self.chats.delete_for_itinerary(user_email, itinerary_id)

    def delete_all(self, user_email: str) -> None:
        if not user_email:
            return
        self.store.remove(itineraries_key(user_email))
        self.chats.delete_all_for_user(user_email)
        logger.info(f"Cleared itinerary history for {user_email}")

    def _write(self, user_email: str, itineraries: List[ItineraryRecord]) -> None:
        self.store.set_json(
            itineraries_key(user_email),
            [it.model_dump(by_alias=True, exclude_none=True) for it in itineraries],
        )
