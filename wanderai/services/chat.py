import logging
from typing import List, Sequence

from pydantic import ValidationError

from wanderai.core.storage import KEY_PREFIX, KeyValueStore
from wanderai.models.domain import ChatMessage

logger = logging.getLogger("wanderai_server.chat")


def chat_prefix(user_email: str) -> str:
    return f"{KEY_PREFIX}chat_{user_email}_"


def chat_key(user_email: str, itinerary_id: str) -> str:
    return f"{chat_prefix(user_email)}{itinerary_id}"


class ChatTranscriptStore:
    """
    Ordered chat log per (user, itinerary).

    Every write replaces the whole stored log. `append` reads the current
    log and writes it back extended, so concurrent writers on the same
    itinerary are last-write-wins.
    """

    def __init__(self, store: KeyValueStore):
        self.store = store

    def load(self, user_email: str, itinerary_id: str) -> List[ChatMessage]:
        if not user_email:
            return []
        raw = self.store.get_json(chat_key(user_email, itinerary_id), [])
        if not isinstance(raw, list):
            logger.error(f"Chat transcript for {itinerary_id} is not a list, ignoring")
            return []
        try:
            return [ChatMessage.model_validate(m) for m in raw]
        except ValidationError as e:
            logger.error(f"Malformed chat transcript for {itinerary_id}: {e}")
            return []

    def save(
        self, user_email: str, itinerary_id: str, messages: Sequence[ChatMessage]
    ) -> None:
        if not user_email:
            return
        self.store.set_json(
            chat_key(user_email, itinerary_id),
            [m.model_dump(by_alias=True) for m in messages],
        )

    def append(
        self, user_email: str, itinerary_id: str, *messages: ChatMessage
    ) -> List[ChatMessage]:
        transcript = self.load(user_email, itinerary_id)
        transcript.extend(messages)
        self.save(user_email, itinerary_id, transcript)
        return transcript

    def delete_for_itinerary(self, user_email: str, itinerary_id: str) -> None:
        if not user_email:
            return
        self.store.remove(chat_key(user_email, itinerary_id))

    def delete_all_for_user(self, user_email: str) -> None:
        if not user_email:
            return
        prefix = chat_prefix(user_email)
        # Itinerary ids never contain "_"; a longer suffix belongs to another email
        keys = [
            key for key in self.store.list_keys(prefix) if "_" not in key[len(prefix):]
        ]
        for key in keys:
            self.store.remove(key)
        logger.info(f"Deleted {len(keys)} chat transcripts for {user_email}")
