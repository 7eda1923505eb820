import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException

from wanderai.api.deps import (
    ai_http_error,
    get_chats,
    get_current_user,
    get_itineraries,
    require_agent,
)
from wanderai.core.agent import CHAT_ERROR_MESSAGE, WanderAgent, chat_greeting
from wanderai.models.domain import (
    CamelModel,
    ChatMessage,
    ItineraryChatInput,
    ItineraryRecord,
    PublicUser,
)
from wanderai.services.chat import ChatTranscriptStore
from wanderai.services.itineraries import ItineraryRepository

logger = logging.getLogger("wanderai_server")

router = APIRouter(prefix="/chat", tags=["Chat"])


class ChatTurnRequest(CamelModel):
    message: str


class ChatTurnResponse(CamelModel):
    response: str
    messages: List[ChatMessage]


def _get_itinerary(
    itineraries: ItineraryRepository, user: PublicUser, itinerary_id: str
) -> ItineraryRecord:
    record = itineraries.get(user.email, itinerary_id)
    if not record:
        raise HTTPException(status_code=404, detail="Itinerary not found")
    return record


@router.get("/{itinerary_id}", response_model=List[ChatMessage])
def get_transcript(
    itinerary_id: str,
    chats: ChatTranscriptStore = Depends(get_chats),
    itineraries: ItineraryRepository = Depends(get_itineraries),
    current_user: PublicUser = Depends(get_current_user),
):
    """Stored transcript, or a greeting when the conversation has not started."""
    record = _get_itinerary(itineraries, current_user, itinerary_id)
    transcript = chats.load(current_user.email, itinerary_id)
    if not transcript:
        return [
            ChatMessage(
                role="model", content=chat_greeting(record.destination, current_user.name)
            )
        ]
    return transcript


@router.post("/{itinerary_id}", response_model=ChatTurnResponse)
def send_message(
    itinerary_id: str,
    turn: ChatTurnRequest,
    agent: WanderAgent = Depends(require_agent),
    chats: ChatTranscriptStore = Depends(get_chats),
    itineraries: ItineraryRepository = Depends(get_itineraries),
    current_user: PublicUser = Depends(get_current_user),
):
    record = _get_itinerary(itineraries, current_user, itinerary_id)
    history = chats.load(current_user.email, itinerary_id)
    chat_input = ItineraryChatInput(
        itinerary_content=record.content,
        destination=record.destination,
        chat_history=history,
        user_message=turn.message.strip(),
    )

    # Blank messages are answered without being recorded
    if not chat_input.user_message:
        result = agent.chat(chat_input)
        return ChatTurnResponse(response=result.response, messages=history)

    user_message = ChatMessage(role="user", content=chat_input.user_message)
    try:
        result = agent.chat(chat_input)
    except Exception as e:
        chats.append(
            current_user.email,
            itinerary_id,
            user_message,
            ChatMessage(role="model", content=CHAT_ERROR_MESSAGE),
        )
        raise ai_http_error(e)

    messages = chats.append(
        current_user.email,
        itinerary_id,
        user_message,
        ChatMessage(role="model", content=result.response),
    )
    return ChatTurnResponse(response=result.response, messages=messages)


@router.delete("/{itinerary_id}")
def clear_transcript(
    itinerary_id: str,
    chats: ChatTranscriptStore = Depends(get_chats),
    current_user: PublicUser = Depends(get_current_user),
):
    chats.delete_for_itinerary(current_user.email, itinerary_id)
    return {"status": "cleared", "id": itinerary_id}
