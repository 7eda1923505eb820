import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException

from wanderai.api.deps import get_current_user, get_itineraries, http_error
from wanderai.core.errors import PersistenceUnavailableError
from wanderai.models.domain import (
    ItineraryDraft,
    ItineraryRecord,
    PublicUser,
    RenderedSection,
)
from wanderai.services.itineraries import ItineraryRepository
from wanderai.services.render import render_itinerary

logger = logging.getLogger("wanderai_server")

router = APIRouter(prefix="/history", tags=["History"])


@router.get("/", response_model=List[ItineraryRecord])
def get_user_history(
    itineraries: ItineraryRepository = Depends(get_itineraries),
    current_user: PublicUser = Depends(get_current_user),
):
    return itineraries.list(current_user.email)


@router.post("/", response_model=ItineraryRecord)
def save_history(
    item: ItineraryDraft,
    itineraries: ItineraryRepository = Depends(get_itineraries),
    current_user: PublicUser = Depends(get_current_user),
):
    logger.info(
        f"POST /history received from user {current_user.email} for {item.destination}"
    )
    try:
        return itineraries.save(current_user.email, item)
    except PersistenceUnavailableError as e:
        logger.error(f"Could not save itinerary to history: {e}")
        raise http_error(e)


@router.delete("/")
def clear_history(
    itineraries: ItineraryRepository = Depends(get_itineraries),
    current_user: PublicUser = Depends(get_current_user),
):
    itineraries.delete_all(current_user.email)
    return {"status": "cleared"}


def _get_or_404(
    itineraries: ItineraryRepository, user: PublicUser, itinerary_id: str
) -> ItineraryRecord:
    record = itineraries.get(user.email, itinerary_id)
    if not record:
        logger.warning(f"Itinerary {itinerary_id} not found for user {user.email}")
        raise HTTPException(status_code=404, detail="Itinerary not found")
    return record


@router.get("/{itinerary_id}", response_model=ItineraryRecord)
def get_history_detail(
    itinerary_id: str,
    itineraries: ItineraryRepository = Depends(get_itineraries),
    current_user: PublicUser = Depends(get_current_user),
):
    return _get_or_404(itineraries, current_user, itinerary_id)


@router.get("/{itinerary_id}/sections", response_model=List[RenderedSection])
def get_history_sections(
    itinerary_id: str,
    itineraries: ItineraryRepository = Depends(get_itineraries),
    current_user: PublicUser = Depends(get_current_user),
):
    record = _get_or_404(itineraries, current_user, itinerary_id)
    return render_itinerary(record.content)


@router.delete("/{itinerary_id}")
def delete_history_item(
    itinerary_id: str,
    itineraries: ItineraryRepository = Depends(get_itineraries),
    current_user: PublicUser = Depends(get_current_user),
):
    itineraries.delete(current_user.email, itinerary_id)
    return {"status": "deleted", "id": itinerary_id}
