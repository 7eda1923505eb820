import logging
import re
from typing import List, Optional
from urllib.parse import quote

from fastapi import APIRouter, Depends
from fastapi.responses import Response

from wanderai.api.deps import (
    ai_http_error,
    get_itineraries,
    get_users,
    require_agent,
)
from wanderai.core.agent import WanderAgent
from wanderai.core.errors import PersistenceUnavailableError
from wanderai.models.domain import (
    CamelModel,
    ItineraryDraft,
    ItineraryInput,
    ItineraryRecord,
    RefineItineraryRequest,
    RenderedSection,
    SuggestInterestsInput,
    SuggestInterestsOutput,
)
from wanderai.services.auth import UserDirectory
from wanderai.services.itineraries import ItineraryRepository
from wanderai.services.pdf import build_pdf
from wanderai.services.render import render_itinerary

logger = logging.getLogger("wanderai_server")

router = APIRouter(tags=["Planning"])


class PlanResponse(CamelModel):
    itinerary: str
    sections: List[RenderedSection]
    record: Optional[ItineraryRecord] = None
    saved: bool = False


class RefineRequest(RefineItineraryRequest):
    itinerary_id: Optional[str] = None


class RefineResponse(CamelModel):
    refined_itinerary: str
    sections: List[RenderedSection]
    record: Optional[ItineraryRecord] = None
    saved: bool = False


class PdfRequest(CamelModel):
    content: str
    destination: Optional[str] = None


def _save_for_current_user(
    users: UserDirectory, itineraries: ItineraryRepository, draft: ItineraryDraft
) -> Optional[ItineraryRecord]:
    """Saves to the logged-in user's history. A failed save never fails the request."""
    user = users.get_current_user()
    if not user:
        return None
    try:
        return itineraries.save(user.email, draft)
    except PersistenceUnavailableError as e:
        logger.error(f"Could not save itinerary to history: {e}")
        return None


@router.post("/plan", response_model=PlanResponse)
def generate_plan(
    preferences: ItineraryInput,
    agent: WanderAgent = Depends(require_agent),
    users: UserDirectory = Depends(get_users),
    itineraries: ItineraryRepository = Depends(get_itineraries),
):
    """
    Generates a travel itinerary based on user preferences.
    """
    logger.info(
        f"Received plan request for {preferences.destination}, "
        f"budget: {preferences.budget_amount} {preferences.currency}"
    )
    try:
        result = agent.generate_itinerary(preferences)
    except Exception as e:
        raise ai_http_error(e)

    record = _save_for_current_user(
        users,
        itineraries,
        ItineraryDraft(content=result.itinerary, **preferences.model_dump()),
    )
    return PlanResponse(
        itinerary=result.itinerary,
        sections=render_itinerary(result.itinerary),
        record=record,
        saved=record is not None,
    )


@router.post("/plan/refine", response_model=RefineResponse)
def refine_plan(
    request: RefineRequest,
    agent: WanderAgent = Depends(require_agent),
    users: UserDirectory = Depends(get_users),
    itineraries: ItineraryRepository = Depends(get_itineraries),
):
    """
    Refines an itinerary from user feedback. When it belongs to a saved
    itinerary, the refined text is saved as a new history entry.
    """
    try:
        result = agent.refine_itinerary(request)
    except Exception as e:
        raise ai_http_error(e)

    record = None
    user = users.get_current_user()
    if user and request.itinerary_id:
        base = itineraries.get(user.email, request.itinerary_id)
        if base:
            record = _save_for_current_user(
                users, itineraries, base.to_draft(content=result.refined_itinerary)
            )
        else:
            logger.warning(
                f"Refined itinerary not saved: {request.itinerary_id} not found for {user.email}"
            )

    return RefineResponse(
        refined_itinerary=result.refined_itinerary,
        sections=render_itinerary(result.refined_itinerary),
        record=record,
        saved=record is not None,
    )


@router.post("/plan/suggest-interests", response_model=SuggestInterestsOutput)
def suggest_interests(
    request: SuggestInterestsInput,
    agent: WanderAgent = Depends(require_agent),
):
    try:
        return agent.suggest_interests(request)
    except Exception as e:
        raise ai_http_error(e)


def _content_disposition(filename: str) -> str:
    """Attachment header with an ASCII fallback name and the UTF-8 name (RFC 5987)."""
    ascii_name = re.sub(r"[^A-Za-z0-9._ -]", "_", filename)
    return f"attachment; filename=\"{ascii_name}\"; filename*=UTF-8''{quote(filename)}"


@router.post("/pdf")
def generate_pdf(request: PdfRequest):
    try:
        pdf_bytes = build_pdf(request.content, request.destination)
    except Exception:
        logger.exception("PDF Generation Failed")
        raise

    filename = (
        f"Trip_to_{request.destination}.pdf"
        if request.destination
        else "wanderai-itinerary.pdf"
    )
    return Response(
        content=pdf_bytes,
        media_type="application/pdf",
        headers={"Content-Disposition": _content_disposition(filename)},
    )
