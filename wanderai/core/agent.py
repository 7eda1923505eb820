import os
import json
import logging
from typing import List, Optional, Type, TypeVar

from dotenv import load_dotenv
from google import genai
from google.genai import types
from pydantic import BaseModel, ValidationError

from wanderai.core.prompts import (
    build_chat_prompt,
    build_generate_prompt,
    build_refine_prompt,
    build_suggest_interests_prompt,
)
from wanderai.models.domain import (
    GenerateItineraryOutput,
    ItineraryChatInput,
    ItineraryChatOutput,
    ItineraryInput,
    RefineItineraryOutput,
    RefineItineraryRequest,
    SuggestInterestsInput,
    SuggestInterestsOutput,
)

load_dotenv()

# Configure logger (inherits config when running in server)
logger = logging.getLogger("wanderai_server.agent")

OutputT = TypeVar("OutputT", bound=BaseModel)

# Prioritized list of models to try
MODEL_CANDIDATES = [
    "gemini-2.0-flash",
    "gemini-flash-latest",
    "gemini-1.5-flash",
]

GENERATE_FALLBACK = (
    "I'm sorry, I couldn't generate an itinerary at this time. Please try again."
)
REFINE_FALLBACK = (
    "I'm sorry, I couldn't refine the itinerary at this time. Please try again."
)
CHAT_FALLBACK = "I'm sorry, I couldn't generate a response at this time."
CHAT_EMPTY_MESSAGE = "Please provide a message to discuss."
CHAT_ERROR_MESSAGE = "Sorry, I encountered an error. Please try again."

MIN_SUGGESTION_QUERY_LENGTH = 2

CHAT_SAFETY_SETTINGS = [
    types.SafetySetting(category=category, threshold="BLOCK_MEDIUM_AND_ABOVE")
    for category in (
        "HARM_CATEGORY_HATE_SPEECH",
        "HARM_CATEGORY_DANGEROUS_CONTENT",
        "HARM_CATEGORY_HARASSMENT",
        "HARM_CATEGORY_SEXUALLY_EXPLICIT",
    )
]


def chat_greeting(destination: str, user_name: Optional[str] = None) -> str:
    first_name = user_name.split(" ")[0] if user_name else "there"
    return (
        f"Hello {first_name}! I'm your WanderAI assistant. How can I help you with your "
        f"trip to {destination}? Feel free to ask about your itinerary, activities, or "
        f"anything else related to your travel plans."
    )


class WanderAgent:
    """
    Gemini-backed itinerary assistant.

    Every flow builds a prompt, asks the model for JSON matching the flow's
    output model, and validates the reply. A reply that is missing or does
    not validate is replaced by a fixed fallback value. Transport failures
    (every model candidate raising) propagate as RuntimeError.
    """

    def __init__(self, api_key: Optional[str] = None):
        self.client = None

        api_key = api_key or os.environ.get("GOOGLE_API_KEY")
        if not api_key:
            logger.warning("GOOGLE_API_KEY not found in environment.")
        else:
            self.client = genai.Client(api_key=api_key)

    def _call_model_with_fallback(
        self,
        prompt: str,
        schema: Type[BaseModel],
        safety_settings: Optional[List[types.SafetySetting]] = None,
    ) -> Optional[str]:
        """
        Tries to generate content using models in preference order.
        Returns the text response of the first successful call.
        """
        if not self.client:
            raise RuntimeError("Google API Key not configured.")

        config = types.GenerateContentConfig(
            response_mime_type="application/json",
            response_schema=schema,
            safety_settings=safety_settings,
        )

        last_error = None
        for model_name in MODEL_CANDIDATES:
            try:
                logger.info(f"Attempting with model: {model_name}...")
                response = self.client.models.generate_content(
                    model=model_name,
                    contents=prompt,
                    config=config,
                )
                logger.info(f"Success with {model_name}!")
                return response.text
            except Exception as e:
                logger.warning(f"Failed with {model_name}: {e}")
                last_error = e
                continue

        raise RuntimeError(f"All model candidates failed. Last error: {last_error}")

    def _parse_llm_response(
        self, response_text: Optional[str], output_model: Type[OutputT]
    ) -> Optional[OutputT]:
        """
        Parses JSON from LLM response, handling markdown code blocks.
        Returns None when there is nothing usable.
        """
        if not response_text or not response_text.strip():
            logger.error(f"Empty response for {output_model.__name__}")
            return None

        try:
            cleaned_text = (
                response_text.replace("```json", "").replace("```", "").strip()
            )
            # Sometimes models return text before the JSON
            start_idx = cleaned_text.find("{")
            if start_idx == -1:
                raise ValueError("No JSON object found in response")
            data, _ = json.JSONDecoder().raw_decode(cleaned_text[start_idx:])
            return output_model.model_validate(data)
        except (ValueError, ValidationError) as e:
            logger.error(f"ERROR parsing LLM response: {e}")
            logger.error(f"RAW Response: {response_text}")
            return None

    def generate_itinerary(self, preferences: ItineraryInput) -> GenerateItineraryOutput:
        logger.info(
            f"Generating itinerary for {preferences.destination} ({preferences.duration} days)"
        )
        response_text = self._call_model_with_fallback(
            build_generate_prompt(preferences), GenerateItineraryOutput
        )
        output = self._parse_llm_response(response_text, GenerateItineraryOutput)
        if not output or not output.itinerary.strip():
            return GenerateItineraryOutput(itinerary=GENERATE_FALLBACK)
        return output

    def refine_itinerary(self, request: RefineItineraryRequest) -> RefineItineraryOutput:
        logger.info("Refining itinerary from user feedback")
        response_text = self._call_model_with_fallback(
            build_refine_prompt(request), RefineItineraryOutput
        )
        output = self._parse_llm_response(response_text, RefineItineraryOutput)
        if not output or not output.refined_itinerary.strip():
            return RefineItineraryOutput(refined_itinerary=REFINE_FALLBACK)
        return output

    def chat(self, chat_input: ItineraryChatInput) -> ItineraryChatOutput:
        if not chat_input.user_message.strip():
            return ItineraryChatOutput(response=CHAT_EMPTY_MESSAGE)

        response_text = self._call_model_with_fallback(
            build_chat_prompt(chat_input),
            ItineraryChatOutput,
            safety_settings=CHAT_SAFETY_SETTINGS,
        )
        output = self._parse_llm_response(response_text, ItineraryChatOutput)
        if not output or not output.response.strip():
            return ItineraryChatOutput(response=CHAT_FALLBACK)
        return output

    def suggest_interests(self, request: SuggestInterestsInput) -> SuggestInterestsOutput:
        # Avoid API calls for very short queries
        if len(request.query.strip()) < MIN_SUGGESTION_QUERY_LENGTH:
            return SuggestInterestsOutput(suggestions=[])

        response_text = self._call_model_with_fallback(
            build_suggest_interests_prompt(request), SuggestInterestsOutput
        )
        output = self._parse_llm_response(response_text, SuggestInterestsOutput)
        return output or SuggestInterestsOutput(suggestions=[])
