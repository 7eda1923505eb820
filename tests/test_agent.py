import pytest
from unittest.mock import MagicMock, patch

from wanderai.core.agent import (
    CHAT_EMPTY_MESSAGE,
    CHAT_FALLBACK,
    CHAT_SAFETY_SETTINGS,
    GENERATE_FALLBACK,
    MODEL_CANDIDATES,
    REFINE_FALLBACK,
    WanderAgent,
    chat_greeting,
)
from wanderai.models.domain import (
    ChatMessage,
    GenerateItineraryOutput,
    ItineraryChatInput,
    ItineraryInput,
    RefineItineraryRequest,
    SuggestInterestsInput,
)

VALID_ITINERARY_RESPONSE = """
{
    "itinerary": "Day 1: Arrival\\nVisit the Louvre\\nFood: Croissants"
}
"""

PREFERENCES = ItineraryInput(
    destination="Paris",
    interests="art and pastries",
    currency="EUR",
    budget_amount=1200,
    duration=2,
)


def mock_response(text):
    response = MagicMock()
    response.text = text
    return response


@pytest.fixture
def agent():
    """Returns a WanderAgent instance with mocked Google Client."""
    with patch("wanderai.core.agent.genai.Client"):
        agent = WanderAgent(api_key="test-key")
    return agent


def test_missing_api_key_leaves_no_client(monkeypatch):
    monkeypatch.delenv("GOOGLE_API_KEY", raising=False)
    agent = WanderAgent()
    assert agent.client is None
    with pytest.raises(RuntimeError):
        agent.generate_itinerary(PREFERENCES)


def test_generate_itinerary_success(agent):
    agent.client.models.generate_content.return_value = mock_response(
        VALID_ITINERARY_RESPONSE
    )

    result = agent.generate_itinerary(PREFERENCES)

    assert result.itinerary.startswith("Day 1: Arrival")
    call = agent.client.models.generate_content.call_args
    assert call.kwargs["model"] == MODEL_CANDIDATES[0]
    assert "Paris" in call.kwargs["contents"]
    assert "1200 EUR" in call.kwargs["contents"]
    assert call.kwargs["config"].response_mime_type == "application/json"


def test_json_parsing_resilience(agent):
    """Verifies parsing logic handles Markdown wrapping."""
    markdown_response = f"Here is your plan:\n```json\n{VALID_ITINERARY_RESPONSE}\n```"

    output = agent._parse_llm_response(markdown_response, GenerateItineraryOutput)
    assert output.itinerary.startswith("Day 1")


@pytest.mark.parametrize("raw", [None, "", "no json here", '{"wrong": "field"}'])
def test_unusable_response_falls_back(agent, raw):
    agent.client.models.generate_content.return_value = mock_response(raw)

    assert agent.generate_itinerary(PREFERENCES).itinerary == GENERATE_FALLBACK


def test_model_fallback_uses_next_candidate(agent):
    agent.client.models.generate_content.side_effect = [
        Exception("404 model not found"),
        mock_response(VALID_ITINERARY_RESPONSE),
    ]

    result = agent.generate_itinerary(PREFERENCES)

    assert result.itinerary.startswith("Day 1")
    models_tried = [
        c.kwargs["model"] for c in agent.client.models.generate_content.call_args_list
    ]
    assert models_tried == MODEL_CANDIDATES[:2]


def test_all_models_failing_raises(agent):
    agent.client.models.generate_content.side_effect = Exception("429 RESOURCE_EXHAUSTED")

    with pytest.raises(RuntimeError, match="RESOURCE_EXHAUSTED"):
        agent.generate_itinerary(PREFERENCES)
    assert agent.client.models.generate_content.call_count == len(MODEL_CANDIDATES)


def test_refine_itinerary(agent):
    agent.client.models.generate_content.return_value = mock_response(
        '{"refinedItinerary": "Day 1: Arrival\\nVegetarian lunch"}'
    )
    request = RefineItineraryRequest(
        existing_itinerary="Day 1: Arrival\nSteakhouse lunch",
        user_feedback="Please make the food vegetarian",
    )

    result = agent.refine_itinerary(request)

    assert result.refined_itinerary == "Day 1: Arrival\nVegetarian lunch"
    prompt = agent.client.models.generate_content.call_args.kwargs["contents"]
    assert "Steakhouse lunch" in prompt
    assert "Please make the food vegetarian" in prompt


def test_refine_blank_output_falls_back(agent):
    agent.client.models.generate_content.return_value = mock_response(
        '{"refinedItinerary": "   "}'
    )
    request = RefineItineraryRequest(
        existing_itinerary="Day 1", user_feedback="More museums please"
    )
    assert agent.refine_itinerary(request).refined_itinerary == REFINE_FALLBACK


def test_chat_turn(agent):
    agent.client.models.generate_content.return_value = mock_response(
        '{"response": "Try the Marais for falafel."}'
    )
    chat_input = ItineraryChatInput(
        itinerary_content="Day 1: Arrival",
        destination="Paris",
        chat_history=[ChatMessage(role="model", content="Hello!")],
        user_message="Where can I find falafel?",
    )

    result = agent.chat(chat_input)

    assert result.response == "Try the Marais for falafel."
    call = agent.client.models.generate_content.call_args
    assert "model: Hello!" in call.kwargs["contents"]
    assert call.kwargs["config"].safety_settings == CHAT_SAFETY_SETTINGS


def test_chat_blank_message_skips_model(agent):
    chat_input = ItineraryChatInput(
        itinerary_content="Day 1", destination="Paris", user_message="   "
    )

    assert agent.chat(chat_input).response == CHAT_EMPTY_MESSAGE
    agent.client.models.generate_content.assert_not_called()


def test_chat_unparsable_output_falls_back(agent):
    agent.client.models.generate_content.return_value = mock_response("")
    chat_input = ItineraryChatInput(
        itinerary_content="Day 1", destination="Paris", user_message="Hi"
    )
    assert agent.chat(chat_input).response == CHAT_FALLBACK


def test_suggest_interests(agent):
    agent.client.models.generate_content.return_value = mock_response(
        '{"suggestions": ["Street Food Tours", " ", "Night Markets", "Cooking Classes"]}'
    )

    result = agent.suggest_interests(
        SuggestInterestsInput(query="food", existing_interests="museums")
    )

    assert result.suggestions == ["Street Food Tours", "Night Markets", "Cooking Classes"]


def test_suggest_interests_short_query_skips_model(agent):
    result = agent.suggest_interests(SuggestInterestsInput(query=" a "))

    assert result.suggestions == []
    agent.client.models.generate_content.assert_not_called()


def test_suggest_interests_bad_output_is_empty(agent):
    agent.client.models.generate_content.return_value = mock_response("oops")
    assert agent.suggest_interests(SuggestInterestsInput(query="hiking")).suggestions == []


def test_chat_greeting_uses_first_name():
    assert chat_greeting("Rome", "Ada Lovelace").startswith("Hello Ada!")
    assert chat_greeting("Rome").startswith("Hello there!")
    assert "trip to Rome" in chat_greeting("Rome")
