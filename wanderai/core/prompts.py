from wanderai.models.domain import (
    ItineraryChatInput,
    ItineraryInput,
    RefineItineraryRequest,
    SuggestInterestsInput,
)

ITINERARY_FORMAT_INSTRUCTIONS = """
Use headings for days (e.g., "Day 1: Arrival and Exploration") and sub-headings
(e.g., "Activities:", "Food:", "Hotel Suggestions:", "Local Tips:", "Transportation:")
or bullet points starting with "- " for details within each day.
Write the itinerary as continuous human-readable text, not as nested JSON.
"""


def build_generate_prompt(preferences: ItineraryInput) -> str:
    return f"""
        You are an expert travel agent. Create a detailed, day-by-day itinerary for {preferences.destination}.
        Trip Duration: {preferences.duration} days
        Total Budget: {preferences.budget_amount:g} {preferences.currency}
        Interests: {preferences.interests}

        CRITICAL INSTRUCTIONS:
        1. Start with a short overview of the trip.
        2. Cover every one of the {preferences.duration} days, in order.
        3. Suggest activities, food, hotels and local tips that match the interests.
        4. Keep all suggested costs within the budget and quote them in {preferences.currency}.
        5. REALISM: Account for opening hours and logical travel times between venues.

        FORMAT:
        {ITINERARY_FORMAT_INSTRUCTIONS}

        OUTPUT FORMAT:
        Return ONLY a JSON object with a single "itinerary" field holding the full itinerary text.
        """


def build_refine_prompt(request: RefineItineraryRequest) -> str:
    return f"""
        You are a travel expert refining an existing itinerary based on user feedback.

        Existing Itinerary:
        {request.existing_itinerary}

        User Feedback:
        {request.user_feedback}

        Based on the user feedback, please refine the itinerary to better meet their needs and preferences.
        Ensure the refined itinerary is well-structured, comprehensive, and addresses the user's concerns.

        FORMAT:
        {ITINERARY_FORMAT_INSTRUCTIONS}

        OUTPUT FORMAT:
        Return ONLY a JSON object with a single "refinedItinerary" field holding the entire refined itinerary text.
        """


def build_chat_prompt(chat_input: ItineraryChatInput) -> str:
    history = "\n".join(
        f"  {message.role}: {message.content}" for message in chat_input.chat_history
    )
    destination = chat_input.destination
    return f"""
        You are a helpful AI travel assistant embedded in a travel planning application.
        Your current task is to discuss a specific travel itinerary with the user.

        Here is the itinerary content you should focus on:
        <itinerary_context>
        {chat_input.itinerary_content}
        </itinerary_context>

        The primary destination for this itinerary is: {destination}.

        Your role is to:
        1. Answer questions specifically about the provided itinerary (plan, activities, hotels, food, etc.).
        2. Provide information about other interesting places, attractions, or activities near {destination}.
        3. Keep your responses concise and helpful for travel planning.
        4. Maintain a friendly and conversational tone.

        IMPORTANT RULE: You MUST ONLY discuss travel-related topics. If the user asks a question that is NOT
        related to travel, trip planning, the provided itinerary, or the destination, politely decline and say
        that you are here to help with travel plans for {destination}.

        Conversation History:
        {history or "  (none)"}

        User's latest message: {chat_input.user_message}

        OUTPUT FORMAT:
        Return ONLY a JSON object with a single "response" field holding your reply.
        """


def build_suggest_interests_prompt(request: SuggestInterestsInput) -> str:
    return f"""
        You are an AI travel assistant helping a user find interests for their trip.
        Given the user's current typed query and their existing selected interests, provide 3-5 concise
        and relevant travel interest suggestions.
        The suggestions should be short phrases, like "Historical Sites", "Street Food Tours",
        "Mountain Hiking", "Beach Relaxation", "Art Galleries".
        Do not repeat any interests already listed in the existing interests.
        If the query is too short or vague, provide general popular suggestions related to travel.

        User's current query: {request.query}
        User's existing selected interests: {request.existing_interests or ""}

        OUTPUT FORMAT:
        Return ONLY a JSON object with a "suggestions" array of strings.
        Respond with an empty array if no relevant suggestions can be made.
        """
