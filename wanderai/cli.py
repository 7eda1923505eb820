import argparse
import sys

from pydantic import ValidationError

from wanderai.core.agent import WanderAgent
from wanderai.models.domain import ItineraryInput
from wanderai.core.segmenter import segment
from wanderai.services.render import render_line


def main(argv=None):
    parser = argparse.ArgumentParser(description="WanderAI itinerary planner")
    parser.add_argument("--destination", type=str, required=True, help="Where to go")
    parser.add_argument(
        "--interests",
        type=str,
        required=True,
        help="What you enjoy (e.g. 'museums, street food')",
    )
    parser.add_argument("--currency", type=str, default="USD", help="Budget currency")
    parser.add_argument("--budget", type=float, required=True, help="Total budget")
    parser.add_argument("--days", type=int, required=True, help="Number of days")

    args = parser.parse_args(argv)

    try:
        prefs = ItineraryInput(
            destination=args.destination,
            interests=args.interests,
            currency=args.currency.upper(),
            budget_amount=args.budget,
            duration=args.days,
        )
    except ValidationError as e:
        for error in e.errors():
            field = ".".join(str(part) for part in error["loc"])
            print(f"{field}: {error['msg']}", file=sys.stderr)
        return 2

    print(
        f"--- Planning {prefs.duration} days in {prefs.destination} "
        f"with budget {prefs.budget_amount:g} {prefs.currency} ---"
    )
    print(f"Interests: {prefs.interests}")

    agent = WanderAgent()
    if not agent.client:
        print("GOOGLE_API_KEY is not set.", file=sys.stderr)
        return 1

    try:
        result = agent.generate_itinerary(prefs)
    except RuntimeError as e:
        print(f"Could not generate itinerary: {e}", file=sys.stderr)
        return 1

    print("\n=== Your Itinerary ===")
    for section in segment(result.itinerary):
        print(f"\n## {section.title}")
        for line in section.content:
            print(render_line(line))
    return 0


if __name__ == "__main__":
    sys.exit(main())
