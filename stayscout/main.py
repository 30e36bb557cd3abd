"""Terminal driver: hold a search conversation over a JSON listing file."""

import asyncio
import json
import logging
import sys
from pathlib import Path

from dotenv import load_dotenv

from stayscout.config import get_settings
from stayscout.context import NominatimConfig, NominatimLocationValidator, SearchContextTracker
from stayscout.errors import InvalidInputError
from stayscout.listings import Listing, parse_listings
from stayscout.response import create_responder
from stayscout.session import TurnProcessor, TurnResult

# Load environment variables
load_dotenv()

logger = logging.getLogger(__name__)

NEW_CONVERSATION = "/new"
SHOWN_LISTINGS = 5


def load_listings(path: Path) -> list[Listing]:
    """Load and validate listings from a JSON array file."""
    with path.open(encoding="utf-8") as f:
        records = json.load(f)
    return parse_listings(records)


def render(result: TurnResult) -> str:
    lines = [result.response.message, ""]
    for listing in result.listings[:SHOWN_LISTINGS]:
        badge = " (Superhost)" if listing.is_superhost else ""
        lines.append(
            f"  - {listing.name}: ${listing.nightly_rate:,.0f}/night, "
            f"{listing.rating}/5 from {listing.reviews_count} reviews{badge}"
        )
    if result.response.insights:
        lines.append("")
        lines.extend(f"  * {insight}" for insight in result.response.insights)
    if result.response.follow_ups:
        lines.append("")
        lines.append("Try: " + " | ".join(result.response.follow_ups))
    return "\n".join(lines)


async def main() -> None:
    """Main application entry point."""
    settings = get_settings()
    logging.basicConfig(
        level=getattr(logging, settings.log_level.upper(), logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    logger.info(f"Starting StayScout in {settings.environment.value} mode")

    # Validate configuration
    try:
        settings.validate_provider_config()
    except ValueError as e:
        logger.error(f"Configuration error: {e}")
        sys.exit(1)

    if len(sys.argv) != 2:
        print("Usage: python -m stayscout.main listings.json", file=sys.stderr)
        sys.exit(2)

    try:
        listings = load_listings(Path(sys.argv[1]))
    except (OSError, json.JSONDecodeError, InvalidInputError) as e:
        logger.error(f"Could not load listings: {e}")
        sys.exit(1)

    validator = None
    if settings.geocoding_enabled:
        validator = NominatimLocationValidator(
            NominatimConfig(
                base_url=settings.geocoding_url,
                user_agent=settings.geocoding_user_agent,
                timeout=settings.geocoding_timeout_seconds,
            )
        )
    processor = TurnProcessor(
        responder=create_responder(settings),
        tracker=SearchContextTracker(
            validator=validator,
            validation_timeout=settings.geocoding_timeout_seconds,
        ),
    )

    try:
        # Health check components
        health = await processor.health_check()
        if not health["overall"]:
            logger.warning("Health check failed - replies fall back to rule-based wording")
            logger.warning(f"Health status: {health}")

        await converse(processor, listings, sys.stdin)
    finally:
        if validator is not None:
            await validator.client.aclose()


async def converse(processor: TurnProcessor, listings: list[Listing], lines) -> None:
    """Run one turn per input line until the input ends."""
    context = None
    print(f"Loaded {len(listings)} listings. Describe your stay ({NEW_CONVERSATION} to start over).")
    for line in lines:
        utterance = line.strip()
        if not utterance:
            continue
        if utterance == NEW_CONVERSATION:
            context = processor.reset()
            print("Starting a new search.")
            continue
        result = await processor.process_turn(utterance, listings, context)
        context = result.context
        print(render(result))
        print()


def cli() -> None:
    """Console script entry point."""
    asyncio.run(main())


if __name__ == "__main__":
    cli()
