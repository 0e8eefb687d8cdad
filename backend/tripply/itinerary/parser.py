"""Itinerary extraction from a completed model response.

The model is instructed to end itinerary-mode answers with one fenced
```json block. Absence of a valid block is a normal outcome, not an error.
"""

import json
import logging
import re

from pydantic import ValidationError

from backend.tripply.models.itinerary import ItineraryResponse

logger = logging.getLogger(__name__)

_JSON_FENCE = re.compile(r"```json\s*(.*?)```", re.DOTALL | re.IGNORECASE)


def find_json_block(raw_text: str) -> str | None:
    """Body of the first ```json fenced block, or None."""
    match = _JSON_FENCE.search(raw_text)
    return match.group(1).strip() if match else None


def parse_itinerary(raw_text: str) -> ItineraryResponse | None:
    """Parse the structured plan embedded in a model response.

    Args:
        raw_text: Full accumulated assistant text

    Returns:
        ItineraryResponse if the first ```json block holds a `tripSummary`
        object and a non-empty list of day objects; None otherwise. Never raises.
    """
    block = find_json_block(raw_text)
    if block is None:
        logger.debug("No json block in response; no itinerary this turn")
        return None

    try:
        data = json.loads(block)
    except json.JSONDecodeError as e:
        logger.warning("Malformed itinerary json: %s", e)
        return None

    if not isinstance(data, dict):
        logger.warning("Itinerary json is a %s, expected an object", type(data).__name__)
        return None

    try:
        return ItineraryResponse.model_validate(data)
    except ValidationError as e:
        logger.warning("Itinerary json failed validation: %d error(s)", e.error_count())
        return None
