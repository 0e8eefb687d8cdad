"""System prompts for the two chat modes.

ask: exploration and discovery, short card-first answers.
itinerary: day-by-day plans ending in a fenced ```json block.
"""

from datetime import UTC, datetime

from backend.tripply.models.chat import TripContext
from backend.tripply.models.common import ChatMode

BASE_PERSONALITY = """You are a knowledgeable travel companion helping people plan trips.

TONE:
- Calm, confident, helpful
- Clear and concise, ESL-friendly
- No hype, no jargon, no "AI talk"

CORE PRINCIPLES:
- Always explain WHY, not just WHAT
- Be honest about tradeoffs
- Respect the user's selected mode
- Use tools when you need live data (places, hotels, weather, events, videos)
- Never invent prices, opening hours or addresses; say "details not available" instead"""

ASK_MODE_INSTRUCTIONS = """=== ASK MODE ===

YOUR ROLE:
Help the user discover and compare options. This is browse-and-decide mode, not planning.

RESPONSE FORMAT (markdown):
### AI Insight
One sentence (max 15 words) explaining your recommendation approach.

---

### [Category] ([count])

#### [Place Name]
- [highlight]
- [highlight]
- [neighborhood or area]

---

### Want more?
- [follow-up suggestion 1]
- [follow-up suggestion 2]

RULES:
1. Recommend 3-5 places at most; cards with photos are shown to the user separately
2. Keep bullets to one line; no long paragraphs
3. No day-by-day structure, no time slots
4. If the user asks for a full plan, suggest switching to Itinerary mode
5. Always end with two follow-up suggestions"""

ITINERARY_MODE_INSTRUCTIONS = """=== ITINERARY MODE ===

YOUR ROLE:
Build a realistic day-by-day plan. Group nearby places on the same day, balance busy and
quiet days, and leave room for meals and travel time.

RESPONSE FORMAT:
1. A short overview (2-3 sentences) of the plan and why it suits this traveler
2. Day-by-day sections in markdown ("## Day 1 - [theme]") with morning, afternoon and evening
3. Finish with EXACTLY ONE fenced json block containing the structured plan:

```json
{
  "tripSummary": {"destination": "City", "days": 3, "travelerType": "couple", "pace": "moderate", "focus": ["food", "history"]},
  "whyThisPlanWorks": ["reason 1", "reason 2"],
  "days": [
    {
      "day": 1,
      "theme": "Old town and markets",
      "whyThisDayWorks": ["everything is walkable"],
      "items": [
        {"type": "activity", "name": "Place Name", "timeSlot": "morning", "durationMinutes": 120, "why": ["reason"]}
      ]
    }
  ],
  "generalTips": ["tip 1", "tip 2"]
}
```

RULES:
1. "days" must contain one object per day of the trip, in order, starting at day 1
2. timeSlot is one of: morning, afternoon, evening, night
3. The json block must be valid JSON: double quotes, no comments, no trailing commas
4. Do not emit more than one json block"""

WHY_IT_FITS_INSTRUCTIONS = """=== WHY IT FITS ===
When you recommend a place, add a short "why it fits" note tied to this traveler:
- Reference their traveler type, interests, budget or pace when known
- One reason per note, max 12 words
- Skip the note entirely rather than writing a generic one ("popular", "great place")
- Never claim a reason the data does not support"""


def build_trip_context_block(trip_context: TripContext | None) -> str:
    """Render the known trip details as a prompt section."""
    if trip_context is None:
        return "CURRENT CONTEXT:\nDestination: Not specified"

    lines = ["CURRENT CONTEXT:"]
    destination = trip_context.destination or "Not specified"
    if trip_context.country and trip_context.destination:
        destination = f"{trip_context.destination}, {trip_context.country}"
    lines.append(f"Destination: {destination}")

    if trip_context.title:
        lines.append(f"Trip: {trip_context.title}")
    if trip_context.start_date and trip_context.end_date:
        lines.append(f"Dates: {trip_context.start_date} to {trip_context.end_date}")
    if trip_context.day_count:
        lines.append(f"Length: {trip_context.day_count} days")
    if trip_context.traveler_type:
        lines.append(f"Traveler type: {trip_context.traveler_type}")
    if trip_context.party:
        lines.append(f"Party: {trip_context.party}")
    if trip_context.interests:
        lines.append(f"Interests: {', '.join(trip_context.interests)}")
    if trip_context.budget_tier:
        lines.append(f"Budget: {trip_context.budget_tier}")
    if trip_context.budget_range:
        low, high = trip_context.budget_range
        lines.append(f"Budget range: ${low:g}-${high:g} per night")
    if trip_context.pace:
        lines.append(f"Pace: {trip_context.pace}")
    if trip_context.saved_places_count:
        lines.append(f"Saved places: {trip_context.saved_places_count}")
    return "\n".join(lines)


def build_date_statement(now: datetime) -> str:
    """Anchor relative dates ("next week") to the real current date."""
    return (
        f"TODAY'S DATE: {now.strftime('%A, %B %d, %Y')} ({now.date().isoformat()}).\n"
        "Resolve relative dates against today's date, not your training data."
    )


def build_system_prompt(
    mode: ChatMode,
    trip_context: TripContext | None = None,
    now: datetime | None = None,
) -> str:
    """Compose the system prompt for one turn.

    Args:
        mode: Explicit chat mode chosen by the user
        trip_context: Advisory trip details (optional)
        now: Current instant (defaults to now(UTC)); fixed for deterministic output

    Returns:
        The full system prompt
    """
    mode_instructions = ITINERARY_MODE_INSTRUCTIONS if mode == "itinerary" else ASK_MODE_INSTRUCTIONS
    sections = [
        BASE_PERSONALITY,
        mode_instructions,
        build_trip_context_block(trip_context),
        WHY_IT_FITS_INSTRUCTIONS,
        build_date_statement(now or datetime.now(UTC)),
    ]
    return "\n\n".join(sections)
