"""Global pytest configuration."""

import os

# Keep tests offline: no provider keys leak in from the developer's shell
for _key in (
    "OPENAI_API_KEY",
    "GOOGLE_PLACES_API_KEY",
    "GOOGLE_SEARCH_API_KEY",
    "YOUTUBE_API_KEY",
    "TICKETMASTER_API_KEY",
    "SERPAPI_API_KEY",
    "REDDIT_CLIENT_SECRET",
):
    os.environ.pop(_key, None)
