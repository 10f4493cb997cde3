"""Spoonacular recipe image lookup.

Only the image URL is used.  The lookup is optional: without
SPOONACULAR_API_KEY, or on any HTTP failure, it returns None and the recipe is
saved without an image.
"""

import logging
from typing import Optional

import httpx

from meal_assistant.config import get_spoonacular_key

logger = logging.getLogger(__name__)

BASE_URL = "https://api.spoonacular.com"
IMAGE_URL = "https://img.spoonacular.com/recipes/{id}-636x393.{type}"


def search_recipe_image(search_terms: str) -> Optional[str]:
    """Return the largest image URL of the top complexSearch hit for search_terms."""
    api_key = get_spoonacular_key()
    if not api_key:
        logger.warning("SPOONACULAR_API_KEY not configured - skipping image fetch")
        return None

    try:
        response = httpx.get(
            f"{BASE_URL}/recipes/complexSearch",
            params={
                "apiKey": api_key,
                "query": search_terms,
                "number": "1",
                "addRecipeInformation": "false",
            },
            timeout=10,
        )
        response.raise_for_status()
        results = response.json().get("results") or []
    except (httpx.HTTPError, ValueError):
        logger.exception("Error fetching recipe image from Spoonacular for %r", search_terms)
        return None

    if not results:
        logger.info("No Spoonacular results for: %s", search_terms)
        return None

    top = results[0]
    return IMAGE_URL.format(id=top["id"], type=top.get("imageType") or "jpg")
