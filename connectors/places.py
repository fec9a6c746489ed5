import os
import httpx
from typing import Dict, Any, List, Optional
from loguru import logger

from pipeline.state import PlaceRecord
from pipeline.errors import ConfigurationError, UpstreamError

SEARCH_TEXT_URL = "https://places.googleapis.com/v1/places:searchText"

def parse_place(raw: Dict[str, Any]) -> PlaceRecord:
    """Flatten one provider place object into a PlaceRecord."""
    if not isinstance(raw, dict):
        raise UpstreamError("Place entry is not an object")

    display_name = raw.get("displayName")
    if not isinstance(display_name, dict) or not isinstance(display_name.get("text"), str):
        raise UpstreamError(f"Place {raw.get('id', 'unknown')} has no display name")

    place_id = raw.get("id", "unknown")

    website_uri = raw.get("websiteUri")
    if website_uri is not None and not isinstance(website_uri, str):
        raise UpstreamError(f"Place {place_id} has a non-string websiteUri")

    location = raw.get("location")
    if not isinstance(location, dict):
        location = {}

    coordinates = {}
    for field in ("latitude", "longitude"):
        value = location.get(field)
        # bool is an int subclass but never a coordinate
        if value is not None and (isinstance(value, bool) or not isinstance(value, (int, float))):
            raise UpstreamError(f"Place {place_id} has a non-numeric {field}")
        coordinates[field] = value

    return {
        "id": raw.get("id"),
        "name": display_name["text"],
        "address": raw.get("formattedAddress"),
        "primary_type": raw.get("primaryType"),
        "website_uri": website_uri,
        "latitude": coordinates["latitude"],
        "longitude": coordinates["longitude"],
    }

class PlacesClient:
    """Google Places API (New) text-search client."""

    def __init__(
        self,
        api_key: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.api_key = api_key if api_key is not None else os.getenv("GOOGLE_API_KEY")
        self.base_url = SEARCH_TEXT_URL
        self.transport = transport

        if timeout is None and os.getenv("PLACES_TIMEOUT"):
            try:
                timeout = float(os.getenv("PLACES_TIMEOUT"))
            except ValueError:
                logger.error(f"Invalid PLACES_TIMEOUT {os.getenv('PLACES_TIMEOUT')!r}, expected seconds")
                raise ConfigurationError(f"Invalid PLACES_TIMEOUT: {os.getenv('PLACES_TIMEOUT')}")
        self.timeout = timeout

        if not self.api_key:
            logger.warning("No Google API key provided, searches will fail until GOOGLE_API_KEY is set")

    def _get_headers(self, field_mask: str) -> Dict[str, str]:
        """Get headers for Places API requests."""
        return {
            "Content-Type": "application/json",
            "X-Goog-Api-Key": self.api_key,
            "X-Goog-FieldMask": field_mask,
        }

    def _client_kwargs(self) -> Dict[str, Any]:
        kwargs: Dict[str, Any] = {}
        # Unset timeout keeps the httpx default rather than disabling it
        if self.timeout is not None:
            kwargs["timeout"] = self.timeout
        if self.transport is not None:
            kwargs["transport"] = self.transport
        return kwargs

    async def search_text(self, query: str, field_mask: str) -> List[PlaceRecord]:
        """
        Run one text search against the Places API.

        Args:
            query: Free-text query, e.g. "鎌倉 カフェ"
            field_mask: Comma-separated response fields to request

        Returns:
            Places in provider order (empty when the provider returns none)

        Raises:
            ConfigurationError: if no API key is configured
            UpstreamError: on transport failure, non-2xx status or malformed body
        """
        if not self.api_key:
            logger.error("Missing GOOGLE_API_KEY in environment")
            raise ConfigurationError()

        try:
            async with httpx.AsyncClient(**self._client_kwargs()) as client:
                response = await client.post(
                    self.base_url,
                    json={"textQuery": query},
                    headers=self._get_headers(field_mask),
                )
                response.raise_for_status()
                data = response.json()
        except httpx.HTTPStatusError as e:
            logger.error(f"Places search returned {e.response.status_code} for '{query}'")
            raise UpstreamError(f"Places API status {e.response.status_code}") from e
        except httpx.HTTPError as e:
            logger.error(f"Places search request failed for '{query}': {e}")
            raise UpstreamError(f"Places API unreachable: {e}") from e
        except ValueError as e:
            logger.error(f"Places search returned invalid JSON for '{query}': {e}")
            raise UpstreamError("Places API returned invalid JSON") from e

        if not isinstance(data, dict):
            raise UpstreamError("Places API response is not an object")

        places = data.get("places")
        if places is None:
            places = []
        if not isinstance(places, list):
            raise UpstreamError("Places API 'places' field is not a list")

        logger.info(f"Places search returned {len(places)} results for '{query}'")
        return [parse_place(raw) for raw in places]
