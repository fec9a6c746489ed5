from typing import List
from loguru import logger

from pipeline.state import Lead
from pipeline.nodes.validate import validate_query
from pipeline.nodes.classify import LeadFilter
from connectors.places import PlacesClient

class SearchOrchestrator:
    """Turns an area + category query into a filtered lead list."""

    def __init__(self, client: PlacesClient, lead_filter: LeadFilter):
        self.client = client
        self.lead_filter = lead_filter

    async def search(self, area: str, category: str) -> List[Lead]:
        """
        Search the provider once and keep the places the active filter accepts.

        Provider order is preserved and the request's category is echoed
        onto every lead. Errors from validation or the provider propagate.
        """
        query = validate_query(area, category)
        logger.info(f"Searching '{query}' with {self.lead_filter.name} filter")

        places = await self.client.search_text(query, self.lead_filter.field_mask)

        leads = [
            self.lead_filter.to_lead(place, category)
            for place in places
            if self.lead_filter.keep(place)
        ]

        logger.info(f"Kept {len(leads)} of {len(places)} places for '{query}'")
        return leads
