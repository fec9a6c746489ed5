from typing import Dict, Optional, Type
from loguru import logger

from pipeline.state import PlaceRecord, Lead, WebsiteStatus
from pipeline.registry import FragmentRegistry
from pipeline.errors import ConfigurationError

BASE_FIELDS = [
    "places.id",
    "places.displayName",
    "places.formattedAddress",
    "places.primaryType",
    "places.websiteUri",
]

def is_chain(name: str, website_uri: Optional[str], registry: FragmentRegistry) -> bool:
    """
    Decide whether a place belongs to a chain or franchise.

    Plain substring containment on the lowercased name and the whole
    lowercased URL; either match is enough. No width or kana normalisation.
    """
    lower_name = (name or "").lower()
    lower_url = (website_uri or "").lower()

    name_match = any(fragment in lower_name for fragment in registry.chain_names)
    domain_match = any(fragment in lower_url for fragment in registry.chain_domains)

    return name_match or domain_match

def website_status(url: Optional[str], registry: FragmentRegistry) -> WebsiteStatus:
    """Label a place's website as missing, social/listing only, or owned."""
    if not url:
        return WebsiteStatus.NO_WEBSITE

    lower_url = url.lower()
    if any(domain in lower_url for domain in registry.sns_domains):
        return WebsiteStatus.SNS_ONLY
    return WebsiteStatus.HAS_WEBSITE

class LeadFilter:
    """Decides which places become leads and what each lead carries."""

    name = "base"
    fields = BASE_FIELDS

    def __init__(self, registry: FragmentRegistry):
        self.registry = registry

    @property
    def field_mask(self) -> str:
        return ",".join(self.fields)

    def keep(self, place: PlaceRecord) -> bool:
        raise NotImplementedError

    def annotate(self, place: PlaceRecord) -> Dict[str, object]:
        raise NotImplementedError

    def to_lead(self, place: PlaceRecord, category: str) -> Lead:
        lead: Lead = {
            "id": place.get("id"),
            "name": place.get("name"),
            "address": place.get("address"),
            "category": category,
        }
        # Absent optional values are left out, not sent as null
        lead.update({k: v for k, v in self.annotate(place).items() if v is not None})
        return lead

class ChainExclusionFilter(LeadFilter):
    """Keep independent places; leads carry website and coordinates for the map."""

    name = "chain_exclusion"
    fields = BASE_FIELDS + ["places.location"]

    def keep(self, place: PlaceRecord) -> bool:
        return not is_chain(place.get("name", ""), place.get("website_uri"), self.registry)

    def annotate(self, place: PlaceRecord) -> Dict[str, object]:
        return {
            "websiteUri": place.get("website_uri"),
            "lat": place.get("latitude"),
            "lng": place.get("longitude"),
        }

class WebsiteStatusFilter(LeadFilter):
    """Keep places without an owned website; leads carry the status label."""

    name = "website_status"

    def keep(self, place: PlaceRecord) -> bool:
        return website_status(place.get("website_uri"), self.registry) != WebsiteStatus.HAS_WEBSITE

    def annotate(self, place: PlaceRecord) -> Dict[str, object]:
        return {"status": website_status(place.get("website_uri"), self.registry).value}

FILTERS: Dict[str, Type[LeadFilter]] = {
    ChainExclusionFilter.name: ChainExclusionFilter,
    WebsiteStatusFilter.name: WebsiteStatusFilter,
}

def build_filter(name: str, registry: FragmentRegistry) -> LeadFilter:
    """Select the lead filter policy by name."""
    try:
        filter_cls = FILTERS[name]
    except KeyError:
        logger.error(f"Unknown lead filter '{name}', expected one of {sorted(FILTERS)}")
        raise ConfigurationError(f"Unknown lead filter: {name}")

    logger.info(f"Using lead filter: {filter_cls.name}")
    return filter_cls(registry)
