from enum import Enum
from typing import TypedDict, Optional

class WebsiteStatus(str, Enum):
    """Website presence label shown next to each lead."""
    NO_WEBSITE = "No Website"
    SNS_ONLY = "SNS Only"
    HAS_WEBSITE = "Has Website"

class PlaceRecord(TypedDict, total=False):
    """One place as returned by the places-search provider."""
    id: str
    name: str                        # displayName.text
    address: str                     # formattedAddress
    primary_type: Optional[str]
    website_uri: Optional[str]
    latitude: Optional[float]
    longitude: Optional[float]

class Lead(TypedDict, total=False):
    """A place surfaced as a prospecting opportunity."""
    id: str
    name: str
    address: str
    category: str                    # echoed from the request
    websiteUri: str                  # chain exclusion only
    lat: float                       # chain exclusion only
    lng: float                       # chain exclusion only
    status: str                      # website status only
