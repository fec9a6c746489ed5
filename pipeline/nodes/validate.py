from typing import Optional
from loguru import logger

from pipeline.errors import InvalidRequest

REQUIRED_FIELDS = ["area", "category"]

def validate_query(area: Optional[str], category: Optional[str]) -> str:
    """Check both search parameters are present and build the free-text query."""
    params = {"area": area, "category": category}

    missing_fields = [field for field in REQUIRED_FIELDS if not params.get(field)]
    if missing_fields:
        logger.warning(f"Missing required fields: {missing_fields}")
        raise InvalidRequest()

    return f"{area} {category}"
