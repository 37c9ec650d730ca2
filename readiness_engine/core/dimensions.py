"""The closed set of readiness dimensions.

Names are used verbatim as join/filter keys across chunks, scores,
recommendations and agent runs, so they must never be reworded.
"""

import re
from enum import Enum


class Dimension(str, Enum):
    """Readiness dimension scored on a 1-9 scale."""

    TECHNOLOGY = "Technology"
    CUSTOMER_MARKET = "Customer/Market"
    BUSINESS_MODEL = "Business Model"
    TEAM = "Team"
    IP = "IP"
    FUNDING = "Funding"
    SUSTAINABILITY = "Sustainability"
    SYSTEM_INTEGRATION = "System Integration"


ALL_DIMENSIONS: list[str] = [d.value for d in Dimension]

MIN_LEVEL = 1
MAX_LEVEL = 9


def is_dimension(value: str) -> bool:
    """Check whether a string is one of the eight dimension names."""
    return value in ALL_DIMENSIONS


def dimension_slug(dimension: str) -> str:
    """Lowercase form used in evidence references.

    Every character outside [a-z0-9] becomes an underscore, so
    'Customer/Market' -> 'customer_market'.
    """
    return re.sub(r"[^a-z0-9]", "_", dimension.lower())
