"""Keyword-based relevance tagging of chunks to readiness dimensions."""

import re

from readiness_engine.core.dimensions import ALL_DIMENSIONS, Dimension

DIMENSION_KEYWORDS: dict[str, tuple[str, ...]] = {
    Dimension.TECHNOLOGY.value: ("technology", "tech", "patent", "prototype", "trl", "readiness"),
    Dimension.CUSTOMER_MARKET.value: ("market", "customer", "revenue", "sales", "competition", "pricing"),
    Dimension.TEAM.value: ("team", "founder", "employee", "hire", "experience", "skill"),
    Dimension.BUSINESS_MODEL.value: (
        "business model",
        "revenue model",
        "pricing",
        "monetization",
        "strategy",
        "plan",
    ),
    Dimension.IP.value: ("patent", "ip", "intellectual property", "trademark", "copyright", "license"),
    Dimension.FUNDING.value: ("funding", "investment", "investor", "capital", "round", "valuation"),
    Dimension.SUSTAINABILITY.value: ("sustainability", "environment", "carbon", "green", "esg", "impact"),
    Dimension.SYSTEM_INTEGRATION.value: (
        "integration",
        "partnership",
        "collaboration",
        "ecosystem",
        "api",
        "platform",
    ),
}


# Substring matching throughout, except "ip", which would hit "ship" or "equipment"
WHOLE_WORD_KEYWORDS: dict[str, re.Pattern[str]] = {
    "ip": re.compile(r"\bips?\b"),
}


def _mentions(lowered: str, keyword: str) -> bool:
    pattern = WHOLE_WORD_KEYWORDS.get(keyword)
    if pattern is not None:
        return bool(pattern.search(lowered))
    return keyword in lowered


def tag_dimensions(content: str) -> list[str]:
    """
    Tag text with the dimensions its keywords point to.

    Matching is case-insensitive on substrings, so "deeptech" counts as
    "tech". Text with no keyword hit is relevant to every dimension, so it
    gets all eight tags.

    Args:
        content: Chunk text

    Returns:
        Dimension names in canonical order (never empty)
    """
    lowered = content.lower()
    matched = [
        dimension
        for dimension in ALL_DIMENSIONS
        if any(_mentions(lowered, keyword) for keyword in DIMENSION_KEYWORDS[dimension])
    ]
    return matched or list(ALL_DIMENSIONS)
