"""Lookup tables used by the match scorer.

All entries are lowercase. Matching against them is substring containment,
so "b2b saas platform" belongs to both the saas and the marketplace groups.
"""

# Sectors that count as related even when neither string contains the other.
RELATED_SECTOR_GROUPS: list[list[str]] = [
    ["ai", "ml", "machine learning", "artificial intelligence", "ai/ml"],
    ["saas", "software", "b2b saas", "enterprise software"],
    ["fintech", "finance", "financial services", "payments"],
    ["healthtech", "health", "medical", "healthcare"],
    ["cleantech", "climate tech", "sustainability", "green tech"],
    ["iot", "internet of things", "smart cities", "sensors"],
    ["marketplace", "platform", "consumer tech"],
    ["devops", "infrastructure", "cloud", "developer tools"],
]

# Funding stages, earliest first. Order matters: "pre-seed" must be checked
# before "seed" since the latter is a substring of the former.
STAGE_LADDER: list[str] = ["pre-seed", "seed", "series a", "series b", "series c"]

# Headquarters markers that place a startup in Texas
TEXAS_HQ_MARKERS: list[str] = ["texas", "tx", "austin", "san antonio"]
TEXAS_GEO_MARKERS: list[str] = ["texas", "tx"]

# Investor geography values meaning "anywhere in the US" (exact, not substring)
US_GEO_ALIASES: set[str] = {"us", "usa", "united states"}
US_HQ_MARKERS: list[str] = ["usa", "united states"]
US_LOCATIONS: list[str] = [
    "texas", "california", "new york", "boston", "seattle",
    "austin", "san francisco", "chicago", "miami", "atlanta",
]


def contains_any(text: str, markers) -> bool:
    return any(m in text for m in markers)


def sector_groups_for(sector: str) -> list[int]:
    """Indexes of every related-sector group the (lowercase) sector falls in."""
    return [i for i, group in enumerate(RELATED_SECTOR_GROUPS) if contains_any(sector, group)]


def sectors_related(a: str, b: str) -> bool:
    """True when both lowercase sector strings share a related-sector group."""
    return bool(set(sector_groups_for(a)) & set(sector_groups_for(b)))


def stage_index(stage: str) -> int | None:
    """Position of a lowercase stage string on the stage ladder, or None."""
    for i, rung in enumerate(STAGE_LADDER):
        if rung in stage:
            return i
    return None


def is_us_location(location: str) -> bool:
    return contains_any(location, US_LOCATIONS)
