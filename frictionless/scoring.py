"""Startup/investor compatibility scoring.

A match score is the weighted average of five factor scores, each in [0, 1],
expressed as an integer percentage. Every factor falls back to a neutral 0.5
when either side is missing the data it needs, and every weight stays in the
denominator regardless, so a pair with no data at all scores exactly 50.

The factor constants (0.3 sector baseline, 0.7 adjacent stage, 0.4 geography
baseline, ...) are empirical product values. Keep them unless product says
otherwise.
"""
import math
import re
from dataclasses import dataclass, asdict

from frictionless.models import InvestorProfile, StartupProfile
from frictionless.taxonomy import (
    TEXAS_GEO_MARKERS,
    TEXAS_HQ_MARKERS,
    US_GEO_ALIASES,
    US_HQ_MARKERS,
    contains_any,
    is_us_location,
    sectors_related,
    stage_index,
)

NEUTRAL = 0.5


@dataclass(frozen=True)
class ScoringWeights:
    sector: int = 30
    stage: int = 25
    geography: int = 15
    readiness: int = 20
    ticket_size: int = 10

    @property
    def total(self) -> int:
        return self.sector + self.stage + self.geography + self.readiness + self.ticket_size


DEFAULT_WEIGHTS = ScoringWeights()

_AMOUNT_STRIP = re.compile(r"[$,\s]")
_NUMBER = re.compile(r"\d*\.?\d+")


def _lower_entries(values: list[str] | None) -> list[str]:
    return [v.lower() for v in (values or []) if v]


def sector_match(industry: str | None, focus_sectors: list[str] | None) -> float:
    sectors = _lower_entries(focus_sectors)
    if not industry or not sectors:
        return NEUTRAL

    industry = industry.lower()
    best = 0.3
    for sector in sectors:
        if industry == sector:
            return 1.0
        if industry in sector or sector in industry:
            best = max(best, 0.9)
        elif sectors_related(industry, sector):
            best = max(best, 0.8)
    return best


def stage_match(stage: str | None, focus_stages: list[str] | None) -> float:
    stages = _lower_entries(focus_stages)
    if not stage or not stages:
        return NEUTRAL

    stage = stage.lower()
    if stage in stages:
        return 1.0

    startup_rung = stage_index(stage)
    if startup_rung is None:
        return 0.2

    best = 0.2
    for investor_stage in stages:
        investor_rung = stage_index(investor_stage)
        if investor_rung is None:
            continue
        distance = abs(startup_rung - investor_rung)
        if distance == 0:
            return 1.0
        if distance == 1:
            best = 0.7
    return best


def geography_match(headquarters: str | None, geography_focus: list[str] | None) -> float:
    geos = _lower_entries(geography_focus)
    if not headquarters or not geos:
        return NEUTRAL

    hq = headquarters.lower()
    in_texas = contains_any(hq, TEXAS_HQ_MARKERS)
    in_us = contains_any(hq, US_HQ_MARKERS) or is_us_location(hq)

    best = 0.4
    for geo in geos:
        if geo in hq or hq in geo:
            return 1.0
        if in_texas and contains_any(geo, TEXAS_GEO_MARKERS):
            return 1.0
        if geo in US_GEO_ALIASES and in_us:
            best = 0.9
    return best


def readiness_match(readiness_score: float | None) -> float:
    if not readiness_score or math.isnan(readiness_score):
        return NEUTRAL
    if readiness_score >= 80:
        return 1.0
    if readiness_score >= 70:
        return 0.9
    if readiness_score >= 60:
        return 0.8
    if readiness_score >= 50:
        return 0.6
    if readiness_score >= 40:
        return 0.4
    return 0.3


def parse_funding_amount(funding_ask: str | None) -> float | None:
    """Turn a free-text ask like "$1.5M" or "500k SAFE" into dollars.

    The multiplier comes from the first of k / m / b found anywhere in the
    text, the amount from the first number. Returns None when no number is
    present.
    """
    if not funding_ask:
        return None
    cleaned = _AMOUNT_STRIP.sub("", funding_ask.lower())

    multiplier = 1
    if "k" in cleaned:
        multiplier = 1_000
    elif "m" in cleaned:
        multiplier = 1_000_000
    elif "b" in cleaned:
        multiplier = 1_000_000_000

    number = _NUMBER.search(cleaned)
    if not number:
        return None
    return float(number.group()) * multiplier


def ticket_size_match(funding_ask: str | None, ticket_min: float | None, ticket_max: float | None) -> float:
    if not funding_ask or (not ticket_min and not ticket_max):
        return NEUTRAL

    amount = parse_funding_amount(funding_ask)
    if not amount:
        return NEUTRAL

    low = ticket_min or 0
    high = ticket_max or math.inf
    if low <= amount <= high:
        return 1.0
    if low * 0.5 <= amount <= high * 1.5:
        return 0.7
    return 0.3


def score_breakdown(startup: StartupProfile, investor: InvestorProfile) -> dict[str, float]:
    """Per-factor scores in [0, 1], keyed like the ScoringWeights fields."""
    return {
        "sector": sector_match(startup.industry, investor.focus_sectors),
        "stage": stage_match(startup.stage, investor.focus_stages),
        "geography": geography_match(startup.headquarters, investor.geography_focus),
        "readiness": readiness_match(startup.readiness_score),
        "ticket_size": ticket_size_match(
            startup.funding_ask, investor.ticket_size_min, investor.ticket_size_max
        ),
    }


def combine(breakdown: dict[str, float], weights: ScoringWeights = DEFAULT_WEIGHTS) -> int:
    """Weighted average of factor scores as a 0-100 integer, rounded half up."""
    weight_map = asdict(weights)
    total = weights.total
    if total <= 0:
        return 0
    weighted = sum(breakdown[name] * weight for name, weight in weight_map.items())
    # round to 6 places first so 96.99999999 style float noise doesn't flip the result
    percentage = round(100 * weighted / total, 6)
    return max(0, min(100, math.floor(percentage + 0.5)))


def calculate_match_score(
    startup: StartupProfile,
    investor: InvestorProfile,
    weights: ScoringWeights = DEFAULT_WEIGHTS,
) -> int:
    return combine(score_breakdown(startup, investor), weights)
