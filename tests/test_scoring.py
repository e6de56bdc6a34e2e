"""Unit tests for the match scorer (pure functions, no I/O)."""
import math

import pytest

from frictionless.models import InvestorProfile, StartupProfile
from frictionless.scoring import (
    DEFAULT_WEIGHTS,
    ScoringWeights,
    calculate_match_score,
    combine,
    geography_match,
    parse_funding_amount,
    readiness_match,
    score_breakdown,
    sector_match,
    stage_match,
    ticket_size_match,
)
from tests.test_fixtures import (
    AUSTIN_SAAS,
    BERLIN_GAMING,
    EMPTY_INVESTOR,
    EMPTY_STARTUP,
    TEXAS_SAAS_FUND,
    US_FINTECH_ANGEL,
)


# --- whole-score properties ---

def test_weights_sum_to_100():
    assert DEFAULT_WEIGHTS.total == 100


def test_austin_saas_vs_texas_fund_scores_97():
    breakdown = score_breakdown(AUSTIN_SAAS, TEXAS_SAAS_FUND)
    assert breakdown == {
        "sector": 0.9,
        "stage": 1.0,
        "geography": 1.0,
        "readiness": 1.0,
        "ticket_size": 1.0,
    }
    assert calculate_match_score(AUSTIN_SAAS, TEXAS_SAAS_FUND) == 97


def test_berlin_gaming_vs_fintech_angel_scores_29():
    breakdown = score_breakdown(BERLIN_GAMING, US_FINTECH_ANGEL)
    assert breakdown == {
        "sector": 0.3,
        "stage": 0.2,
        "geography": 0.4,
        "readiness": 0.3,
        "ticket_size": 0.3,
    }
    assert calculate_match_score(BERLIN_GAMING, US_FINTECH_ANGEL) == 29


def test_all_missing_data_scores_exactly_50():
    assert calculate_match_score(EMPTY_STARTUP, EMPTY_INVESTOR) == 50


def test_empty_lists_count_as_missing():
    investor = InvestorProfile(user_id="i", focus_sectors=[], focus_stages=[], geography_focus=[])
    assert calculate_match_score(EMPTY_STARTUP, investor) == 50


def test_perfect_match_scores_exactly_100():
    startup = StartupProfile(
        user_id="s", industry="FinTech", stage="Seed", headquarters="Austin, TX",
        funding_ask="$1M", readiness_score=90,
    )
    investor = InvestorProfile(
        user_id="i", focus_sectors=["Healthcare", "fintech"], focus_stages=["seed"],
        geography_focus=["Austin"], ticket_size_min=500_000, ticket_size_max=2_000_000,
    )
    assert calculate_match_score(startup, investor) == 100


@pytest.mark.parametrize("startup,investor", [
    (AUSTIN_SAAS, EMPTY_INVESTOR),
    (EMPTY_STARTUP, TEXAS_SAAS_FUND),
    (BERLIN_GAMING, TEXAS_SAAS_FUND),
    (StartupProfile(user_id="s", readiness_score=-40, funding_ask="-$5M"), US_FINTECH_ANGEL),
    (StartupProfile(user_id="s", readiness_score=250, funding_ask="..."), US_FINTECH_ANGEL),
    (StartupProfile(user_id="s", readiness_score=float("nan")), TEXAS_SAAS_FUND),
    (StartupProfile(user_id="s", industry="", stage="", headquarters=""), InvestorProfile(
        user_id="i", focus_sectors=[""], focus_stages=["??"], geography_focus=[""],
        ticket_size_min=0, ticket_size_max=0,
    )),
])
def test_score_is_always_an_int_between_0_and_100(startup, investor):
    score = calculate_match_score(startup, investor)
    assert isinstance(score, int)
    assert 0 <= score <= 100


def test_readiness_improvement_never_lowers_score():
    scores = []
    for readiness in [5, 35, 45, 55, 65, 75, 85, 100]:
        startup = AUSTIN_SAAS.model_copy(update={"readiness_score": readiness})
        scores.append(calculate_match_score(startup, US_FINTECH_ANGEL))
    assert scores == sorted(scores)
    assert scores[0] < scores[-1]


def test_custom_weights_only_sector():
    weights = ScoringWeights(sector=1, stage=0, geography=0, readiness=0, ticket_size=0)
    assert calculate_match_score(AUSTIN_SAAS, TEXAS_SAAS_FUND, weights) == 90


def test_combine_rounds_half_up():
    breakdown = {"sector": 0.5, "stage": 0.5, "geography": 0.5, "readiness": 0.5, "ticket_size": 0.525}
    # 0.5 * 90 + 0.525 * 10 = 50.25 -> 50
    assert combine(breakdown) == 50
    breakdown["ticket_size"] = 0.55
    # 50.5 -> 51
    assert combine(breakdown) == 51


def test_combine_with_zero_weights_returns_zero():
    weights = ScoringWeights(0, 0, 0, 0, 0)
    assert combine(score_breakdown(AUSTIN_SAAS, TEXAS_SAAS_FUND), weights) == 0


# --- sector ---

@pytest.mark.parametrize("industry,sectors,expected", [
    ("FinTech", ["fintech"], 1.0),
    ("SaaS", ["B2B SaaS"], 0.9),
    ("Enterprise SaaS Platform", ["saas"], 0.9),
    ("AI", ["Machine Learning"], 0.8),
    ("Payments", ["Financial Services"], 0.8),
    ("Gaming", ["FinTech", "Biotech"], 0.3),
    (None, ["FinTech"], 0.5),
    ("FinTech", None, 0.5),
    ("FinTech", [], 0.5),
])
def test_sector_match(industry, sectors, expected):
    assert sector_match(industry, sectors) == expected


def test_sector_match_takes_best_across_list():
    # "software" is only related to "saas", but the exact entry later on wins
    assert sector_match("SaaS", ["Software", "SaaS"]) == 1.0
    assert sector_match("SaaS", ["Cloud Software", "Gaming"]) == 0.8


# --- stage ---

@pytest.mark.parametrize("stage,stages,expected", [
    ("Seed", ["seed"], 1.0),
    ("Seed Round", ["Seed"], 1.0),
    ("Seed", ["Series A"], 0.7),
    ("Pre-Seed", ["Seed"], 0.7),
    ("Series A", ["Pre-seed", "Series C"], 0.2),
    ("Bridge Round", ["Seed"], 0.2),
    ("Seed", ["Growth"], 0.2),
    (None, ["Seed"], 0.5),
    ("Seed", [], 0.5),
])
def test_stage_match(stage, stages, expected):
    assert stage_match(stage, stages) == expected


def test_stage_match_prefers_same_rung_over_adjacent():
    assert stage_match("Seed", ["Pre-seed", "Seed (lead)"]) == 1.0


# --- geography ---

@pytest.mark.parametrize("hq,geos,expected", [
    ("Austin, TX", ["Austin"], 1.0),
    ("Texas", ["Austin, Texas"], 1.0),
    ("San Antonio", ["TX"], 1.0),
    ("Austin, TX", ["Texas"], 1.0),
    ("Boston, MA", ["US"], 0.9),
    ("Lagos, Nigeria", ["USA"], 0.4),
    ("Seattle", ["United States", "Canada"], 0.9),
    ("Berlin", ["France"], 0.4),
    (None, ["US"], 0.5),
    ("Berlin", None, 0.5),
])
def test_geography_match(hq, geos, expected):
    assert geography_match(hq, geos) == expected


def test_geography_us_alias_is_exact_not_substring():
    # "us west" is not one of the US aliases, so a US city gets only the baseline
    assert geography_match("Chicago", ["US West"]) == 0.4


# --- readiness ---

@pytest.mark.parametrize("readiness,expected", [
    (100, 1.0), (80, 1.0), (79.9, 0.9), (70, 0.9), (60, 0.8),
    (50, 0.6), (40, 0.4), (39, 0.3), (1, 0.3),
    (0, 0.5), (None, 0.5),
])
def test_readiness_match(readiness, expected):
    assert readiness_match(readiness) == expected


# --- ticket size ---

@pytest.mark.parametrize("ask,expected", [
    ("$500K", 500_000),
    ("$1.5M", 1_500_000),
    ("2B", 2_000_000_000),
    ("1,000,000", 1_000_000),
    ("$ 250 k SAFE", 250_000),
    ("$1M-$3M equity", 1_000_000),
    (".5m", 500_000),
    ("TBD", None),
    ("", None),
    (None, None),
])
def test_parse_funding_amount(ask, expected):
    assert parse_funding_amount(ask) == expected


@pytest.mark.parametrize("ask,low,high,expected", [
    ("$500K", 250_000, 750_000, 1.0),
    ("$120K", 150_000, 1_000_000, 0.7),
    ("$1.2M", 250_000, 1_000_000, 0.7),
    ("$10M", 50_000, 200_000, 0.3),
    ("$50K", 500_000, None, 0.3),
    ("$5M", 500_000, None, 1.0),
    ("$100K", None, 200_000, 1.0),
    ("$500K", None, None, 0.5),
    ("$500K", 0, None, 0.5),
    ("not sure yet", 100_000, 500_000, 0.5),
    ("$0", 100_000, 500_000, 0.5),
    (None, 100_000, 500_000, 0.5),
])
def test_ticket_size_match(ask, low, high, expected):
    assert ticket_size_match(ask, low, high) == expected


def test_ticket_size_unbounded_max_is_infinite():
    assert ticket_size_match("$900B", 1_000, None) == 1.0
    assert not math.isinf(parse_funding_amount("$900B"))
