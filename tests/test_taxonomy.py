"""Tests for the sector groups, stage ladder and location tables."""
from frictionless.taxonomy import (
    RELATED_SECTOR_GROUPS,
    STAGE_LADDER,
    US_LOCATIONS,
    is_us_location,
    sector_groups_for,
    sectors_related,
    stage_index,
)


def test_eight_related_sector_groups():
    assert len(RELATED_SECTOR_GROUPS) == 8
    for group in RELATED_SECTOR_GROUPS:
        assert group
        assert all(term == term.lower() for term in group)


def test_stage_ladder_order():
    assert STAGE_LADDER == ["pre-seed", "seed", "series a", "series b", "series c"]


def test_stage_index_prefers_pre_seed_over_seed():
    assert stage_index("pre-seed") == 0
    assert stage_index("seed") == 1
    assert stage_index("series b extension") == 3
    assert stage_index("growth") is None


def test_sector_groups_for_multi_membership():
    # "saas platform" is both software and marketplace
    assert sector_groups_for("saas platform") == [1, 6]
    assert sector_groups_for("gaming") == []


def test_sectors_related():
    assert sectors_related("healthtech", "medical devices")
    assert sectors_related("developer tools", "cloud infrastructure")
    assert not sectors_related("fintech", "cleantech")


def test_us_locations():
    assert len(US_LOCATIONS) == 10
    assert is_us_location("san francisco, ca")
    assert not is_us_location("toronto")
