"""Tests for the display-tree transforms."""

from __future__ import annotations

from datetime import datetime, timezone
from pathlib import Path
import sys

import pytest

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from shuffler.aggregation.counting import card_distribution, hand_distribution, land_distribution
from shuffler.aggregation.records import AccumulatedRecord, CardGroup, HandGroup, LandGroup, PositionGroup
from shuffler.stats.records import ShufflingStats, to_dict
from shuffler.views.transform import (
    TRANSFORMS,
    transform_card_stats,
    transform_deck_stats,
    transform_hand_stats,
    transform_land_stats,
    transform_position_stats,
)

EARLY = datetime(2019, 5, 1, tzinfo=timezone.utc)
LATE = datetime(2019, 5, 9, tzinfo=timezone.utc)


def _land_record(best_of: int, deck_size: int = 40, date: datetime = EARLY) -> AccumulatedRecord:
    key = LandGroup(deck_size, 17, 33, 14, best_of, "standard")
    return AccumulatedRecord(key, date, land_distribution(33, 14, [(0, 1, 1), (1, 1)]))


def _hand_record(best_of: int, shuffling: str, hands) -> AccumulatedRecord:
    return AccumulatedRecord(HandGroup(40, 17, best_of, shuffling), EARLY, hand_distribution(hands))


# ---------------------------------------------------------------------------
# Absent data


@pytest.mark.parametrize("view", sorted(TRANSFORMS))
def test_transforms_accept_empty_input(view: str) -> None:
    _, transform = TRANSFORMS[view]
    stats_view = transform([])
    assert stats_view.date is None
    assert stats_view.options() == []


def test_missing_branch_selects_none() -> None:
    stats_view = transform_hand_stats([])
    assert stats_view.select(["3"]) is None
    with pytest.raises(ValueError):
        stats_view.select([])


# ---------------------------------------------------------------------------
# Library and deck views


def test_land_view_unions_deck_configurations() -> None:
    stats_view = transform_land_stats([_land_record(1), _land_record(3, deck_size=41, date=LATE)])

    stats = stats_view.select([])
    assert isinstance(stats, ShufflingStats)
    assert stats_view.date == LATE
    assert stats.table("standard")[33][14].num_games == 4
    assert stats.games == {"standard": 4}


def test_deck_view_adds_combined_best_of() -> None:
    stats_view = transform_deck_stats([_land_record(1), _land_record(3)])

    assert stats_view.options() == ["40"]
    assert stats_view.options(["40"]) == ["17"]
    assert stats_view.options(["40", "17"]) == ["1", "3", "all"]

    combined = stats_view.select(["40", "17", "all"])
    single = stats_view.select(["40", "17", "1"])
    bucket = combined.table("standard")[33][14]
    assert bucket.num_games == 2 * single.table("standard")[33][14].num_games
    assert bucket.known[0].counts[0].count == 2
    assert bucket.extrapolated is not None


def test_deck_view_rejects_other_records() -> None:
    with pytest.raises(ValueError):
        transform_deck_stats([_hand_record(3, "standard", [(3,)])])


# ---------------------------------------------------------------------------
# Hands, cards and decklist positions


def test_early_bo1_standard_hands_count_mulligans() -> None:
    stats_view = transform_hand_stats([_hand_record(1, "standard", [(None, 3), (None, 2)])])
    bucket = stats_view.select(["1"]).table("standard")[40][17]
    assert bucket.num_games == 2
    assert bucket.known[0].chance is None


def test_hand_view_combines_formats() -> None:
    records = [
        _hand_record(1, "smoothed", [(3,), (2,)]),
        _hand_record(1, "standard", [(None, 3)]),
        _hand_record(3, "standard", [(3,)]),
    ]
    stats_view = transform_hand_stats(records)

    combined = stats_view.select(["all"])
    assert combined.games == {"standard": 2, "smoothed": 2}
    assert combined.tables["smoothed"] is stats_view.select(["1"]).tables["smoothed"]
    assert combined.table("standard")[40][17].known[0].num_games == 1
    assert combined.table("standard")[40][17].known[1].num_games == 1
    assert stats_view.sample_size_for(0) == 7


def test_card_view_nests_type_then_best_of() -> None:
    records = [
        AccumulatedRecord(CardGroup(40, 3, "standard", 2, "all"), EARLY, card_distribution(40, 2, [((1, 4), 5)])),
        AccumulatedRecord(CardGroup(40, 3, "standard", 2, "first"), EARLY, card_distribution(40, 2, [((1, 4), 5)])),
    ]
    stats_view = transform_card_stats(records)

    assert stats_view.selectors == ("type", "best_of")
    assert stats_view.options() == ["all", "first"]
    assert stats_view.options(["all"]) == ["3", "all"]
    bucket = stats_view.select(["all", "3"]).table("standard")[40][2]
    assert bucket.num_games == 1
    assert len(bucket.known) == 40


def test_position_view_nests_update_then_end() -> None:
    records = [
        AccumulatedRecord(PositionGroup(40, "front", 17, 13), EARLY, hand_distribution([(2,), (3,)])),
        AccumulatedRecord(PositionGroup(40, "back", 16, 13), LATE, hand_distribution([(1,)])),
    ]
    stats_view = transform_position_stats(records)

    assert stats_view.options() == ["13"]
    assert stats_view.options(["13"]) == ["back", "front"]
    front = stats_view.select(["13", "front"])
    assert front.games == {"standard": 2}
    assert front.table("standard")[40][17].known[0].counts[2].count == 1
    assert stats_view.date == LATE


def test_view_tree_serializes() -> None:
    stats_view = transform_deck_stats([_land_record(3)])
    payload = to_dict(stats_view.tree)

    node = payload["40"]["17"]["3"]
    assert node["standardGames"] == 2
    assert node["standard"]["33"]["14"]["numGames"] == 2
    assert "extrapolated" in node["standard"]["33"]["14"]
