"""Per-game samples for each analysis kind."""

from __future__ import annotations

from typing import Iterator, Optional, Sequence, Tuple

from shuffler.config import (
    HAND_SIZE,
    POSITION_BEST_OF,
    SIDEBOARD_TRACKING_BROKEN,
    SMOOTHED_SHUFFLING_RELEASE,
    CollectionConfig,
)
from shuffler.store.matches import GameRecord, MatchRecord

from .bucketing import GameSample
from .counting import PositionSet, section_hand_counts, select_sections
from .records import CardGroup, HandGroup, LandGroup, PositionGroup


def in_ranges(game: GameRecord, config: CollectionConfig) -> bool:
    """True when the game's deck size and land count fall in a configured range."""
    for allowed in config["ranges"]:
        low, high = allowed["lands"]
        if game.deck_size in allowed["deck_sizes"] and low <= game.lands_in_deck <= high:
            return True
    return False


def eligible_game(match: MatchRecord, game: GameRecord) -> bool:
    """False for sideboarded games whose decklist the client may have reported wrongly."""
    return game.index == 0 or match.tool_version is not None or match.date < SIDEBOARD_TRACKING_BROKEN


def land_samples(match: MatchRecord, config: CollectionConfig) -> Iterator[GameSample[Sequence[int]]]:
    for game in match.games:
        if not game.library_lands or not eligible_game(match, game):
            continue
        if game.mulligans > config["max_mulligans"] or not in_ranges(game, config):
            continue
        key = LandGroup(
            deck_size=game.deck_size,
            lands_in_deck=game.lands_in_deck,
            library_size=game.library_size,
            lands_in_library=game.lands_in_library,
            best_of=match.best_of,
            shuffling=match.shuffling,
        )
        yield GameSample(key=key, date=match.date, value=game.library_lands)


def _hand_shuffling(match: MatchRecord, hand_lands: Tuple[int, ...]) -> Iterator[Tuple[str, Tuple[Optional[int], ...]]]:
    """Split a game's hands by the shuffling each one was drawn with.

    Bo3 hands are always standard. Bo1 hands after the smoothing release are all
    smoothed; before it only the opening hand was, so mulligans count as standard
    with the opening-hand slot left empty.
    """
    if match.best_of != 1:
        yield "standard", hand_lands
    elif match.date > SMOOTHED_SHUFFLING_RELEASE:
        yield "smoothed", hand_lands
    else:
        yield "smoothed", hand_lands[:1]
        if len(hand_lands) > 1:
            yield "standard", (None,) + hand_lands[1:HAND_SIZE]


def hand_samples(match: MatchRecord, config: CollectionConfig) -> Iterator[GameSample[Sequence[Optional[int]]]]:
    for game in match.games:
        if not game.hand_lands or game.cards_known == 0 or not eligible_game(match, game):
            continue
        if game.mulligans > config["max_mulligans"] or not in_ranges(game, config):
            continue
        for shuffling, hands in _hand_shuffling(match, game.hand_lands):
            key = HandGroup(
                deck_size=game.deck_size,
                lands_in_deck=game.lands_in_deck,
                best_of=match.best_of,
                shuffling=shuffling,
            )
            yield GameSample(key=key, date=match.date, value=hands)


def card_samples(match: MatchRecord, config: CollectionConfig) -> Iterator[GameSample[PositionSet]]:
    for game in match.games:
        if game.cards_known == 0 or not eligible_game(match, game):
            continue
        if game.mulligans > config["max_mulligans"] or not in_ranges(game, config):
            continue
        for copies, card_sets in sorted(game.multi_card_positions.items()):
            if not card_sets:
                continue
            for kind, sets in (("all", card_sets), ("first", card_sets[:1])):
                key = CardGroup(
                    deck_size=game.deck_size,
                    best_of=match.best_of,
                    shuffling=match.shuffling,
                    copies=copies,
                    type=kind,
                )
                for positions in sets:
                    yield GameSample(key=key, date=match.date, value=(positions, game.cards_known))


def position_samples(match: MatchRecord, config: CollectionConfig) -> Iterator[GameSample[Sequence[int]]]:
    if match.best_of != POSITION_BEST_OF:
        return
    for game in match.games:
        if not game.deck_list or not game.hands_drawn or not in_ranges(game, config):
            continue
        for section in select_sections(game.deck_list, game.deck_size):
            key = PositionGroup(
                deck_size=game.deck_size,
                end=section.end,
                num_cards=section.num_cards,
                update=match.update,
            )
            yield GameSample(key=key, date=match.date, value=section_hand_counts(section, game.hands_drawn))


__all__ = ["card_samples", "eligible_game", "hand_samples", "in_ranges", "land_samples", "position_samples"]
