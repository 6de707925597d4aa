"""Raw match records as handed over by the ingestion layer."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Iterator, Mapping, Optional, Tuple

from shuffler.config import LATEST_RELEASE, RELEASES, SMOOTHED_EVENT, SMOOTHED_SHUFFLING_RELEASE

from .helpers import ensure_mapping, int_tuple, parse_date, to_int


@dataclass(frozen=True)
class DeckEntry:
    card_id: int
    quantity: int


@dataclass(frozen=True)
class GameRecord:
    """Shuffler data recorded for one game of a match."""

    index: int
    deck_size: int
    lands_in_deck: int
    library_size: int = 0
    lands_in_library: int = 0
    # Lands in the top 1, 2, ... known library cards.
    library_lands: Tuple[int, ...] = ()
    # Lands in each hand drawn, opening hand first.
    hand_lands: Tuple[int, ...] = ()
    cards_known: int = 0
    # copies -> known 1-based deck positions of each such card, in decklist order.
    multi_card_positions: Mapping[int, Tuple[Tuple[int, ...], ...]] = field(default_factory=dict)
    hands_drawn: Tuple[Tuple[int, ...], ...] = ()
    deck_list: Tuple[DeckEntry, ...] = ()

    @property
    def mulligans(self) -> int:
        return max(len(self.hand_lands) - 1, 0)


@dataclass(frozen=True)
class MatchRecord:
    date: datetime
    best_of: int
    games: Tuple[GameRecord, ...]
    event_id: str = ""
    tool_version: Optional[int] = None

    @property
    def shuffling(self) -> str:
        """Library shuffling used by every game of the match."""
        if self.event_id == SMOOTHED_EVENT and self.date > SMOOTHED_SHUFFLING_RELEASE:
            return "smoothed"
        return "standard"

    @property
    def update(self) -> int:
        """Client release in effect when the match was played."""
        for released_before, update in RELEASES:
            if self.date < released_before:
                return update
        return LATEST_RELEASE


def _deck_list(raw: Any) -> Tuple[DeckEntry, ...]:
    if not raw:
        return ()
    entries = []
    for item in raw:
        entry = ensure_mapping(item)
        entries.append(DeckEntry(card_id=to_int(entry.get("id")), quantity=to_int(entry.get("quantity"))))
    return tuple(entries)


def _multi_card_positions(raw: Any) -> Dict[int, Tuple[Tuple[int, ...], ...]]:
    if not raw:
        return {}
    positions: Dict[int, Tuple[Tuple[int, ...], ...]] = {}
    for copies, cards in ensure_mapping(raw).items():
        card_positions = ensure_mapping(cards) if cards else {}
        positions[to_int(copies)] = tuple(int_tuple(value) for value in card_positions.values())
    return positions


def parse_game(payload: Mapping[str, Any], index: int, match_deck: Any = None) -> GameRecord:
    """Convert one ``gameStats`` entry into a GameRecord."""
    deck = payload.get("deck")
    # Later games may be sideboarded and carry their own decklist.
    raw_deck = ensure_mapping(deck).get("mainDeck") if deck else (match_deck if index == 0 else None)
    shuffled_order = payload.get("shuffledOrder") or []
    return GameRecord(
        index=index,
        deck_size=to_int(payload.get("deckSize")),
        lands_in_deck=to_int(payload.get("landsInDeck")),
        library_size=to_int(payload.get("librarySize", 0)),
        lands_in_library=to_int(payload.get("landsInLibrary", 0)),
        library_lands=int_tuple(payload.get("libraryLands")),
        hand_lands=int_tuple(payload.get("handLands")),
        cards_known=len(shuffled_order),
        multi_card_positions=_multi_card_positions(payload.get("multiCardPositions")),
        hands_drawn=tuple(int_tuple(hand) for hand in payload.get("handsDrawn") or ()),
        deck_list=_deck_list(raw_deck),
    )


def parse_match(payload: Mapping[str, Any]) -> MatchRecord:
    """Convert one stored match document into a MatchRecord."""
    data = ensure_mapping(payload)
    player_deck = data.get("playerDeck")
    match_deck = ensure_mapping(player_deck).get("mainDeck") if player_deck else None
    tool_version = data.get("toolVersion")
    return MatchRecord(
        date=parse_date(data.get("date")),
        best_of=to_int(data.get("bestOf")),
        event_id=str(data.get("eventId") or ""),
        tool_version=to_int(tool_version) if tool_version is not None else None,
        games=tuple(
            parse_game(ensure_mapping(game), index, match_deck) for index, game in enumerate(data.get("gameStats") or ())
        ),
    )


def load_matches(path: Path) -> Iterator[MatchRecord]:
    """Yield MatchRecords from a JSON-lines dump, skipping blank lines."""
    with path.open("r", encoding="utf-8") as handle:
        for line_number, line in enumerate(handle, start=1):
            if not line.strip():
                continue
            try:
                payload = json.loads(line)
            except json.JSONDecodeError as exc:
                raise ValueError(f"{path}:{line_number}: invalid JSON ({exc.msg})") from exc
            yield parse_match(payload)


__all__ = ["DeckEntry", "GameRecord", "MatchRecord", "load_matches", "parse_game", "parse_match"]
