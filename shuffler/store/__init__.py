from .io import DistributionStore, JsonDistributionStore, MemoryDistributionStore, open_store
from .matches import DeckEntry, GameRecord, MatchRecord, load_matches, parse_match

__all__ = [
    "DeckEntry",
    "DistributionStore",
    "GameRecord",
    "JsonDistributionStore",
    "MatchRecord",
    "MemoryDistributionStore",
    "load_matches",
    "open_store",
    "parse_match",
]
