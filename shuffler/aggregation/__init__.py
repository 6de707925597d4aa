"""Count distributions, bucket keys and the sample counting that feeds them."""

from .distribution import (
    Distribution,
    Leaf,
    Pair,
    ShapeMismatchError,
    Vector,
    from_nested,
    merge,
    merge_all,
    to_nested,
    total,
    zeros_like,
)
from .records import (
    AccumulatedRecord,
    BucketKey,
    CardGroup,
    HandGroup,
    LandGroup,
    LibraryGroup,
    PositionGroup,
)
from .bucketing import BucketPlan, GameSample, build_bucket_plan
from .counting import card_distribution, hand_distribution, land_distribution, select_sections
from .regroup import combine_library_groups

__all__ = [
    "AccumulatedRecord",
    "BucketKey",
    "BucketPlan",
    "CardGroup",
    "Distribution",
    "GameSample",
    "HandGroup",
    "LandGroup",
    "Leaf",
    "LibraryGroup",
    "Pair",
    "PositionGroup",
    "ShapeMismatchError",
    "Vector",
    "build_bucket_plan",
    "card_distribution",
    "combine_library_groups",
    "from_nested",
    "hand_distribution",
    "land_distribution",
    "merge",
    "merge_all",
    "select_sections",
    "to_nested",
    "total",
    "zeros_like",
]
