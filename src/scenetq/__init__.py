"""Per-scene quality targeting for AV1 encodes."""

from .config import SearchConfig
from .scoring import score_pair
from .search import OverrideEmitter, QuantizerSearch

__version__ = "0.1.0"

__all__ = [
    "SearchConfig",
    "score_pair",
    "OverrideEmitter",
    "QuantizerSearch",
]
