"""Constants for the ranker module."""

# BM25 saturation and length normalization
BM25_K1: float = 1.5
BM25_B: float = 0.75

# Tokens shorter than this are noise for the lexical index
MIN_TOKEN_LENGTH: int = 3

# Recency decay is clamped into [RECENCY_FLOOR, RECENCY_CEILING]
RECENCY_FLOOR: float = 0.2
RECENCY_CEILING: float = 1.0

SECONDS_PER_DAY: float = 86_400.0

# Default per-source cap when no period is given
DEFAULT_PER_SOURCE_CAP: int = 2
