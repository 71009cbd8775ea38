"""Keyword scoring — the single-instance model and the arbiter that owns it."""

from jobkeywords.scoring.arbiter import ScoreRequest, ScoreResponse, ScoringArbiter
from jobkeywords.scoring.model import KeywordModel, OllamaKeywordModel

__all__ = [
    "KeywordModel",
    "OllamaKeywordModel",
    "ScoreRequest",
    "ScoreResponse",
    "ScoringArbiter",
]
