from .ballots import ElectionInfo, PreferenceBallot
from .exceptions import (
    BallotException,
    CandidateDoesNotExist,
    IncompleteResult,
    RoundLimitExceeded,
    STVException,
)
from .meek import MeekSTV, calculate_meek_stv
from .quotas import droop_quota, dynamic_droop_threshold
from .report import TextReport
from .result import ElectionResult, ElectionRound
from .tiebreak_strategies import TiebreakHistory, TiebreakRandom
from .types import RoundAction, SelectionMethod

__all__ = [
    "BallotException",
    "CandidateDoesNotExist",
    "ElectionInfo",
    "ElectionResult",
    "ElectionRound",
    "IncompleteResult",
    "MeekSTV",
    "PreferenceBallot",
    "RoundAction",
    "RoundLimitExceeded",
    "STVException",
    "SelectionMethod",
    "TextReport",
    "TiebreakHistory",
    "TiebreakRandom",
    "calculate_meek_stv",
    "droop_quota",
    "dynamic_droop_threshold",
]
