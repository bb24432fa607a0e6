from __future__ import annotations

from collections.abc import Hashable, Iterable
from enum import Enum
from typing import TypedDict

Candidate = int
Candidates = tuple[Candidate, ...]
CandidateLabel = Hashable
BallotData = (
    dict[tuple[CandidateLabel, ...], int]
    | Iterable[tuple[Iterable[CandidateLabel], int]]
)
# Scaled by P = 10 ** precision, indexed by candidate
Counts = tuple[int, ...]
KeepFactors = tuple[int, ...]


class CandidateStatus(str, Enum):
    Continuing = "Continuing"
    Elected = "Elected"
    Excluded = "Excluded"


class RoundAction(str, Enum):
    First = "first"
    Surplus = "surplus"
    Eliminate = "eliminate"


class SelectionMethod(str, Enum):
    Direct = "Direct"
    TiebreakHistory = "Tiebreak (history)"
    TiebreakRandom = "Tiebreak (Random)"


class TiebreakDict(TypedDict):
    purpose: str
    tied: tuple[str, ...]
    selected: str
    method: str


class RoundDict(TypedDict):
    round: int
    action: str
    action_candidates: tuple[str, ...]
    elected: tuple[str, ...]
    excluded: tuple[str, ...]
    vote_count: dict[str, float]
    keep_factors: dict[str, float]
    exhausted: float
    surplus: float
    threshold: float
    tiebreaks: tuple[TiebreakDict, ...]
    message: str


class ResultDict(TypedDict):
    title: str
    winners: tuple[str, ...]
    losers: tuple[str, ...]
    candidates: tuple[str, ...]
    withdrawn: tuple[str, ...]
    seats: int
    complete: bool
    anomaly: bool
    incomplete_reason: str
    status: dict[str, str]
    rounds: tuple[RoundDict, ...]
    randomized: bool
    precision: int
    runtime: float
    ballot_count: int
    empty_ballot_count: int
