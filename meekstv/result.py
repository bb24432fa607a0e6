from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from time import time
from typing import TYPE_CHECKING

from meekstv.messages import scaled
from meekstv.tiebreak_strategies import Tiebreak
from meekstv.types import (
    Candidate,
    Candidates,
    CandidateStatus,
    Counts,
    KeepFactors,
    ResultDict,
    RoundAction,
    RoundDict,
    SelectionMethod,
)

if TYPE_CHECKING:  # pragma: no coverage
    from meekstv.ballots import ElectionInfo
    from meekstv.candidates import CandidateSets
    from meekstv.tiebreak_strategies import TiebreakStrategy
    from typing_extensions import Self


@dataclass(frozen=True)
class ElectionRound:
    """Everything that happened in one round. All numbers are scaled by P."""

    round: int
    action: RoundAction
    action_candidates: Candidates
    keep_factors: KeepFactors
    counts: Counts
    exhausted: int
    threshold: int
    surplus: int
    elected: Candidates = ()
    excluded: Candidates = ()
    tiebreaks: tuple[Tiebreak, ...] = ()
    message: str = ""

    def as_dict(self, names: Sequence[str], precision: int) -> RoundDict:
        def value(v: int) -> float:
            return float(scaled(v, precision))

        def named(candidates: Iterable[Candidate]) -> tuple[str, ...]:
            return tuple(names[c] for c in candidates)

        return {
            "round": self.round + 1,
            "action": self.action.value,
            "action_candidates": named(self.action_candidates),
            "elected": named(self.elected),
            "excluded": named(self.excluded),
            "vote_count": {n: value(v) for n, v in zip(names, self.counts)},
            "keep_factors": {n: value(v) for n, v in zip(names, self.keep_factors)},
            "exhausted": value(self.exhausted),
            "surplus": value(self.surplus),
            "threshold": value(self.threshold),
            "tiebreaks": tuple(
                {
                    "purpose": t.purpose,
                    "tied": named(t.tied),
                    "selected": names[t.selected],
                    "method": t.method.value,
                }
                for t in self.tiebreaks
            ),
            "message": self.message.strip(),
        }


class ElectionResult(list[Candidate]):
    """Winners in election order, and the full round history"""

    runtime = 0.0
    rounds: list[ElectionRound]
    # Set when the count was stopped by the round limit
    anomaly = False
    # Why the count stopped before all seats were filled
    incomplete_reason = ""
    statuses: tuple[CandidateStatus, ...] = ()

    def __init__(self, info: ElectionInfo, precision: int) -> None:
        super().__init__()
        self.title = info.title
        self.names = info.names
        self.seats = info.seats
        self.withdrawn = info.withdrawn
        self.ballot_count = info.ballot_count
        self.empty_ballot_count = info.empty_ballot_count
        self.precision = precision
        self.rounds = []
        self.start_time = time()
        self.result_extra = {}

    def __repr__(self) -> str:  # pragma: no coverage
        return f"<ElectionResult in {len(self.rounds)} round(s): {', '.join(self.winner_names)}>"

    def add_round(self, election_round: ElectionRound) -> None:
        if election_round.round != len(self.rounds):
            raise ValueError(
                f"Round {election_round.round} added after {len(self.rounds)} rounds"
            )
        self.rounds.append(election_round)
        self.extend(election_round.elected)

    def finalize(
        self, tiebreakers: Iterable[TiebreakStrategy], sets: CandidateSets | None = None
    ) -> Self:
        self.runtime = round(time() - self.start_time, 6)
        if sets is not None:
            self.statuses = tuple(sets.status(c) for c in range(len(self.names)))
        for tiebreaker in tiebreakers:
            self.result_extra.update(**tiebreaker.get_result_dict())
        return self

    @property
    def randomized(self) -> bool:
        return any(
            t.method == SelectionMethod.TiebreakRandom
            for r in self.rounds
            for t in r.tiebreaks
        )

    @property
    def complete(self) -> bool:
        return not self.anomaly and len(self) == self.seats

    @property
    def losers(self) -> Candidates:
        """Candidates excluded during the count, in order. Withdrawn candidates are not included."""
        return tuple(c for r in self.rounds for c in r.excluded)

    @property
    def winner_names(self) -> tuple[str, ...]:
        return tuple(self.names[c] for c in self)

    def won_at(self, candidate: Candidate) -> int | None:
        return next((r.round for r in self.rounds if candidate in r.elected), None)

    def lost_at(self, candidate: Candidate) -> int | None:
        return next((r.round for r in self.rounds if candidate in r.excluded), None)

    def elected_as_tuple(self) -> tuple[str, ...]:
        return self.winner_names

    def elected_as_set(self) -> set[str]:
        return set(self.winner_names)

    def as_dict(self) -> ResultDict:
        return {
            "title": self.title,
            "winners": self.winner_names,
            "losers": tuple(self.names[c] for c in self.losers),
            "candidates": self.names,
            "withdrawn": tuple(self.names[c] for c in self.withdrawn),
            "seats": self.seats,
            "complete": self.complete,
            "anomaly": self.anomaly,
            "incomplete_reason": self.incomplete_reason,
            "status": {n: s.value for n, s in zip(self.names, self.statuses)},
            "rounds": tuple(r.as_dict(self.names, self.precision) for r in self.rounds),
            "randomized": self.randomized,
            "precision": self.precision,
            "runtime": self.runtime,
            "ballot_count": self.ballot_count,
            "empty_ballot_count": self.empty_ballot_count,
            **self.result_extra,
        }
