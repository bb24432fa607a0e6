from __future__ import annotations

import random
from collections.abc import Sequence
from typing import Protocol

from typing_extensions import NamedTuple

from meekstv.exceptions import IncompleteResult
from meekstv.messages import join_candidates
from meekstv.types import Candidate, Candidates, Counts, SelectionMethod

History = tuple[Counts, ...]


class Resolution(NamedTuple):
    candidate: Candidate
    method: SelectionMethod
    round: int | None = None


class Tiebreak(NamedTuple):
    purpose: str
    tied: Candidates
    selected: Candidate
    method: SelectionMethod
    narrative: str


class TiebreakStrategy(Protocol):
    method: SelectionMethod
    name: str
    used: bool

    def resolve(
        self, candidates: Candidates, history: History
    ) -> Resolution | Candidates:  # pragma: no coverage
        ...

    def get_result_dict(self) -> dict:  # pragma: no coverage
        ...


def find_tied(candidates: Candidates, counts: Counts) -> Candidates:
    """
    Candidates sharing the lowest count.
    >>> find_tied((3, 1, 2), (5, 1, 4, 1))
    (1, 3)
    >>> find_tied((2, 0), (5, 1, 4, 1))
    (2,)
    """
    lowest = min(counts[c] for c in candidates)
    return tuple(sorted(c for c in candidates if counts[c] == lowest))


class TiebreakHistory:
    """Backward tie-break: the latest earlier round where exactly one tied candidate was lowest"""

    method = SelectionMethod.TiebreakHistory
    name = "history"
    used: bool

    def __init__(self) -> None:
        self.used = False

    def resolve(self, candidates: Candidates, history: History) -> Resolution | Candidates:
        for round_index in reversed(range(len(history))):
            tied = find_tied(candidates, history[round_index])
            if len(tied) == 1:
                self.used = True
                return Resolution(tied[0], self.method, round_index)
        return candidates

    def get_result_dict(self) -> dict:
        return {}


class TiebreakRandom:
    """
    Uses a candidate order shuffled once, by an explicit random source.
    Seed the source to make a count reproducible.
    """

    method = SelectionMethod.TiebreakRandom
    name = "random"
    used: bool
    shuffled: Candidates

    def __init__(
        self,
        candidates: Candidates,
        rng: random.Random | None = None,
        shuffle: bool = True,
    ) -> None:
        self.used = False
        self.random = rng if rng is not None else random.Random()
        candidates = tuple(candidates)
        self.shuffled = (
            tuple(self.random.sample(candidates, len(candidates)))
            if shuffle
            else candidates
        )

    def resolve(self, candidates: Candidates, history: History) -> Resolution:
        self.used = True
        return Resolution(
            next(c for c in self.shuffled if c in candidates), self.method
        )

    def get_result_dict(self) -> dict:
        if not self.used:
            return {}
        return {"randomized": True, "random_order": self.shuffled}


def break_weak_tie(
    counts: Counts,
    history: History,
    candidates: Candidates,
    purpose: str,
    strategies: Sequence[TiebreakStrategy],
    names: Sequence[str],
) -> Tiebreak:
    """
    Pick the candidate with the lowest count, breaking ties with each strategy in turn.
    :param counts: Counts of the round where the choice is made
    :param history: Counts of all rounds before that one
    :param purpose: What is being chosen, for the narrative
    """
    tied = find_tied(candidates, counts)
    if len(tied) == 1:
        return Tiebreak(purpose, tied, tied[0], SelectionMethod.Direct, "")

    narrative = (
        f"Candidates {join_candidates(tied, names)} were tied when choosing {purpose}. "
    )
    remaining = tied
    for strategy in strategies:
        resolved = strategy.resolve(remaining, history)
        if not isinstance(resolved, Resolution):
            remaining = resolved
            continue
        chosen = names[resolved.candidate]
        if resolved.round is None:
            narrative += f"Candidate {chosen} was chosen by breaking the tie randomly. "
        else:
            narrative += (
                f"Candidate {chosen} was chosen by breaking the tie "
                f"at round {resolved.round + 1}. "
            )
        return Tiebreak(purpose, tied, resolved.candidate, resolved.method, narrative)
    raise IncompleteResult(f"{narrative}The tie could not be broken.")
