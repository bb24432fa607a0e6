from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from functools import cached_property

from more_itertools.recipes import partition
from typing_extensions import Self

from meekstv.exceptions import BallotException, CandidateDoesNotExist, STVException
from meekstv.types import BallotData, Candidate, CandidateLabel, Candidates


class PreferenceBallot(tuple[Candidate, ...]):
    """A ranking of candidate indices, and the number of voters who cast it."""

    count: int

    def __new__(cls, preferences: Iterable[Candidate], count: int) -> Self:
        ballot = super().__new__(cls, preferences)
        ballot.count = count
        return ballot

    def __repr__(self) -> str:
        return f"PreferenceBallot({tuple(self)}, {self.count})"

    def next_preference_index(
        self, standing: Iterable[Candidate], start: int = 0
    ) -> int | None:
        """
        Position of the first preference at or after start that is in standing.
        >>> PreferenceBallot((0, 1, 2), 1).next_preference_index({1, 2})
        1
        >>> PreferenceBallot((0, 1, 2), 1).next_preference_index({0, 2}, start=1)
        2
        >>> PreferenceBallot((0, 1, 2), 1).next_preference_index({3}) is None
        True
        """
        if not isinstance(standing, (set, frozenset)):
            standing = set(standing)
        return next((i for i in range(start, len(self)) if self[i] in standing), None)


def get_ballots(
    votes: BallotData, candidates: Sequence[CandidateLabel]
) -> tuple[int, tuple[tuple[Candidates, int], ...]]:
    """
    Turn ballot data with candidate labels into rankings of candidate indices,
    and also report empty ballots.
    :param votes: Can be a dict, Counter or iterable containing tuple of candidates and count
    :param candidates: Candidate labels, in index order. Ballots may not contain other labels.
    :return: Empty count and ballots.
    >>> get_ballots({(): 3, ("b", "a"): 2}, ("a", "b"))
    (3, (((1, 0), 2),))
    >>> get_ballots([([], 3), (["a"], 2)], ("a", "b"))
    (3, (((0,), 2),))
    """
    if isinstance(votes, dict):
        votes = votes.items()
    empty, ranked = partition(lambda v: v[0], ((tuple(v), c) for v, c in votes))
    empty_ballots = sum((count for _, count in empty), start=0)
    index = {c: i for i, c in enumerate(candidates)}
    ballots = []
    for vote, count in ranked:
        if missing := [c for c in vote if c not in index]:
            raise CandidateDoesNotExist(
                f"Candidate {missing[0]} not in candidates: {vote}"
            )
        ballots.append((tuple(index[c] for c in vote), count))
    return empty_ballots, tuple(ballots)


@dataclass(frozen=True)
class ElectionInfo:
    """
    Fully parsed election input.
    Validated on construction, so a count never starts on malformed data.
    """

    num_candidates: int
    seats: int
    names: tuple[str, ...]
    ballots: tuple[Candidates, ...]
    weights: tuple[int, ...]
    withdrawn: Candidates = ()
    title: str = ""
    preference_ballots: tuple[PreferenceBallot, ...] = field(
        init=False, repr=False, compare=False
    )
    empty_ballot_count: int = field(init=False, compare=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "names", tuple(self.names))
        object.__setattr__(self, "ballots", tuple(map(tuple, self.ballots)))
        object.__setattr__(self, "weights", tuple(self.weights))
        object.__setattr__(self, "withdrawn", tuple(sorted(set(self.withdrawn))))

        if self.num_candidates < 1:
            raise STVException("No candidates")
        if len(self.names) != self.num_candidates:
            raise STVException(
                f"Got {len(self.names)} names for {self.num_candidates} candidates"
            )
        for candidate in self.withdrawn:
            self._check_candidate(candidate, "withdrawn candidates")
        if self.seats < 1:
            raise STVException("At least one seat must be filled")
        if self.seats >= len(self.running):
            raise STVException("Not enough candidates to fill seats")
        if len(self.ballots) != len(self.weights):
            raise BallotException(
                f"Got {len(self.weights)} weights for {len(self.ballots)} ballots"
            )

        empty_ballot_count = 0
        preference_ballots = []
        for ranking, weight in zip(self.ballots, self.weights):
            self.verify_ballot(ranking, weight)
            if self.running.isdisjoint(ranking):
                empty_ballot_count += weight
            else:
                preference_ballots.append(PreferenceBallot(ranking, weight))
        if not sum(b.count for b in preference_ballots):
            raise BallotException("No ballots registered.")
        object.__setattr__(self, "preference_ballots", tuple(preference_ballots))
        object.__setattr__(self, "empty_ballot_count", empty_ballot_count)

    @classmethod
    def from_ballot_data(
        cls,
        candidates: Iterable[CandidateLabel],
        votes: BallotData,
        seats: int,
        *,
        withdrawn: Iterable[CandidateLabel] = (),
        title: str = "",
    ) -> Self:
        """
        Build election input from candidate labels, the way polls are usually described.
        >>> info = ElectionInfo.from_ballot_data(("a", "b", "c"), {("c", "a"): 2, (): 1}, 1)
        >>> info.ballots, info.weights, info.empty_ballot_count
        (((2, 0), ()), (2, 1), 1)
        """
        candidates, withdrawn = tuple(candidates), tuple(withdrawn)
        empty, ballots = get_ballots(votes, candidates)
        rankings = [ranking for ranking, _ in ballots]
        weights = [count for _, count in ballots]
        if empty:
            rankings.append(())
            weights.append(empty)
        index = {c: i for i, c in enumerate(candidates)}
        if missing := [c for c in withdrawn if c not in index]:
            raise CandidateDoesNotExist(
                f"Withdrawn candidate {missing[0]} not in candidates"
            )
        return cls(
            num_candidates=len(candidates),
            seats=seats,
            names=tuple(map(str, candidates)),
            ballots=tuple(rankings),
            weights=tuple(weights),
            withdrawn=tuple(index[c] for c in withdrawn),
            title=title,
        )

    @cached_property
    def running(self) -> frozenset[Candidate]:
        return frozenset(range(self.num_candidates)).difference(self.withdrawn)

    @property
    def ballot_count(self) -> int:
        """Weight of all ballots ranking at least one running candidate"""
        return sum(b.count for b in self.preference_ballots)

    def verify_ballot(self, ranking: Candidates, weight: int) -> None:
        if weight < 0:
            raise BallotException(f"Negative weight {weight} for ballot {ranking}")
        if len(set(ranking)) != len(ranking):
            raise BallotException(f"Duplicate candidates on ballot {ranking}")
        for candidate in ranking:
            self._check_candidate(candidate, f"ballot {ranking}")

    def _check_candidate(self, candidate: Candidate, where: str) -> None:
        if not isinstance(candidate, int) or not 0 <= candidate < self.num_candidates:
            raise CandidateDoesNotExist(
                f"Candidate {candidate!r} in {where} is out of range"
            )
