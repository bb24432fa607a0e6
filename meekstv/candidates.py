from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass

from typing_extensions import Self

from meekstv.exceptions import STVException
from meekstv.types import Candidate, Candidates, CandidateStatus


@dataclass(frozen=True)
class CandidateSets:
    """
    Disjoint classification of all candidates.
    Transitions only move candidates out of continuing, and return a new instance.
    >>> sets = CandidateSets.initial(4, withdrawn=(3,))
    >>> sets = sets.elect((1,)).exclude((0,))
    >>> sorted(sets.continuing), sets.winners, sets.losers
    ([2], (1,), (3, 0))
    >>> sets.status(2).value
    'Continuing'
    """

    continuing: frozenset[Candidate]
    winners: Candidates = ()
    losers: Candidates = ()

    @classmethod
    def initial(cls, num_candidates: int, withdrawn: Candidates = ()) -> Self:
        return cls(
            continuing=frozenset(range(num_candidates)).difference(withdrawn),
            losers=tuple(withdrawn),
        )

    @property
    def continuing_and_winners(self) -> frozenset[Candidate]:
        return self.continuing.union(self.winners)

    def __len__(self) -> int:
        return len(self.continuing) + len(self.winners) + len(self.losers)

    def status(self, candidate: Candidate) -> CandidateStatus:
        if candidate in self.continuing:
            return CandidateStatus.Continuing
        if candidate in self.winners:
            return CandidateStatus.Elected
        return CandidateStatus.Excluded

    def _leave_continuing(self, candidates: Iterable[Candidate]) -> Candidates:
        candidates = tuple(candidates)
        if stray := set(candidates).difference(self.continuing):
            raise STVException(
                f"Candidates {sorted(stray)} are not continuing and cannot be reclassified"
            )
        return candidates

    def elect(self, candidates: Iterable[Candidate]) -> Self:
        candidates = self._leave_continuing(candidates)
        return type(self)(
            continuing=self.continuing.difference(candidates),
            winners=self.winners + candidates,
            losers=self.losers,
        )

    def exclude(self, candidates: Iterable[Candidate]) -> Self:
        candidates = self._leave_continuing(candidates)
        return type(self)(
            continuing=self.continuing.difference(candidates),
            winners=self.winners,
            losers=self.losers + candidates,
        )
