from __future__ import annotations

from dataclasses import dataclass, field

from meekstv.ballots import PreferenceBallot
from meekstv.candidates import CandidateSets
from meekstv.types import Candidate, KeepFactors

# (index into the ballot tuple, position of the node candidate in that ballot)
BallotRef = tuple[int, int]


@dataclass
class Node:
    candidate: Candidate | None
    parent: int | None
    weight: int = 0
    ballots: list[BallotRef] = field(default_factory=list)
    children: dict[Candidate, int] = field(default_factory=dict)


class BallotTree:
    """
    Ballots indexed by their current preference.

    The first level below the root holds the current top choice of each ballot.
    A winner's node is expanded one level further, so the part of the vote it
    does not keep flows on to the next preference. A loser's node is removed and
    its ballots re-inserted as if the loser had never stood.

    Nodes live in a flat list and refer to each other by index.
    """

    ROOT = 0

    def __init__(self, ballots: tuple[PreferenceBallot, ...]) -> None:
        self.ballots = ballots
        self.nodes = [Node(candidate=None, parent=None)]

    @classmethod
    def build(
        cls, ballots: tuple[PreferenceBallot, ...], sets: CandidateSets
    ) -> BallotTree:
        tree = cls(ballots)
        standing, winners = sets.continuing_and_winners, frozenset(sets.winners)
        for ballot_index in range(len(ballots)):
            tree.insert(cls.ROOT, ballot_index, 0, standing, winners)
        return tree

    def child(self, node_id: int, candidate: Candidate) -> int:
        """Get or create the child node for candidate"""
        children = self.nodes[node_id].children
        if candidate not in children:
            children[candidate] = len(self.nodes)
            self.nodes.append(Node(candidate=candidate, parent=node_id))
        return children[candidate]

    def path(self, node_id: int) -> tuple[Candidate, ...]:
        """Candidates from the first level down to node"""
        path = []
        while node_id != self.ROOT:
            node = self.nodes[node_id]
            if node.parent is None:
                raise ValueError(f"Node {node_id} was detached from the tree")
            path.append(node.candidate)
            node_id = node.parent
        return tuple(reversed(path))

    def insert(
        self,
        node_id: int,
        ballot_index: int,
        start: int,
        standing: frozenset[Candidate],
        winners: frozenset[Candidate],
    ) -> None:
        """
        Add a ballot below node, from position start in its ranking.
        Ballots without any standing preference left are exhausted and not stored.
        """
        ballot = self.ballots[ballot_index]
        position = ballot.next_preference_index(standing, start)
        if position is None:
            return
        candidate = ballot[position]
        child_id = self.child(node_id, candidate)
        child = self.nodes[child_id]
        child.weight += ballot.count
        if candidate in winners:
            self.insert(child_id, ballot_index, position + 1, standing, winners)
        else:
            child.ballots.append((ballot_index, position))

    def update(self, sets: CandidateSets) -> None:
        """Remove losers and expand winners that still hold ballots"""
        self._update(
            self.ROOT,
            frozenset(sets.losers),
            sets.continuing_and_winners,
            frozenset(sets.winners),
        )

    def _update(
        self,
        node_id: int,
        losers: frozenset[Candidate],
        standing: frozenset[Candidate],
        winners: frozenset[Candidate],
    ) -> None:
        node = self.nodes[node_id]
        for candidate in sorted(losers.intersection(node.children)):
            loser = self.nodes[node.children.pop(candidate)]
            loser.parent = None
            for ballot_index, position in loser.ballots:
                self.insert(node_id, ballot_index, position + 1, standing, winners)

        for candidate in sorted(winners.intersection(node.children)):
            child_id = node.children[candidate]
            child = self.nodes[child_id]
            if child.ballots:
                for ballot_index, position in child.ballots:
                    self.insert(child_id, ballot_index, position + 1, standing, winners)
                child.ballots = []
            else:
                self._update(child_id, losers, standing, winners)

    def tally(self, keep_factors: KeepFactors, p: int) -> list[int]:
        """Scaled vote count per candidate, given each candidate's keep factor"""
        counts = [0] * len(keep_factors)
        self._tally(self.ROOT, p, keep_factors, p, counts)
        return counts

    def _tally(
        self,
        node_id: int,
        remainder: int,
        keep_factors: KeepFactors,
        p: int,
        counts: list[int],
    ) -> None:
        for candidate, child_id in self.nodes[node_id].children.items():
            child = self.nodes[child_id]
            keep_factor = keep_factors[candidate]
            counts[candidate] += remainder * keep_factor * child.weight // p
            passed = remainder * (p - keep_factor) // p
            if passed > 0:
                self._tally(child_id, passed, keep_factors, p, counts)
