from __future__ import annotations

import logging
import random
from collections.abc import Iterable
from dataclasses import dataclass, field
from itertools import groupby

from more_itertools import pairwise

from meekstv.ballots import ElectionInfo
from meekstv.candidates import CandidateSets
from meekstv.exceptions import IncompleteResult, RoundLimitExceeded, STVException
from meekstv.messages import format_scaled, join_candidates, join_list, winners_text
from meekstv.quotas import dynamic_droop_threshold
from meekstv.result import ElectionResult, ElectionRound
from meekstv.tiebreak_strategies import (
    Tiebreak,
    TiebreakHistory,
    TiebreakRandom,
    TiebreakStrategy,
    break_weak_tie,
)
from meekstv.tree import BallotTree
from meekstv.types import (
    BallotData,
    Candidate,
    CandidateLabel,
    Candidates,
    RoundAction,
    SelectionMethod,
)

logger = logging.getLogger(__name__)

DEFAULT_PRECISION = 6
DEFAULT_ROUND_LIMIT = 1000


@dataclass
class RoundState:
    """The round being counted. Committed to an ElectionRound once complete."""

    round: int
    keep_factors: list[int]
    action: RoundAction = RoundAction.First
    action_candidates: Candidates = ()
    counts: list[int] = field(default_factory=list)
    exhausted: int = 0
    threshold: int = 0
    surplus: int = 0
    elected: list[Candidate] = field(default_factory=list)
    excluded: list[Candidate] = field(default_factory=list)
    tiebreaks: list[Tiebreak] = field(default_factory=list)
    notes: list[str] = field(default_factory=list)

    def commit(self) -> ElectionRound:
        return ElectionRound(
            round=self.round,
            action=self.action,
            action_candidates=self.action_candidates,
            keep_factors=tuple(self.keep_factors),
            counts=tuple(self.counts),
            exhausted=self.exhausted,
            threshold=self.threshold,
            surplus=self.surplus,
            elected=tuple(self.elected),
            excluded=tuple(self.excluded),
            tiebreaks=tuple(self.tiebreaks),
            message="".join(self.notes),
        )


class MeekSTV:
    """
    Meek STV count, in fixed-point integer arithmetic.

    Round 0 counts first choices. Every following round either transfers
    surplus, by lowering the keep factors of candidates above the threshold,
    or eliminates candidates. The count stops when all seats are filled, when
    no more candidates stand than seats remain, or at the round limit.
    """

    state: RoundState
    tree: BallotTree

    def __init__(
        self,
        info: ElectionInfo,
        *,
        precision: int = DEFAULT_PRECISION,
        round_limit: int = DEFAULT_ROUND_LIMIT,
        allow_random: bool = True,
        seed: int | None = None,
        rng: random.Random | None = None,
        random_shuffle: bool = True,
        tiebreak_strategies: Iterable[TiebreakStrategy] | None = None,
    ):
        if precision < 1:
            raise STVException("Precision must be at least 1 digit")
        if round_limit < 0:
            raise STVException("Round limit can't be negative")
        self.info = info
        self.names = info.names
        self.seats = info.seats
        self.precision = precision
        self.p = 10**precision
        self.round_limit = round_limit
        if tiebreak_strategies is None:
            tiebreak_strategies = (TiebreakHistory(),)
            if allow_random:
                tiebreak_strategies += (
                    TiebreakRandom(
                        tuple(sorted(info.running)),
                        rng=rng if rng is not None else random.Random(seed),
                        shuffle=random_shuffle,
                    ),
                )
        self.tiebreakers = tuple(tiebreak_strategies)
        self.sets = CandidateSets.initial(info.num_candidates, info.withdrawn)
        self.first_elimination_round = True
        self.result = ElectionResult(info, precision)

    @property
    def previous(self) -> ElectionRound:
        return self.result.rounds[-1]

    @property
    def scaled_ballot_count(self) -> int:
        return self.p * self.info.ballot_count

    def calculate(self) -> ElectionResult:
        if self.result.rounds:
            raise STVException("Count already calculated")
        try:
            self.do_rounds()
        except IncompleteResult as exc:
            logger.warning("%s: count incomplete: %s", self.info.title or "Election", exc)
            self.result.incomplete_reason = str(exc)
        self.result.finalize(tiebreakers=self.tiebreakers, sets=self.sets)
        if self.result.anomaly:
            logger.warning(
                "%s: round limit %d exceeded", self.info.title or "Election", self.round_limit
            )
            raise RoundLimitExceeded(
                f"No result after {len(self.result.rounds)} rounds", self.result
            )
        return self.result

    def do_rounds(self) -> None:
        self.initial_vote_tally()
        self.update_round()
        while not self.election_over():
            self.result.add_round(self.state.commit())
            self.allocate_round()
            if self.is_surplus_to_transfer():
                self.transfer_surplus_votes()
            else:
                self.eliminate_candidates()
            self.update_round()
        self.result.anomaly = not self.count_finished()
        self.update_candidate_status()
        self.result.add_round(self.state.commit())

    def initial_vote_tally(self) -> None:
        keep_factors = [0] * self.info.num_candidates
        for candidate in self.sets.continuing:
            keep_factors[candidate] = self.p
        self.state = RoundState(round=0, keep_factors=keep_factors)
        self.state.notes.append("Count of first choices. ")
        self.tree = BallotTree.build(self.info.preference_ballots, self.sets)

    def allocate_round(self) -> None:
        self.state = RoundState(
            round=self.previous.round + 1,
            keep_factors=[0] * self.info.num_candidates,
        )

    def update_round(self) -> None:
        state = self.state
        state.counts = self.tree.tally(state.keep_factors, self.p)
        state.exhausted = self.scaled_ballot_count - sum(state.counts)
        state.threshold = dynamic_droop_threshold(
            self.scaled_ballot_count, state.exhausted, self.seats
        )
        state.surplus = sum(
            max(state.counts[c] - state.threshold, 0)
            for c in self.sets.continuing_and_winners
        )
        logger.info(
            "Round %d (%s): threshold %s, surplus %s, exhausted %s",
            state.round + 1,
            state.action.value,
            format_scaled(state.threshold, self.precision),
            format_scaled(state.surplus, self.precision),
            format_scaled(state.exhausted, self.precision),
        )
        logger.debug("Round %d counts: %s", state.round + 1, state.counts)
        self.update_winners()

    def update_winners(self) -> None:
        if winners := sorted(
            c for c in self.sets.continuing if self.state.counts[c] >= self.state.threshold
        ):
            self.new_winners(winners)

    def new_winners(self, candidates: Candidates | list[Candidate], over: bool = True) -> None:
        self.sets = self.sets.elect(candidates)
        self.state.elected.extend(candidates)
        self.state.notes.append(winners_text(candidates, self.names, over=over))
        logger.info("Elected: %s", join_candidates(candidates, self.names))

    def new_losers(self, candidates: Candidates | list[Candidate]) -> None:
        self.sets = self.sets.exclude(candidates)
        self.state.excluded.extend(candidates)
        logger.info("Excluded: %s", join_candidates(candidates, self.names))

    def count_finished(self) -> bool:
        return (
            len(self.sets.winners) == self.seats
            or len(self.sets.continuing_and_winners) <= self.seats
        )

    def election_over(self) -> bool:
        return self.count_finished() or self.state.round > self.round_limit

    def in_infinite_loop(self) -> bool:
        """Keep factors did not change between the last two rounds"""
        rounds = self.result.rounds
        return len(rounds) > 1 and rounds[-1].keep_factors == rounds[-2].keep_factors

    def is_surplus_to_transfer(self) -> bool:
        return (
            self.previous.surplus >= 1
            and not self.get_sure_losers()
            and not self.in_infinite_loop()
        )

    def get_sure_losers(self) -> Candidates:
        """
        Continuing candidates who can't win, even if they got all surplus
        and every vote of all candidates below them.
        """
        previous = self.previous
        counts = previous.counts
        continuing = self.sets.continuing
        max_losers = len(continuing) + len(self.sets.winners) - self.seats
        if max_losers >= len(continuing):
            return ()
        if not sum(counts[c] for c in continuing) and not previous.surplus:
            return tuple(sorted(continuing))

        ordered = sorted(continuing, key=lambda c: (counts[c], c))
        clusters = [tuple(group) for _, group in groupby(ordered, lambda c: counts[c])]
        losers: Candidates = ()
        potential_losers: list[Candidate] = []
        total = previous.surplus
        for cluster, following in pairwise(clusters):
            total += len(cluster) * counts[cluster[0]]
            potential_losers.extend(cluster)
            if total < counts[following[0]] and len(potential_losers) <= max_losers:
                losers = tuple(potential_losers)
        return losers

    def break_tie(
        self, round_index: int, candidates: Iterable[Candidate], purpose: str
    ) -> Tiebreak:
        """Lowest candidate at round, breaking ties with earlier rounds or randomly"""
        history = [r.counts for r in self.result.rounds[:round_index]]
        counts = (
            self.result.rounds[round_index].counts
            if round_index < len(self.result.rounds)
            else tuple(self.state.counts)
        )
        tiebreak = break_weak_tie(
            counts,
            tuple(history),
            tuple(sorted(candidates)),
            purpose,
            self.tiebreakers,
            self.names,
        )
        if tiebreak.method != SelectionMethod.Direct:
            self.state.tiebreaks.append(tiebreak)
            log = logger.warning if tiebreak.method == SelectionMethod.TiebreakRandom else logger.info
            log("Tiebreak: %s", tiebreak.narrative.strip())
        return tiebreak

    def transfer_surplus_votes(self) -> None:
        self.state.action = RoundAction.Surplus
        self.tree.update(self.sets)
        description = self.update_keep_factors()
        self.state.notes.append(
            "Count after transferring surplus votes. " + description
        )

    def update_keep_factors(self) -> str:
        """
        New keep factor = old keep factor * threshold / count, rounded up,
        for every candidate whose count exceeded the threshold in the previous round.
        """
        previous = self.previous
        keep_factors = self.state.keep_factors
        over = []
        for candidate in sorted(self.sets.continuing_and_winners):
            count = previous.counts[candidate]
            if count > previous.threshold:
                keep_factor, remainder = divmod(
                    previous.keep_factors[candidate] * previous.threshold, count
                )
                keep_factors[candidate] = keep_factor + 1 if remainder else keep_factor
                over.append(candidate)
            else:
                keep_factors[candidate] = previous.keep_factors[candidate]
        self.state.action_candidates = tuple(over)
        logger.debug("Round %d keep factors: %s", self.state.round + 1, keep_factors)
        if not over:
            return ""
        listed = join_list(
            f"{self.names[c]}, {format_scaled(keep_factors[c], self.precision)}"
            for c in over
        )
        return f"Keep factors of candidates who have exceeded the threshold: {listed}. "

    def eliminate_candidates(self) -> None:
        losers, description = self.select_candidates_to_eliminate()
        self.state.action = RoundAction.Eliminate
        self.state.action_candidates = tuple(sorted(losers))
        self.new_losers(losers)
        self.state.notes.append(
            f"Count after eliminating {join_candidates(losers, self.names)} "
            f"and transferring votes. {description}"
        )
        self.tree.update(self.sets)
        self.copy_keep_factors()

    def select_candidates_to_eliminate(self) -> tuple[Candidates, str]:
        previous = self.previous
        purpose = "candidates to eliminate"
        if self.in_infinite_loop():
            tiebreak = self.break_tie(previous.round, self.sets.continuing, purpose)
            self.first_elimination_round = False
            return (
                (tiebreak.selected,),
                f"Candidates tied within precision of computations. {tiebreak.narrative}",
            )

        description = "All losing candidates are eliminated. "
        losers = list(self.get_sure_losers())
        # Losers without any votes won't change anything, so take one more candidate
        if self.first_elimination_round and previous.surplus == 0:
            remaining = self.sets.continuing.difference(losers)
            if len(remaining) + len(self.sets.winners) > self.seats and not sum(
                previous.counts[c] for c in losers
            ):
                tiebreak = self.break_tie(previous.round, remaining, purpose)
                losers.append(tiebreak.selected)
                description += tiebreak.narrative
        if not losers:
            tiebreak = self.break_tie(previous.round, self.sets.continuing, purpose)
            losers.append(tiebreak.selected)
            description += tiebreak.narrative
        self.first_elimination_round = False
        return tuple(losers), description

    def copy_keep_factors(self) -> None:
        for candidate in self.sets.continuing_and_winners:
            self.state.keep_factors[candidate] = self.previous.keep_factors[candidate]

    def update_candidate_status(self) -> None:
        """Classify candidates still continuing when the count stops"""
        state = self.state
        if len(self.sets.winners) == self.seats:
            if self.sets.continuing:
                self.new_losers(sorted(self.sets.continuing))
            return

        if no_votes := sorted(c for c in self.sets.continuing if not state.counts[c]):
            self.new_losers(no_votes)
        while len(self.sets.continuing_and_winners) > self.seats:
            tiebreak = self.break_tie(state.round, self.sets.continuing, "winners")
            self.new_losers((tiebreak.selected,))
            state.notes.append(tiebreak.narrative)
        if self.sets.continuing:
            self.new_winners(sorted(self.sets.continuing), over=False)


def calculate_meek_stv(
    candidates: Iterable[CandidateLabel],
    votes: BallotData,
    winners: int,
    *,
    withdrawn: Iterable[CandidateLabel] = (),
    title: str = "",
    precision: int = DEFAULT_PRECISION,
    round_limit: int = DEFAULT_ROUND_LIMIT,
    allow_random: bool = True,
    seed: int | None = None,
    rng: random.Random | None = None,
    random_shuffle: bool = True,
    tiebreak_strategies: tuple[TiebreakStrategy, ...] | None = None,
) -> ElectionResult:
    """
    :param candidates: All candidates - ballots may not have other candidates
    :param votes: All ballots, with count for each ballot
    :param winners: Number of winners
    :param withdrawn: Candidates removed from the count before it starts
    :param title: Election label, used in reports
    :param precision: Decimal digits of the fixed-point arithmetic
    :param round_limit: Stop and raise RoundLimitExceeded after this many rounds
    :param allow_random: Use random tiebreaking mechanism (recommended)
    :param seed: Seed for the random tiebreak, for a reproducible count
    :param rng: Random source for the random tiebreak, instead of seed
    :param random_shuffle: If False: Use incoming candidate order instead of shuffling
    :param tiebreak_strategies: Allows overriding tiebreak strategies
    :return: Election result
    """
    info = ElectionInfo.from_ballot_data(
        candidates, votes, winners, withdrawn=withdrawn, title=title
    )
    return MeekSTV(
        info,
        precision=precision,
        round_limit=round_limit,
        allow_random=allow_random,
        seed=seed,
        rng=rng,
        random_shuffle=random_shuffle,
        tiebreak_strategies=tiebreak_strategies,
    ).calculate()
