from __future__ import annotations

from collections.abc import Iterable

from meekstv.ballots import ElectionInfo
from meekstv.meek import MeekSTV
from meekstv.result import ElectionResult
from meekstv.types import ResultDict


def recalculate_result(
    info: ElectionInfo,
    seed: int,
    expected_winners: Iterable[str] | None = None,
    **options,
) -> ElectionResult:
    """
    Redo a count with the seed it was published with, and ensure the winners are the same.
    Random tiebreaks depend only on the seed, so the round history is reproduced exactly.
    """
    result = MeekSTV(info, seed=seed, **options).calculate()
    if expected_winners is not None:
        assert result.elected_as_tuple() == tuple(
            expected_winners
        ), "Result does not match list of expected winners!"
    return result


def result_dict_to_order(result: ResultDict) -> tuple[str, ...]:
    """
    Rank all candidates from a result dict: winners in election order, then
    candidates neither elected nor excluded, then excluded candidates in reverse
    exclusion order, then withdrawn candidates.
    >>> result_dict_to_order({
    ...     "candidates": ("A", "B", "C", "D"),
    ...     "winners": ("C",),
    ...     "withdrawn": ("D",),
    ...     "rounds": ({"excluded": ("A",)}, {"excluded": ()}),
    ... })
    ('C', 'B', 'A', 'D')
    """
    excluded = [c for r in result["rounds"] for c in r["excluded"]]
    withdrawn = tuple(result.get("withdrawn", ()))
    placed = {*result["winners"], *excluded, *withdrawn}
    undecided = tuple(c for c in result["candidates"] if c not in placed)
    return (*result["winners"], *undecided, *reversed(excluded), *withdrawn)
