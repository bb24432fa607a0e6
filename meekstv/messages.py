from __future__ import annotations

from collections.abc import Iterable, Sequence
from decimal import Decimal

from meekstv.types import Candidate


def pluralise(word: str, count: int) -> str:
    """
    >>> pluralise("Candidate", 2), pluralise("has", 2), pluralise("is", 1)
    ('Candidates', 'have', 'is')
    """
    if count == 1:
        return word
    if word == "is":
        return "are"
    if word == "has":
        return "have"
    return f"{word}s"


def join_list(items: Iterable[str]) -> str:
    """
    Readable list of names. Switches to semicolons if a name contains a comma.
    >>> join_list(["Alice"])
    'Alice'
    >>> join_list(["Alice", "Bob"])
    'Alice and Bob'
    >>> join_list(["Alice", "Bob", "Chris"])
    'Alice, Bob, and Chris'
    >>> join_list(["Doe, Jane", "Bob", "Chris"])
    'Doe, Jane; Bob; and Chris'
    """
    items = list(items)
    if len(items) == 1:
        return items[0]
    if len(items) == 2:
        return " and ".join(items)
    separator = ";" if any("," in item for item in items) else ","
    return f"{f'{separator} '.join(items[:-1])}{separator} and {items[-1]}"


def join_candidates(candidates: Iterable[Candidate], names: Sequence[str]) -> str:
    return join_list(names[c] for c in sorted(candidates))


def scaled(value: int, precision: int) -> Decimal:
    """
    Human value of a fixed-point integer.
    >>> scaled(666667, 6)
    Decimal('0.666667')
    """
    return Decimal(value).scaleb(-precision)


def format_scaled(value: int, precision: int) -> str:
    """
    >>> format_scaled(1333334, 6), format_scaled(2, 3)
    ('1.333334', '0.002')
    """
    return f"{scaled(value, precision):.{precision}f}"


def winners_text(
    candidates: Iterable[Candidate], names: Sequence[str], over: bool = True
) -> str:
    """
    >>> winners_text([0], ["A", "B"])
    'Candidate A has reached the threshold and is elected. '
    >>> winners_text([1, 0], ["A", "B"], over=False)
    'Candidates A and B are elected. '
    """
    candidates = sorted(candidates)
    count = len(candidates)
    start = f"{pluralise('Candidate', count)} {join_candidates(candidates, names)}"
    end = f"{pluralise('is', count)} elected. "
    if over:
        return f"{start} {pluralise('has', count)} reached the threshold and {end}"
    return f"{start} {end}"
