def hagenbach_bischof_quota(ballot_count: int, winners: int) -> int:
    """
    Calculate poll quota from ballot count and expected poll winners
    >>> hagenbach_bischof_quota(100, 3)
    25
    """
    return ballot_count // (winners + 1)


def droop_quota(ballot_count: int, winners: int) -> int:
    """
    Calculate poll quota from ballot count and expected poll winners
    >>> droop_quota(100, 3)
    26
    """
    return hagenbach_bischof_quota(ballot_count, winners) + 1


def dynamic_droop_threshold(
    scaled_ballot_count: int, exhausted: int, winners: int
) -> int:
    """
    Meek threshold: the Droop quota of the votes that are not exhausted.
    All values are fixed-point integers, scaled by the same factor.
    >>> dynamic_droop_threshold(4_000_000, 0, 2)
    1333334
    >>> dynamic_droop_threshold(4_000_000, 333_333, 2)
    1222223
    """
    return droop_quota(scaled_ballot_count - exhausted, winners)
