from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:  # pragma: no coverage
    from meekstv.result import ElectionResult


class STVException(Exception):
    pass


class BallotException(STVException):
    pass


class CandidateDoesNotExist(BallotException):
    pass


class IncompleteResult(STVException):
    pass


class RoundLimitExceeded(STVException):
    """
    The count did not terminate within the round limit.
    The partial result is attached, flagged as an anomaly, and must not be published.
    """

    def __init__(self, message: str, result: ElectionResult) -> None:
        super().__init__(message)
        self.result = result
