import pytest


def test_transitions():
    from meekstv.candidates import CandidateSets
    from meekstv.types import CandidateStatus

    sets = CandidateSets.initial(5, withdrawn=(4,))
    assert sets.continuing == {0, 1, 2, 3}
    assert sets.losers == (4,)
    elected = sets.elect((2, 0))
    assert elected.winners == (2, 0)
    assert sets.winners == (), "Transitions return a new instance"
    excluded = elected.exclude((3,))
    assert excluded.continuing == {1}
    assert excluded.continuing_and_winners == {0, 1, 2}
    assert len(excluded) == 5
    assert [excluded.status(c) for c in range(5)] == [
        CandidateStatus.Elected,
        CandidateStatus.Continuing,
        CandidateStatus.Elected,
        CandidateStatus.Excluded,
        CandidateStatus.Excluded,
    ]


@pytest.mark.parametrize("candidate", [4, 2])
def test_only_continuing_can_move(candidate):
    from meekstv.candidates import CandidateSets
    from meekstv.exceptions import STVException

    sets = CandidateSets.initial(5, withdrawn=(4,)).elect((2,))
    with pytest.raises(STVException):
        sets.exclude((candidate,))
    with pytest.raises(STVException):
        sets.elect((candidate,))
