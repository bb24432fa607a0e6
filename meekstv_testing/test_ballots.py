import pytest


def mk_info(**kwargs):
    from meekstv.ballots import ElectionInfo

    options = dict(
        num_candidates=3,
        seats=1,
        names=("A", "B", "C"),
        ballots=((0, 1), (2,)),
        weights=(2, 1),
    )
    options.update(kwargs)
    return ElectionInfo(**options)


def test_valid_info():
    info = mk_info(ballots=((0, 1), (2,), ()), weights=(2, 1, 4))
    assert info.ballot_count == 3
    assert info.empty_ballot_count == 4
    assert info.running == {0, 1, 2}
    assert [tuple(b) for b in info.preference_ballots] == [(0, 1), (2,)]
    assert [b.count for b in info.preference_ballots] == [2, 1]


@pytest.mark.parametrize(
    "kwargs,message",
    [
        ({"num_candidates": 0, "names": ()}, "No candidates"),
        ({"names": ("A", "B")}, "names"),
        ({"seats": 0}, "At least one seat"),
        ({"seats": 3}, "Not enough candidates"),
        ({"seats": 2, "withdrawn": (1,)}, "Not enough candidates"),
        ({"weights": (1,)}, "weights"),
        ({"ballots": ((0, 0),), "weights": (1,)}, "Duplicate"),
        ({"ballots": ((0,), ()), "weights": (-1, 2)}, "Negative weight"),
        ({"ballots": ((0,),), "weights": (0,)}, "No ballots registered"),
        ({"ballots": ((),), "weights": (3,)}, "No ballots registered"),
    ],
)
def test_invalid_info(kwargs, message):
    from meekstv.exceptions import STVException

    with pytest.raises(STVException, match=message):
        mk_info(**kwargs)


@pytest.mark.parametrize("ranking", [(0, 3), (-1,), ("A",)])
def test_unknown_candidate(ranking):
    from meekstv.exceptions import CandidateDoesNotExist

    with pytest.raises(CandidateDoesNotExist):
        mk_info(ballots=(ranking,), weights=(1,))


def test_unknown_withdrawn():
    from meekstv.exceptions import CandidateDoesNotExist

    with pytest.raises(CandidateDoesNotExist):
        mk_info(withdrawn=(5,))


def test_only_withdrawn_ranked_is_empty():
    info = mk_info(ballots=((2,), (0,)), weights=(3, 1), withdrawn=(2,))
    assert info.empty_ballot_count == 3
    assert info.ballot_count == 1
    assert info.running == {0, 1}


def test_from_ballot_data():
    from collections import Counter

    from meekstv.ballots import ElectionInfo

    info = ElectionInfo.from_ballot_data(
        ("Andrea", "Batman", "Robin"),
        Counter({("Robin", "Andrea"): 2, ("Batman",): 1, (): 2}),
        1,
        withdrawn=("Batman",),
        title="Board",
    )
    assert info.names == ("Andrea", "Batman", "Robin")
    assert info.withdrawn == (1,)
    assert info.title == "Board"
    assert info.ballots == ((2, 0), (1,), ())
    assert info.weights == (2, 1, 2)
    assert info.empty_ballot_count == 3


def test_from_ballot_data_unknown_label():
    from meekstv.ballots import ElectionInfo
    from meekstv.exceptions import CandidateDoesNotExist

    with pytest.raises(CandidateDoesNotExist):
        ElectionInfo.from_ballot_data(("A", "B"), [(("A", "X"), 1)], 1)
    with pytest.raises(CandidateDoesNotExist):
        ElectionInfo.from_ballot_data(
            ("A", "B", "C"), [(("A",), 1)], 1, withdrawn=("X",)
        )


def test_falsy_labels():
    from meekstv.ballots import ElectionInfo

    info = ElectionInfo.from_ballot_data((0, 1, 2), [((0, 2), 1), ((1,), 1)], 1)
    assert info.names == ("0", "1", "2")
    assert info.ballots == ((0, 2), (1,))
