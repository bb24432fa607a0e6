from meekstv.ballots import ElectionInfo


def mk_incomplete_result_election() -> ElectionInfo:
    """Only two candidates get any votes, for three seats"""
    return ElectionInfo.from_ballot_data(
        ("Andrea", "Batman", "Robin", "Gorm"),
        (
            (("Batman",), 1),
            (("Gorm",), 2),
        ),
        3,
    )


def test_meek():
    from meekstv.meek import MeekSTV

    result = MeekSTV(mk_incomplete_result_election(), allow_random=False).calculate()
    assert not result.randomized
    assert not result.complete
    assert not result.anomaly
    assert {"Batman", "Gorm"} <= result.elected_as_set()


def test_unresolved_tie_keeps_rounds():
    from meekstv.meek import MeekSTV

    info = ElectionInfo.from_ballot_data(("A", "B", "C"), {("B",): 1, ("C",): 1}, 1)
    result = MeekSTV(info, allow_random=False).calculate()
    assert result == []
    assert not result.complete
    assert len(result.rounds) == 1
    assert result.as_dict()["complete"] is False
