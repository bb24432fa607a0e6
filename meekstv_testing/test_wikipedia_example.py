from meekstv.ballots import ElectionInfo

CANDIDATES = ("orange", "chocolate", "pear", "strawberry", "bonbon")
VOTES = (
    (("orange",), 4),
    (("pear", "orange"), 2),
    (("chocolate", "strawberry"), 8),
    (("chocolate", "bonbon"), 4),
    (("strawberry",), 1),
    (("bonbon",), 1),
)


def mk_wikipedia_example_election() -> ElectionInfo:
    """
    Example from https://en.wikipedia.org/wiki/Single_transferable_vote
    """
    return ElectionInfo.from_ballot_data(CANDIDATES, VOTES, 3)


def test_meek():
    from meekstv.meek import MeekSTV
    from meekstv.types import RoundAction

    result = MeekSTV(mk_wikipedia_example_election()).calculate()
    assert result.elected_as_tuple() == ("chocolate", "strawberry", "orange")
    assert not result.randomized
    assert result.complete
    assert [r.action for r in result.rounds] == [
        RoundAction.First,
        RoundAction.Surplus,
        RoundAction.Eliminate,
    ]
    assert result.rounds[0].threshold == 5_000_001
    assert result.rounds[1].keep_factors[1] == 416_667
    assert result.rounds[1].counts == (
        4_000_000,
        5_000_004,
        2_000_000,
        5_666_664,
        3_333_332,
    )
    assert result.rounds[2].action_candidates == (2,)
    assert result.losers == (2, 4)


def test_function_based_meek():
    from meekstv.meek import calculate_meek_stv

    result = calculate_meek_stv(
        candidates=CANDIDATES,
        random_shuffle=False,
        votes=VOTES,
        winners=3,
    )
    assert result.elected_as_set() == {"chocolate", "orange", "strawberry"}
    assert not result.randomized
    assert result.rounds[-1].counts[0] == 6_000_000


def test_result_dict():
    from meekstv.meek import calculate_meek_stv

    data = calculate_meek_stv(CANDIDATES, VOTES, 3, title="Desserts").as_dict()
    assert data["title"] == "Desserts"
    assert data["winners"] == ("chocolate", "strawberry", "orange")
    assert data["losers"] == ("pear", "bonbon")
    assert data["complete"]
    assert not data["randomized"]
    assert data["ballot_count"] == 20
    second = data["rounds"][1]
    assert second["round"] == 2
    assert second["action"] == "surplus"
    assert second["action_candidates"] == ("chocolate",)
    assert second["keep_factors"]["chocolate"] == 0.416667
    assert second["vote_count"]["strawberry"] == 5.666664
    assert second["elected"] == ("strawberry",)
