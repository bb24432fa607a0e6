from meekstv.ballots import ElectionInfo


def mk_opa_example_election(**kwargs) -> ElectionInfo:
    """
    28 voters ranked Alice first, Bob second, and Chris third
    26 voters ranked Bob first, Alice second, and Chris third
    3 voters ranked Chris first
    2 voters ranked Don first
    1 voter ranked Eric first
    """
    return ElectionInfo.from_ballot_data(
        ("Alice", "Bob", "Chris", "Don", "Eric"),
        (
            (("Alice", "Bob", "Chris"), 28),
            (("Bob", "Alice", "Chris"), 26),
            (("Chris",), 3),
            (("Don",), 2),
            (("Eric",), 1),
        ),
        3,
        **kwargs,
    )


def test_meek():
    from meekstv.meek import MeekSTV

    result = MeekSTV(mk_opa_example_election()).calculate()
    assert result.elected_as_set() == {"Alice", "Bob", "Chris"}
    assert result.elected_as_tuple()[:2] == ("Alice", "Bob")
    assert result.complete
    assert not result.randomized
    assert result.rounds[0].threshold == 15_000_001


def test_surplus_flows_to_third_preference():
    from meekstv.meek import MeekSTV

    result = MeekSTV(mk_opa_example_election()).calculate()
    first, second = result.rounds[:2]
    assert first.counts[2] == 3_000_000
    assert second.counts[2] > first.counts[2]
    assert 0 < second.keep_factors[0] < 1_000_000
    assert 0 < second.keep_factors[1] < 1_000_000


def test_text_report():
    from meekstv.meek import MeekSTV
    from meekstv.report import TextReport

    result = MeekSTV(mk_opa_example_election(title="OPA example")).calculate()
    report = TextReport(result).generate()
    assert "Counting votes for OPA example using Meek STV." in report
    assert "5 candidates running for 3 seats." in report
    assert report.endswith("Winners are Alice, Bob, and Chris.")
