from random import Random

import pytest

from meekstv.ballots import ElectionInfo


def mk_random_election(seed: int) -> ElectionInfo:
    """A few hundred voters ranking up to six of eight candidates"""
    rng = Random(seed)
    num_candidates = 8
    popularity = [rng.random() + 0.1 for _ in range(num_candidates)]
    votes = {}
    for _ in range(300):
        ranking = []
        length = rng.randint(1, 6)
        while len(ranking) < length:
            (candidate,) = rng.choices(range(num_candidates), weights=popularity)
            if candidate not in ranking:
                ranking.append(candidate)
        ranking = tuple(ranking)
        votes[ranking] = votes.get(ranking, 0) + 1
    return ElectionInfo(
        num_candidates=num_candidates,
        seats=rng.randint(1, 4),
        names=tuple("ABCDEFGH"),
        ballots=tuple(votes),
        weights=tuple(votes.values()),
        withdrawn=(7,) if seed % 2 else (),
    )


@pytest.fixture(params=range(6))
def counted(request):
    from meekstv.meek import MeekSTV

    info = mk_random_election(request.param)
    return info, MeekSTV(info, seed=request.param).calculate(), request.param


def test_votes_are_conserved(counted):
    info, result, _ = counted
    total = 10**result.precision * info.ballot_count
    for election_round in result.rounds:
        assert election_round.exhausted >= 0
        assert sum(election_round.counts) + election_round.exhausted == total
        assert all(v >= 0 for v in election_round.counts)


def test_threshold(counted):
    info, result, _ = counted
    total = 10**result.precision * info.ballot_count
    for election_round in result.rounds:
        assert election_round.threshold == (
            (total - election_round.exhausted) // (info.seats + 1) + 1
        )


def test_keep_factors(counted):
    _, result, _ = counted
    p = 10**result.precision
    for previous, current in zip(result.rounds, result.rounds[1:]):
        for candidate in result:
            assert 0 < current.keep_factors[candidate] <= previous.keep_factors[candidate]
    for candidate in result.losers + result.withdrawn:
        assert result.rounds[0].keep_factors[candidate] in (0, p)


def test_classification(counted):
    info, result, _ = counted
    assert result.complete
    assert len(result) == info.seats
    assert len(set(result)) == len(result)
    assert not set(result).intersection(result.losers)
    assert not set(result).intersection(result.withdrawn)
    assert set(result) | set(result.losers) | set(result.withdrawn) == set(
        range(info.num_candidates)
    )
    for candidate in result:
        won_at = result.won_at(candidate)
        assert all(
            candidate not in r.excluded for r in result.rounds[won_at:]
        ), "Winners stay elected"


def test_rounds_are_numbered(counted):
    _, result, _ = counted
    assert [r.round for r in result.rounds] == list(range(len(result.rounds)))
    assert [d["round"] for d in result.as_dict()["rounds"]] == list(
        range(1, len(result.rounds) + 1)
    )


def test_reproducible(counted):
    from meekstv.meek import MeekSTV
    from meekstv.report import TextReport

    info, result, seed = counted
    again = MeekSTV(info, seed=seed).calculate()
    assert again.as_dict()["rounds"] == result.as_dict()["rounds"]
    assert TextReport(again).generate() == TextReport(result).generate()
