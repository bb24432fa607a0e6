import random

import pytest


class ReversedRandom(random.Random):
    """Random source whose shuffle always reverses the population"""

    def sample(self, population, k, **kwargs):
        return list(reversed(population))[:k]


@pytest.fixture
def reversed_rng():
    return ReversedRandom()
