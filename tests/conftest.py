import logging

import numpy as np
import pytest

from mandelsnap.util.logging_setup import get_logger


@pytest.fixture(autouse=True)
def reset_package_logger():
    """Let caplog see package records and drop handlers left over by CLI runs."""
    logger = get_logger()
    yield
    for h in list(logger.handlers):
        logger.removeHandler(h)
        h.close()
    logger.propagate = True
    logger.setLevel(logging.NOTSET)


@pytest.fixture
def rng():
    return np.random.default_rng(1234)


class ScriptedRng:
    """Stand-in for numpy's Generator that replays fixed draws."""

    def __init__(self, randoms, uniform=None, integers=None):
        self._randoms = list(randoms)
        self._uniform = uniform
        self._integers = integers

    def random(self):
        return self._randoms.pop(0)

    def uniform(self, low, high):
        if self._uniform is None:
            return (low + high) / 2.0
        return self._uniform

    def integers(self, low, high):
        return self._integers


@pytest.fixture
def scripted_rng():
    return ScriptedRng
