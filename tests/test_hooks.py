import logging

import numpy as np
import pytest

from skydist.hooks import log_hook, timed
from skydist.treerings import distance_from_points_treerings_separable


def test_timed_without_hook_is_a_no_op():
    with timed(None, "stage"):
        pass


def test_timed_reports_elapsed():
    events = []
    with timed(lambda stage, **info: events.append((stage, info)), "work", size=3):
        pass
    assert events[0][0] == "work"
    assert events[0][1]["size"] == 3
    assert events[0][1]["elapsed"] >= 0


def test_log_hook_forwards_to_logging(caplog):
    logger = logging.getLogger("skydist.test")
    hook = log_hook(logger, level=logging.INFO)
    with caplog.at_level(logging.INFO, logger="skydist.test"):
        distance_from_points_treerings_separable(
            np.linspace(-0.01, 0.01, 3), np.linspace(0.0, 0.02, 3), [[0.0], [0.01]], hook=hook)
    messages = [r.getMessage() for r in caplog.records]
    assert any(m.startswith("treerings_pass") and "frontier=1" in m for m in messages)
    assert any(m.startswith("treerings ") and "elapsed=" in m for m in messages)


def test_timed_reports_when_the_block_raises():
    events = []
    with pytest.raises(RuntimeError):
        with timed(lambda stage, **info: events.append((stage, info)), "work"):
            raise RuntimeError("boom")
    assert events[0][0] == "work"
    assert events[0][1]["elapsed"] >= 0
