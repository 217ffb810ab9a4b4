import numpy as np
import pytest


@pytest.fixture
def patch_axes():
    """A 40x60 patch near the equator with ~0.01 rad pixels."""
    ypos = np.linspace(-0.2, 0.2, 40)
    xpos = np.linspace(1.0, 1.6, 60)
    return ypos, xpos


@pytest.fixture
def blob_mask():
    """20x24 mask: nonzero everywhere except two disjoint background blobs."""
    mask = np.ones((20, 24), dtype=np.uint8)
    mask[3:7, 4:9] = 0
    mask[12:17, 15:21] = 0
    mask[14, 10] = 0
    return mask
