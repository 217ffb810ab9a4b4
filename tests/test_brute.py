import numpy as np
import pytest

from skydist.brute import distance_from_points, distance_from_points_separable
from skydist.grid import separable_posmap
from skydist.kernels import angular_distance


def random_points(n, ypos, xpos, seed=0):
    rng = np.random.default_rng(seed)
    return np.stack([
        rng.uniform(ypos.min(), ypos.max(), n),
        rng.uniform(xpos.min(), xpos.max(), n),
    ])


def reference_field(posmap, points):
    """All pixel-point distances with numpy; argmin keeps the first minimum."""
    d = angular_distance(posmap[:, :, :, None], points[:, None, None, :])
    return d.min(axis=-1), d.argmin(axis=-1), d


def test_single_point_reproduces_kernel(patch_axes):
    ypos, xpos = patch_axes
    posmap = separable_posmap(ypos, xpos)
    point = np.array([[0.05], [1.23]])
    dists, domains = distance_from_points(posmap, point, domains=True)
    np.testing.assert_allclose(dists, angular_distance(posmap, point[:, :, None]), rtol=0, atol=1e-14)
    assert np.all(domains == 0)


def test_matches_numpy_reference(patch_axes):
    ypos, xpos = patch_axes
    posmap = separable_posmap(ypos, xpos)
    points = random_points(9, ypos, xpos, seed=3)
    result = distance_from_points(posmap, points, domains=True)
    ref_d, ref_dom, all_d = reference_field(posmap, points)

    np.testing.assert_allclose(result.dists, ref_d, rtol=0, atol=1e-13)
    # Compare labels away from (numerical) ties between two points
    second = np.sort(all_d, axis=-1)[..., 1]
    clear = second - ref_d > 1e-12
    np.testing.assert_array_equal(result.domains[clear], ref_dom[clear])


def test_ties_keep_first_point():
    posmap = separable_posmap(np.linspace(-0.1, 0.1, 5), np.linspace(0.0, 0.2, 6))
    p = [0.03, 0.07]
    q = [-0.5, 2.0]
    points = np.array([q, p, p, q]).T
    _, domains = distance_from_points(posmap, points, domains=True)
    assert np.all(domains == 1)


def test_domains_optional_and_shapes():
    posmap = separable_posmap(np.zeros(3), np.arange(4) * 0.1)
    result = distance_from_points(posmap, [[0.0], [0.0]])
    assert result.domains is None
    assert result.dists.shape == (3, 4)
    flat = distance_from_points(posmap.reshape(2, -1), [[0.0], [0.0]])
    assert flat.dists.shape == (12,)


def test_no_points_leaves_sentinels():
    posmap = separable_posmap(np.zeros(2), np.zeros(3))
    dists, domains = distance_from_points(posmap, np.zeros((2, 0)), domains=True)
    assert np.all(np.isinf(dists))
    assert np.all(domains == -1)


def test_fills_caller_buffers():
    posmap = separable_posmap(np.linspace(0, 0.1, 3), np.linspace(0, 0.1, 4))
    dists = np.full(12, 7.0)
    domains = np.full(12, 7, dtype=np.int32)
    result = distance_from_points(posmap, [[0.0, 0.1], [0.0, 0.1]], domains=True, out=(dists, domains))
    assert np.shares_memory(result.dists, dists)
    assert np.shares_memory(result.domains, domains)
    assert dists[0] == pytest.approx(0.0, abs=1e-12) and domains[0] == 0
    assert dists[-1] == pytest.approx(0.0, abs=1e-12) and domains[-1] == 1


def test_rejects_bad_buffers():
    posmap = separable_posmap(np.zeros(3), np.zeros(4))
    with pytest.raises(ValueError):
        distance_from_points(posmap, [[0.0], [0.0]], out=(np.zeros(5), np.zeros(5, dtype=np.int32)))
    with pytest.raises(ValueError):
        distance_from_points(posmap, [[0.0], [0.0]], out=(np.zeros(12), np.zeros(12)))


def test_separable_matches_dense(patch_axes):
    ypos, xpos = patch_axes
    points = random_points(15, ypos, xpos, seed=5)
    dense = distance_from_points(separable_posmap(ypos, xpos), points, domains=True)
    sep = distance_from_points_separable(ypos, xpos, points, domains=True)
    assert sep.dists.shape == (ypos.size, xpos.size)
    np.testing.assert_allclose(sep.dists, dense.dists, rtol=0, atol=1e-14)
    assert np.mean(sep.domains == dense.domains) > 0.999


def test_parallel_and_serial_are_bitwise_identical(patch_axes):
    ypos, xpos = patch_axes
    points = random_points(25, ypos, xpos, seed=8)
    par = distance_from_points_separable(ypos, xpos, points, domains=True, parallel=True)
    ser = distance_from_points_separable(ypos, xpos, points, domains=True, parallel=False)
    assert np.array_equal(par.dists, ser.dists)
    assert np.array_equal(par.domains, ser.domains)


def test_hook_receives_timing(patch_axes):
    ypos, xpos = patch_axes
    events = []
    distance_from_points_separable(ypos, xpos, [[0.0], [1.2]],
                                   hook=lambda stage, **info: events.append((stage, info)))
    assert len(events) == 1
    stage, info = events[0]
    assert stage == "distance_from_points_separable"
    assert info["elapsed"] >= 0
    assert info["npoint"] == 1
