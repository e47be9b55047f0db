import numpy as np
import pytest

from curve_resample import cumulative_lengths, resample
from errors import InsufficientPoints


SQUARE = [(0, 0, 0), (1, 0, 0), (1, 1, 0), (0, 1, 0)]


@pytest.mark.parametrize("m", [1, 2, 3, 17, 100, 1024])
def test_exact_count(m):
    assert resample(SQUARE, m).shape == (m, 3)


def test_endpoints_kept():
    out = resample(SQUARE, 100)
    assert np.allclose(out[0], SQUARE[0])
    assert np.allclose(out[-1], SQUARE[-1], atol=1e-9)


def test_uniform_spacing():
    out = resample(SQUARE, 31)
    steps = np.linalg.norm(np.diff(out, axis=0), axis=1)
    # spacing is uniform along the path; corners shorten the chord slightly
    assert steps.max() == pytest.approx(0.1, abs=1e-9)
    assert steps.min() > 0.07


def test_idempotent():
    once = resample(SQUARE, 61)
    twice = resample(once, 61)
    assert np.allclose(once, twice, atol=1e-9)


def test_single_point_repeats():
    out = resample([(1, 2, 3)], 5)
    assert out.shape == (5, 3)
    assert np.allclose(out, [1, 2, 3])


def test_zero_length_curve_repeats_first():
    out = resample([(1, 1, 1)] * 4, 7)
    assert np.allclose(out, [1, 1, 1])


def test_duplicate_points_do_not_break_search():
    pts = [(0, 0, 0), (1, 0, 0), (1, 0, 0), (1, 0, 0), (2, 0, 0), (2, 0, 0)]
    out = resample(pts, 5)
    assert np.all(np.isfinite(out))
    assert np.allclose(out[:, 0], [0.0, 0.5, 1.0, 1.5, 2.0])


def test_empty_input_raises():
    with pytest.raises(InsufficientPoints):
        resample([], 10)


def test_non_positive_count_raises():
    with pytest.raises(ValueError):
        resample(SQUARE, 0)


def test_cumulative_lengths():
    assert np.allclose(cumulative_lengths(SQUARE), [0, 1, 2, 3])
