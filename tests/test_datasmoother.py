import io
import random

import pytest

from planarodom.datasmoother import DataSmoother


def _single(x=0.0, window=0.5):
    s = DataSmoother(window, rng=random.Random(7))
    s.add(x, 1.0)
    return s


def test_bounds_follow_three_windows():
    s = _single(2.0, 0.5)
    assert s.lower == pytest.approx(2.0 - 1.5)
    assert s.upper == pytest.approx(2.0 + 1.5)


def test_density_is_symmetric_for_single_point():
    s = _single(1.0, 0.4)
    assert s.smoothed_data(1.3) == pytest.approx(s.smoothed_data(0.7))
    assert s.smoothed_data(1.0) > s.smoothed_data(1.3)


def test_smoothed_matches_gauss_for_single_point():
    s = _single(0.0, 0.5)
    for x in (-0.4, 0.0, 0.9):
        assert s.smoothed_data(x) == pytest.approx(DataSmoother.gauss(x, 0.0, 0.5))


def test_integrate_is_near_one_and_matches_integral():
    s = _single(0.0, 0.5)
    total = s.integrate(0.001)
    assert abs(total - 1.0) < 0.01
    assert s.total_mass == total
    assert s.integral(0.001, s.upper) == pytest.approx(total)
    assert s.integral(0.001, 0.0) < total


def test_approx_gauss_recovers_kernel():
    s = _single(2.0, 0.3)
    mean, sigma = s.approx_gauss(0.001)
    assert mean == pytest.approx(2.0, abs=1e-3)
    assert abs(sigma - 0.3) < 0.02


def test_divergences_to_own_kernel_vanish():
    s = _single(0.0, 0.5)
    assert s.kld_to_gauss(0.01, 0.0, 0.5) == pytest.approx(0.0, abs=1e-9)
    assert s.cramer_von_mises_to_gauss(0.01, 0.0, 0.5) == pytest.approx(0.0, abs=1e-12)


def test_kld_rejects_disjoint_gauss():
    s = _single(0.0, 0.5)
    with pytest.raises(ValueError):
        s.kld_to_gauss(0.01, 100.0, 0.5)


def test_set_min_to_zero_preserves_differences():
    s = DataSmoother(0.1)
    for x, p in [(0.0, 3.0), (1.0, 5.0), (2.0, 4.0)]:
        s.add(x, p)
    before = [d.y for d in s.data]
    s.set_min_to_zero()
    after = [d.y for d in s.data]
    assert min(after) == 0.0
    assert [b - a for a, b in zip(after, before)] == [min(before)] * 3


def test_compute_cumulated_is_running_sum():
    s = DataSmoother(0.1)
    weights = [1.0, 2.0, 0.5]
    for i, w in enumerate(weights):
        s.add(float(i), w)
    cumulated = s.compute_cumulated()
    assert cumulated[-1] == pytest.approx(sum(weights))
    assert cumulated == sorted(cumulated)


def test_sample_stays_near_data():
    s = DataSmoother(0.01, rng=random.Random(3))
    s.add(10.0, 1.0)
    s.add(20.0, 1.0)
    for _ in range(20):
        v = s.sample()
        assert min(abs(v - 10.0), abs(v - 20.0)) < 0.1


def test_sample_multiple_returns_requested_count():
    s = DataSmoother(0.01, rng=random.Random(5))
    s.add(1.0, 1.0)
    s.add(2.0, 3.0)
    samples = s.sample_multiple(25)
    assert len(samples) == 25
    assert all(min(abs(v - 1.0), abs(v - 2.0)) < 0.1 for v in samples)


def test_sample_numeric_within_support():
    s = _single(0.0, 0.5)
    for _ in range(5):
        v = s.sample_numeric(0.01)
        assert s.lower - 0.01 <= v <= s.upper


def test_empty_smoother_raises():
    s = DataSmoother(0.5)
    with pytest.raises(ValueError):
        s.smoothed_data(0.0)
    with pytest.raises(ValueError):
        s.sample()


def test_reset_clears_data():
    s = _single()
    s.reset(1.0)
    assert s.data == []
    assert s.parzen_window == 1.0
    assert s.total_mass == -1.0


def test_dump_data_format():
    s = DataSmoother(0.5)
    s.add(1.0, 2.0)
    out = io.StringIO()
    s.dump_data(out)
    assert out.getvalue() == "1.000000 2.000000\n"


def test_dump_smoothed_data_lines():
    s = _single(0.0, 0.5)
    out = io.StringIO()
    s.dump_smoothed_data(out, 0.5)
    lines = out.getvalue().splitlines()
    assert len(lines) == 7
    x, p = map(float, lines[3].split())
    assert x == pytest.approx(0.0, abs=1e-6)
    assert p == pytest.approx(s.smoothed_data(0.0), abs=1e-6)