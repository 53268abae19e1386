"""Tests for bandit arms."""

import math

import numpy as np
import pytest

from reilly.bandits.arms import Bernoulli, Normal, SampleAverage


class TestReset:
    """Reset restores the prior expected value."""

    @pytest.mark.parametrize(
        "arm, prior",
        [
            (Bernoulli(), 0.5),
            (Bernoulli(3.0, 1.0), 0.75),
            (Normal(), 0.0),
            (SampleAverage(), 0.0),
        ],
    )
    def test_reset_restores_prior(self, arm, prior):
        for reward in [1.0, 0.0, 1.0, 1.0]:
            arm.update(reward)
        arm.reset()
        assert arm.expected_value() == prior
        assert arm.count == 0
        assert arm.sum_squared_rewards == 0.0


class TestBernoulli:
    """Tests for the Beta-Bernoulli arm."""

    def test_update_parameters(self):
        arm = Bernoulli()
        arm.update(1.0)
        arm.update(0.0)
        arm.update(0.25)
        assert arm.alpha == pytest.approx(2.25)
        assert arm.beta == pytest.approx(2.75)
        assert arm.count == 3
        assert arm.sum_squared_rewards == pytest.approx(1.0625)

    def test_converges_monotonically(self):
        arm = Bernoulli()
        values = []
        for _ in range(50):
            arm.update(1.0)
            values.append(arm.expected_value())
        assert all(b > a for a, b in zip(values, values[1:]))
        assert all(v < 1.0 for v in values)
        assert values[-1] > 0.95

    @pytest.mark.parametrize("alpha, beta", [(0.0, 1.0), (1.0, 0.0), (-1.0, 1.0)])
    def test_invalid_prior(self, alpha, beta):
        with pytest.raises(ValueError):
            Bernoulli(alpha, beta)

    @pytest.mark.parametrize("reward", [-0.5, 1.5])
    def test_reward_out_of_range(self, reward):
        arm = Bernoulli()
        with pytest.raises(ValueError, match="Bernoulli reward"):
            arm.update(reward)
        assert arm.count == 0
        assert arm.alpha == 1.0 and arm.beta == 1.0

    def test_sample_in_unit_interval(self, rng):
        arm = Bernoulli(2.0, 5.0)
        samples = [arm.sample(rng) for _ in range(1000)]
        assert all(0.0 <= s <= 1.0 for s in samples)
        assert np.mean(samples) == pytest.approx(2.0 / 7.0, abs=0.03)

    def test_snapshot(self):
        arm = Bernoulli()
        arm.update(1.0)
        assert arm.snapshot() == {
            "type": "Bernoulli",
            "count": 1,
            "sum_squared_rewards": 1.0,
            "alpha": 2.0,
            "beta": 1.0,
        }


class TestRunningMean:
    """Tests for Normal and SampleAverage arms."""

    @pytest.mark.parametrize("cls", [Normal, SampleAverage])
    def test_mean_update(self, cls):
        arm = cls()
        for reward in [2.0, 4.0, 9.0]:
            arm.update(reward)
        assert arm.expected_value() == pytest.approx(5.0)
        assert arm.count == 3
        assert arm.sum_squared_rewards == pytest.approx(101.0)

    @pytest.mark.parametrize("cls", [Normal, SampleAverage])
    def test_converges_monotonically(self, cls):
        arm = cls()
        gaps = []
        for _ in range(20):
            arm.update(3.0)
            gaps.append(abs(3.0 - arm.expected_value()))
        assert all(b <= a for a, b in zip(gaps, gaps[1:]))
        assert gaps[-1] == pytest.approx(0.0)

    def test_normal_sample_before_first_pull(self, rng):
        """Scale 1 / (n + 1) is finite when n = 0."""
        sample = Normal().sample(rng)
        assert math.isfinite(sample)

    def test_normal_sampling_narrows(self, rng):
        arm = Normal()
        for _ in range(99):
            arm.update(1.0)
        samples = np.array([arm.sample(rng) for _ in range(2000)])
        assert samples.std() == pytest.approx(0.01, rel=0.1)
        assert samples.mean() == pytest.approx(1.0, abs=0.01)

    def test_sample_average_unit_scale(self, rng):
        arm = SampleAverage()
        for _ in range(10):
            arm.update(5.0)
        samples = np.array([arm.sample(rng) for _ in range(4000)])
        assert samples.std() == pytest.approx(1.0, rel=0.1)
        assert samples.mean() == pytest.approx(5.0, abs=0.1)

    def test_snapshot(self):
        arm = Normal()
        arm.update(2.0)
        assert arm.snapshot() == {
            "type": "Normal",
            "count": 1,
            "sum_squared_rewards": 4.0,
            "mean": 2.0,
        }
