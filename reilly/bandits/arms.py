"""Bandit arms: per-action reward distribution estimators.

Every arm tracks the number of pulls and the running sum of squared
rewards (needed by UCB1-Normal) on top of its distribution parameters.

- ``Bernoulli``: Beta(α, β) posterior over a success probability.
- ``Normal``: running mean with a Gaussian sampling distribution whose
  scale shrinks as ``1 / (n + 1)``.
- ``SampleAverage``: running mean with a unit-variance Gaussian sampling
  distribution.
"""

from abc import ABC, abstractmethod
from typing import Any

import numpy as np


class Arm(ABC):
    """Base class for bandit arms."""

    def __init__(self) -> None:
        self.count = 0
        self.sum_squared_rewards = 0.0

    @abstractmethod
    def expected_value(self) -> float:
        """Point estimate of the arm's reward."""
        raise NotImplementedError

    @abstractmethod
    def sample(self, rng: np.random.Generator) -> float:
        """Draw from the arm's sampling distribution.

        Args:
            rng: Random number generator.

        Returns:
            Sampled reward.
        """
        raise NotImplementedError

    def update(self, reward: float) -> None:
        """Record one pull with the obtained reward."""
        reward = float(reward)
        self.count += 1
        self.sum_squared_rewards += reward * reward
        self._update(reward)

    @abstractmethod
    def _update(self, reward: float) -> None:
        raise NotImplementedError

    def reset(self) -> None:
        """Restore the prior."""
        self.count = 0
        self.sum_squared_rewards = 0.0

    def snapshot(self) -> dict[str, Any]:
        return {
            "type": type(self).__name__,
            "count": self.count,
            "sum_squared_rewards": self.sum_squared_rewards,
        }


class Bernoulli(Arm):
    """Bernoulli arm with a Beta(α, β) posterior.

    Rewards must lie in [0, 1]; a reward ``r`` adds ``r`` to α and ``1 - r``
    to β.

    Args:
        alpha: Prior α, must be > 0.
        beta: Prior β, must be > 0.

    Examples:
        >>> arm = Bernoulli()
        >>> arm.expected_value()
        0.5
        >>> arm.update(1.0)
        >>> round(arm.expected_value(), 4)
        0.6667
    """

    def __init__(self, alpha: float = 1.0, beta: float = 1.0):
        super().__init__()
        if not alpha > 0:
            raise ValueError(f"alpha must be > 0, got {alpha}")
        if not beta > 0:
            raise ValueError(f"beta must be > 0, got {beta}")

        self.init_alpha = float(alpha)
        self.init_beta = float(beta)
        self.alpha = self.init_alpha
        self.beta = self.init_beta

    def expected_value(self) -> float:
        return self.alpha / (self.alpha + self.beta)

    def sample(self, rng: np.random.Generator) -> float:
        return float(rng.beta(self.alpha, self.beta))

    def update(self, reward: float) -> None:
        if not (0.0 <= reward <= 1.0):
            raise ValueError(f"Bernoulli reward must be in [0, 1], got {reward}")
        super().update(reward)

    def _update(self, reward: float) -> None:
        self.alpha += reward
        self.beta += 1.0 - reward

    def reset(self) -> None:
        super().reset()
        self.alpha = self.init_alpha
        self.beta = self.init_beta

    def snapshot(self) -> dict[str, Any]:
        data = super().snapshot()
        data.update(alpha=self.alpha, beta=self.beta)
        return data

    def __repr__(self) -> str:
        return f"Bernoulli(alpha={self.alpha}, beta={self.beta}, count={self.count})"


class _RunningMean(Arm):
    """Arm estimating its reward as ``Q += (r - Q) / n``."""

    def __init__(self) -> None:
        super().__init__()
        self.mean = 0.0

    def expected_value(self) -> float:
        return self.mean

    def _update(self, reward: float) -> None:
        self.mean += (reward - self.mean) / self.count

    def reset(self) -> None:
        super().reset()
        self.mean = 0.0

    def snapshot(self) -> dict[str, Any]:
        data = super().snapshot()
        data["mean"] = self.mean
        return data

    def __repr__(self) -> str:
        return f"{type(self).__name__}(mean={self.mean}, count={self.count})"


class Normal(_RunningMean):
    """Gaussian arm sampling from ``N(mean, 1 / (n + 1))``.

    The ``+ 1`` keeps the scale finite before the first pull.
    """

    def sample(self, rng: np.random.Generator) -> float:
        return float(rng.normal(self.mean, 1.0 / (self.count + 1.0)))


class SampleAverage(_RunningMean):
    """Sample-average arm sampling from ``N(mean, 1)``."""

    def sample(self, rng: np.random.Generator) -> float:
        return float(rng.normal(self.mean, 1.0))
