"""Multi-armed bandit value function and agent.

``Arms`` holds one ``Arm`` per action and scores actions with one of four
algorithms, fixed at construction:

- ``EXPECTED_VALUE``: the arm's point estimate.
- ``THOMPSON_SAMPLING``: a draw from the arm's sampling distribution.
- ``UCB1``: ``Q(a) + sqrt(2 ln t / n_a)``.
- ``UCB1_NORMAL``: ``Q(a) + sqrt(16 * [(q_a - n_a Q(a)^2) / (n_a - 1)] * ln(t - 1) / n_a)``,
  where ``q_a`` is the sum of squared rewards.

Both UCB variants follow Auer, Cesa-Bianchi & Fischer (2002), "Finite-time
analysis of the multiarmed bandit problem". Arms that have not been pulled
often enough for the bonus to be defined score ``+inf``, so a greedy policy
pulls each of them before trusting any bonus.
"""

from __future__ import annotations

import math
from collections.abc import Callable, Hashable, Iterable, Iterator, Mapping
from enum import Enum
from typing import Any, Optional

import numpy as np

from ..agents import Agent
from ..config import is_debug_enabled
from ..policies import Policy
from ..utils import to_jsonable
from ..values import ActionValue, ActionValueAdapter, StateActionValue
from .arms import Arm


class ArmsAlgorithm(Enum):
    """Action scoring algorithm of an ``Arms`` value function."""

    EXPECTED_VALUE = "ExpectedValue"
    THOMPSON_SAMPLING = "ThompsonSampling"
    UCB1 = "UCB1"
    UCB1_NORMAL = "UCB1Normal"


class Arms(ActionValue):
    """Action-value function of a multi-armed bandit.

    Args:
        arms: Mapping from action to arm. The action set is fixed.
        algorithm: Scoring algorithm.

    Examples:
        >>> from reilly.bandits.arms import Bernoulli
        >>> arms = Arms({0: Bernoulli(2.0, 1.0), 1: Bernoulli()})
        >>> round(arms.value(0, rng=None), 4)
        0.6667
        >>> arms.update(1, 1.0)
        >>> arms.t
        1
    """

    def __init__(
        self,
        arms: Mapping[Hashable, Arm],
        algorithm: ArmsAlgorithm = ArmsAlgorithm.EXPECTED_VALUE,
    ):
        if not isinstance(algorithm, ArmsAlgorithm):
            raise ValueError(
                f"algorithm must be an ArmsAlgorithm, got {algorithm!r}"
            )
        for action, arm in arms.items():
            if not isinstance(arm, Arm):
                raise ValueError(
                    f"arm for action {action!r} must be an Arm, got {type(arm).__name__}"
                )

        self._arms: dict[Hashable, Arm] = dict(arms)
        self.algorithm = algorithm
        self.t = 0

    @classmethod
    def from_actions(
        cls,
        actions: Iterable[Hashable],
        arm_factory: Callable[[], Arm],
        algorithm: ArmsAlgorithm = ArmsAlgorithm.EXPECTED_VALUE,
    ) -> "Arms":
        """Build one fresh arm per action with ``arm_factory``."""
        return cls({action: arm_factory() for action in actions}, algorithm)

    def __getitem__(self, action: Hashable) -> Arm:
        try:
            return self._arms[action]
        except KeyError:
            raise KeyError(f"Unknown bandit action {action!r}") from None

    def __len__(self) -> int:
        return len(self._arms)

    def actions(self) -> Iterator[Hashable]:
        return iter(self._arms)

    def value(self, action: Hashable, rng: Optional[np.random.Generator]) -> float:
        arm = self[action]

        if self.algorithm is ArmsAlgorithm.EXPECTED_VALUE:
            return arm.expected_value()

        if self.algorithm is ArmsAlgorithm.THOMPSON_SAMPLING:
            if rng is None:
                raise ValueError("Thompson sampling requires a random generator")
            return arm.sample(rng)

        if self.algorithm is ArmsAlgorithm.UCB1:
            n = arm.count
            if n == 0:
                return math.inf
            score = arm.expected_value() + math.sqrt(2.0 * math.log(self.t) / n)
            return self._checked(action, score)

        if self.algorithm is ArmsAlgorithm.UCB1_NORMAL:
            n = arm.count
            if n <= 1 or self.t <= 1:
                return math.inf
            q_a = arm.expected_value()
            # Rounding can push the variance estimate slightly below zero.
            variance = max(0.0, (arm.sum_squared_rewards - n * q_a * q_a) / (n - 1))
            score = q_a + math.sqrt(16.0 * variance * math.log(self.t - 1) / n)
            return self._checked(action, score)

        raise ValueError(f"Unsupported algorithm {self.algorithm!r}")

    @staticmethod
    def _checked(action: Hashable, score: float) -> float:
        if math.isnan(score):
            raise FloatingPointError(f"Undefined score for action {action!r}")
        return score

    def update(self, action: Hashable, reward: float, is_done: bool = False) -> None:
        self[action].update(reward)
        self.t += 1

        if is_debug_enabled():
            total = sum(arm.count for arm in self._arms.values())
            if total != self.t:
                raise RuntimeError(
                    f"Pull counter out of sync: t={self.t}, sum of arm counts={total}"
                )

    def reset(self) -> None:
        for arm in self._arms.values():
            arm.reset()
        self.t = 0

    def snapshot(self) -> dict[str, Any]:
        data = super().snapshot()
        data.update(
            algorithm=self.algorithm.name,
            t=self.t,
            arms=[
                {"action": to_jsonable(action), **arm.snapshot()}
                for action, arm in self._arms.items()
            ],
        )
        return data

    def __str__(self) -> str:
        return self.algorithm.value

    def __repr__(self) -> str:
        return f"Arms({self._arms!r}, algorithm={self.algorithm})"


class MultiArmedBandit(Agent):
    """(Contextual) multi-armed bandit agent.

    Accepts either an ``ActionValue`` (wrapped so that the agent sees the
    unit state) or a ``StateActionValue`` for contextual problems.

    Args:
        value: Action or state-action value function.
        policy: Action selection policy.

    Examples:
        >>> from reilly.bandits.arms import Bernoulli
        >>> from reilly.policies import Greedy
        >>> agent = MultiArmedBandit(Arms({0: Bernoulli(), 1: Bernoulli()}), Greedy())
        >>> str(agent)
        'Greedy-ExpectedValue-MAB'
    """

    def __init__(self, value: ActionValue | StateActionValue, policy: Policy):
        if isinstance(value, ActionValue):
            value = ActionValueAdapter(value)
        super().__init__(value, policy)

    def __str__(self) -> str:
        return f"{self.policy}-{self.value}-MAB"

