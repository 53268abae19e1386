"""Action selection policies.

A policy maps a state-action value function and a state to an action:

- ``Greedy``: argmax over the action space.
- ``Random``: uniform choice over the action space.
- ``EpsilonGreedy``: greedy with probability ``1 - epsilon``, random otherwise.
- ``EpsilonDecayGreedy``: as above, with ``epsilon`` decayed at the end of
  each episode down to a floor.

Only the epsilon family carries mutable state, and it changes only at
episode boundaries.
"""

from abc import ABC, abstractmethod
from collections.abc import Hashable
from typing import Any, Optional

import numpy as np

from .logging import get_logger
from .utils import check_unit_interval, seed_rng
from .values import StateActionValue

logger = get_logger(__name__)


class Policy(ABC):
    """Base class for action selection policies."""

    @abstractmethod
    def select(
        self,
        value: StateActionValue,
        state: Hashable,
        rng: np.random.Generator,
    ) -> Hashable:
        """Choose an action for ``state``.

        Args:
            value: Value function scoring each action.
            state: Current state.
            rng: Random generator supplied by the caller.

        Returns:
            Selected action.
        """
        raise NotImplementedError

    def update(self, is_done: bool) -> None:
        """Observe the end-of-episode flag of the last transition."""

    def reset(self) -> None:
        """Restore the initial state of the policy."""

    def snapshot(self) -> dict[str, Any]:
        return {"type": type(self).__name__, "label": str(self)}

    def __str__(self) -> str:
        return type(self).__name__


class Greedy(Policy):
    """Greedy policy.

    Keeps a running maximum using ``<``, so a NaN score never replaces a
    number. Ties go to the action seen first.

    Examples:
        >>> from reilly.bandits import Arms, Bernoulli
        >>> from reilly.values import ActionValueAdapter
        >>> value = ActionValueAdapter(Arms({0: Bernoulli(2.0, 1.0), 1: Bernoulli()}))
        >>> Greedy().select(value, (), seed_rng(0))
        0
    """

    def select(
        self,
        value: StateActionValue,
        state: Hashable,
        rng: np.random.Generator,
    ) -> Hashable:
        best_action = None
        best_score = None
        found = False

        for action in value.actions():
            score = value.value(state, action, rng)
            if not found or best_score < score or best_score != best_score:
                best_action, best_score = action, score
                found = True

        if not found:
            raise ValueError("Unable to choose an action from an empty action space")
        return best_action


class Random(Policy):
    """Uniformly random policy.

    Args:
        seed: If given, the policy owns a generator seeded with it and
            re-seeds it on ``reset()``; otherwise the caller's generator is
            used.
    """

    def __init__(self, seed: Optional[int] = None):
        self.seed = seed
        self._rng = seed_rng(seed) if seed is not None else None

    def select(
        self,
        value: StateActionValue,
        state: Hashable,
        rng: np.random.Generator,
    ) -> Hashable:
        actions = list(value.actions())
        if not actions:
            raise ValueError("Unable to choose an action from an empty action space")
        source = self._rng if self._rng is not None else rng
        return actions[int(source.integers(len(actions)))]

    def reset(self) -> None:
        if self.seed is not None:
            self._rng = seed_rng(self.seed)

    def snapshot(self) -> dict[str, Any]:
        data = super().snapshot()
        data["seed"] = self.seed
        return data


class EpsilonGreedy(Policy):
    """Epsilon-greedy policy with a fixed exploration rate.

    Args:
        epsilon: Exploration probability in [0, 1).
        seed: Optional seed for the random helper policy.

    Examples:
        >>> policy = EpsilonGreedy(0.1)
        >>> str(policy)
        'EpsilonGreedy(ε=0.1)'
    """

    def __init__(self, epsilon: float = 0.1, seed: Optional[int] = None):
        self.epsilon = check_unit_interval("epsilon", epsilon)
        self.greedy = Greedy()
        self.random = Random(seed)

    def _explore(self, rng: np.random.Generator) -> bool:
        p = rng.random()
        return not p < 1.0 - self.epsilon

    def select(
        self,
        value: StateActionValue,
        state: Hashable,
        rng: np.random.Generator,
    ) -> Hashable:
        if self._explore(rng):
            return self.random.select(value, state, rng)
        return self.greedy.select(value, state, rng)

    def reset(self) -> None:
        self.greedy.reset()
        self.random.reset()

    def snapshot(self) -> dict[str, Any]:
        data = super().snapshot()
        data["epsilon"] = self.epsilon
        return data

    def __str__(self) -> str:
        return f"EpsilonGreedy(ε={self.epsilon})"


class EpsilonDecayGreedy(EpsilonGreedy):
    """Epsilon-greedy policy with multiplicative decay and a floor.

    On every terminal update ``epsilon <- max(epsilon_min, epsilon * epsilon_decay)``.

    Args:
        epsilon: Initial exploration probability in [0, 1).
        epsilon_decay: Decay factor in [0, 1).
        epsilon_min: Floor in [0, epsilon).
        seed: Optional seed for the random helper policy.

    Raises:
        ValueError: If any parameter is out of range.

    Examples:
        >>> policy = EpsilonDecayGreedy(0.5, 0.5, 0.1)
        >>> policy.update(is_done=True)
        >>> policy.epsilon
        0.25
    """

    def __init__(
        self,
        epsilon: float = 0.1,
        epsilon_decay: float = 0.999,
        epsilon_min: float = 0.01,
        seed: Optional[int] = None,
    ):
        super().__init__(epsilon, seed)
        self.epsilon_decay = check_unit_interval("epsilon_decay", epsilon_decay)
        if not (0.0 <= epsilon_min < self.epsilon):
            raise ValueError(
                f"epsilon_min must be in [0, epsilon={self.epsilon}), got {epsilon_min}"
            )
        self.epsilon_min = float(epsilon_min)
        self.epsilon_0 = self.epsilon

    def update(self, is_done: bool) -> None:
        if is_done and self.epsilon > self.epsilon_min:
            self.epsilon = max(self.epsilon_min, self.epsilon * self.epsilon_decay)
            if self.epsilon == self.epsilon_min:
                logger.debug("epsilon reached its floor %s", self.epsilon_min)

    def reset(self) -> None:
        super().reset()
        self.epsilon = self.epsilon_0

    def snapshot(self) -> dict[str, Any]:
        data = super().snapshot()
        data.update(
            epsilon_0=self.epsilon_0,
            epsilon_decay=self.epsilon_decay,
            epsilon_min=self.epsilon_min,
        )
        return data

    def __str__(self) -> str:
        return (
            f"EpsilonDecayGreedy(ε={self.epsilon_0}, "
            f"decay={self.epsilon_decay}, min={self.epsilon_min})"
        )
