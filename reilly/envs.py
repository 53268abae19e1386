"""Reference environments.

Environments expose finite action and state spaces and draw all their
randomness from the generator passed to ``reset`` and ``step``, so a
session seeded once is fully reproducible. Every environment here is a
plain picklable object and can be shipped to worker processes.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Hashable, Iterator, Sequence
from dataclasses import dataclass
from typing import Optional, Tuple

import numpy as np

from .values import UNIT_STATE

Transition = Tuple[float, Hashable, bool]


class Env(ABC):
    """Minimal environment interface consumed by sessions."""

    @abstractmethod
    def actions(self) -> Iterator[Hashable]:
        """Iterate over the action space."""
        raise NotImplementedError

    @abstractmethod
    def states(self) -> Iterator[Hashable]:
        """Iterate over the state space."""
        raise NotImplementedError

    @abstractmethod
    def current_state(self) -> Hashable:
        """Return the current state."""
        raise NotImplementedError

    @abstractmethod
    def step(self, action: Hashable, rng: np.random.Generator) -> Transition:
        """Apply ``action``.

        Args:
            action: Action to perform.
            rng: Random number generator.

        Returns:
            Tuple of (reward, next_state, is_terminal).
        """
        raise NotImplementedError

    @abstractmethod
    def reset(self, rng: np.random.Generator) -> Hashable:
        """Reset the environment and return the initial state."""
        raise NotImplementedError

    def __str__(self) -> str:
        return type(self).__name__


@dataclass(frozen=True)
class NormalReward:
    """Gaussian reward distribution ``N(loc, scale)``."""

    loc: float = 0.0
    scale: float = 1.0

    def __post_init__(self) -> None:
        if not self.scale >= 0:
            raise ValueError(f"scale must be >= 0, got {self.scale}")

    def sample(self, rng: np.random.Generator) -> float:
        return float(rng.normal(self.loc, self.scale))

    @property
    def mean(self) -> float:
        return self.loc


@dataclass(frozen=True)
class BernoulliReward:
    """Reward 1 with probability ``p``, 0 otherwise."""

    p: float = 0.5

    def __post_init__(self) -> None:
        if not (0.0 <= self.p <= 1.0):
            raise ValueError(f"p must be in [0, 1], got {self.p}")

    def sample(self, rng: np.random.Generator) -> float:
        return 1.0 if rng.random() < self.p else 0.0

    @property
    def mean(self) -> float:
        return self.p


class FarWest(Env):
    """Stateless multi-armed bandit with a fixed time horizon.

    Action ``i`` pulls arm ``i`` and returns a sample of
    ``distributions[i]``. The only state is the unit state ``()`` and the
    episode ends after ``horizon`` pulls.

    Args:
        distributions: One reward distribution per arm; each must provide
            ``sample(rng)``.
        horizon: Number of pulls per episode (>= 1).

    Examples:
        >>> env = FarWest([BernoulliReward(0.1), BernoulliReward(0.9)], horizon=2)
        >>> env.reset(np.random.default_rng(0))
        ()
        >>> sorted(env.actions())
        [0, 1]
    """

    def __init__(self, distributions: Sequence, horizon: int = 1):
        if len(distributions) < 1:
            raise ValueError("distributions must be non-empty")
        if horizon < 1:
            raise ValueError(f"horizon must be >= 1, got {horizon}")
        self.distributions = list(distributions)
        self.horizon = horizon
        self.count = 0

    @property
    def best_arm(self) -> Optional[int]:
        """Arm with the highest mean, if the distributions expose one."""
        means = [getattr(d, "mean", None) for d in self.distributions]
        if any(m is None for m in means):
            return None
        return int(np.argmax(means))

    def actions(self) -> Iterator[Hashable]:
        return iter(range(len(self.distributions)))

    def states(self) -> Iterator[Hashable]:
        return iter([UNIT_STATE])

    def current_state(self) -> Hashable:
        return UNIT_STATE

    def step(self, action: Hashable, rng: np.random.Generator) -> Transition:
        if not (isinstance(action, (int, np.integer)) and 0 <= action < len(self.distributions)):
            raise ValueError(
                f"action must be in [0, {len(self.distributions)}), got {action!r}"
            )
        self.count += 1
        reward = self.distributions[action].sample(rng)
        return reward, UNIT_STATE, self.count >= self.horizon

    def reset(self, rng: np.random.Generator) -> Hashable:
        self.count = 0
        return UNIT_STATE

    def __str__(self) -> str:
        return f"FarWest(arms={len(self.distributions)}, horizon={self.horizon})"


class ChainMDP(Env):
    """Simple n-state chain with a terminal reward at the right end.

    States are 0, 1, ..., n_states-1; state n_states-1 is terminal.
    Actions: 0 = left, 1 = right. Action 0 moves left with probability
    ``p_left`` (right otherwise); action 1 moves right with probability
    ``p_right`` (left otherwise).

    Args:
        n_states: Number of states (>= 2).
        p_left: Probability of moving left when action=0.
        p_right: Probability of moving right when action=1.
        reward_goal: Reward for reaching the terminal state.
        reward_step: Reward per non-terminal step.

    Examples:
        >>> env = ChainMDP(n_states=5)
        >>> rng = np.random.default_rng(0)
        >>> env.reset(rng)
        0
        >>> env.step(1, rng)
        (-0.01, 1, False)
    """

    def __init__(
        self,
        n_states: int = 5,
        p_left: float = 1.0,
        p_right: float = 1.0,
        reward_goal: float = 1.0,
        reward_step: float = -0.01,
    ):
        if n_states < 2:
            raise ValueError(f"n_states must be >= 2, got {n_states}")
        if not (0 <= p_left <= 1):
            raise ValueError(f"p_left must be in [0, 1], got {p_left}")
        if not (0 <= p_right <= 1):
            raise ValueError(f"p_right must be in [0, 1], got {p_right}")

        self.n_states = n_states
        self.p_left = p_left
        self.p_right = p_right
        self.reward_goal = reward_goal
        self.reward_step = reward_step
        self.state = 0

    def actions(self) -> Iterator[Hashable]:
        return iter((0, 1))

    def states(self) -> Iterator[Hashable]:
        return iter(range(self.n_states))

    def current_state(self) -> Hashable:
        return self.state

    def step(self, action: Hashable, rng: np.random.Generator) -> Transition:
        if action not in (0, 1):
            raise ValueError(f"action must be 0 or 1, got {action!r}")

        if self.state == self.n_states - 1:
            return 0.0, self.state, True

        left = max(0, self.state - 1)
        right = min(self.n_states - 1, self.state + 1)
        if action == 0:
            next_state = left if rng.random() < self.p_left else right
        else:
            next_state = right if rng.random() < self.p_right else left

        self.state = next_state
        if next_state == self.n_states - 1:
            return self.reward_goal, next_state, True
        return self.reward_step, next_state, False

    def reset(self, rng: np.random.Generator) -> Hashable:
        self.state = 0
        return self.state

    def __str__(self) -> str:
        return f"ChainMDP(n={self.n_states})"


class CliffWalking(Env):
    """4x12 cliff-walking grid world.

    States are flattened ``row * 12 + col``; the agent starts at (3, 0) and
    the goal is (3, 11). Actions: 0=up, 1=right, 2=down, 3=left. Each move
    costs -1; stepping into the cliff (3, 1..10) costs -100 and sends the
    agent back to the start without ending the episode.

    Examples:
        >>> env = CliffWalking()
        >>> rng = np.random.default_rng(0)
        >>> env.reset(rng)
        36
        >>> env.step(1, rng)
        (-100.0, 36, False)
    """

    ROWS = 4
    COLS = 12
    START = (3, 0)
    GOAL = (3, 11)

    def __init__(self) -> None:
        n_states = self.ROWS * self.COLS
        self.transitions = np.zeros((n_states, 4), dtype=np.int64)
        self.rewards = np.full((n_states, 4), -1.0, dtype=np.float64)
        self.terminal = np.zeros((n_states, 4), dtype=bool)

        for s in range(n_states):
            row, col = divmod(s, self.COLS)
            for a in range(4):
                next_state, reward, done = self._transition(row, col, a)
                self.transitions[s, a] = next_state
                self.rewards[s, a] = reward
                self.terminal[s, a] = done

        self.state = self._encode(*self.START)

    @classmethod
    def _encode(cls, row: int, col: int) -> int:
        return row * cls.COLS + col

    @classmethod
    def _transition(cls, row: int, col: int, action: int) -> Tuple[int, float, bool]:
        if action == 0:
            row -= 1
        elif action == 1:
            col += 1
        elif action == 2:
            row += 1
        else:
            col -= 1
        row = min(max(row, 0), cls.ROWS - 1)
        col = min(max(col, 0), cls.COLS - 1)

        if row == cls.ROWS - 1 and 0 < col < cls.COLS - 1:
            return cls._encode(*cls.START), -100.0, False

        return cls._encode(row, col), -1.0, (row, col) == cls.GOAL

    def actions(self) -> Iterator[Hashable]:
        return iter(range(4))

    def states(self) -> Iterator[Hashable]:
        return iter(range(self.ROWS * self.COLS))

    def current_state(self) -> Hashable:
        return self.state

    def step(self, action: Hashable, rng: np.random.Generator) -> Transition:
        if action not in (0, 1, 2, 3):
            raise ValueError(f"action must be in [0, 1, 2, 3], got {action!r}")
        s = self.state
        self.state = int(self.transitions[s, action])
        return float(self.rewards[s, action]), self.state, bool(self.terminal[s, action])

    def reset(self, rng: np.random.Generator) -> Hashable:
        self.state = self._encode(*self.START)
        return self.state
