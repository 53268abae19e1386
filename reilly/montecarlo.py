"""Monte Carlo state-action value estimation.

Q-tables are learned from complete episodes. During an episode the
value function only records ``(state, action, reward)`` triples; on the
terminal transition it walks the trajectory backwards accumulating the
discounted return ``G = gamma * G + r_t`` and moves ``Q(s_t, a_t)``
towards ``G`` by an incremental average (Sutton & Barto, 2018, Ch. 5):

    N(s_t, a_t) += 1
    Q(s_t, a_t) += (G - Q(s_t, a_t)) / N(s_t, a_t)

``FirstVisit`` credits only the earliest occurrence of a pair within an
episode, ``EveryVisit`` credits all of them. ``N`` accumulates across
episodes and is cleared, together with ``Q``, only by ``reset()``.
"""

from __future__ import annotations

from abc import abstractmethod
from collections.abc import Hashable, Iterable, Iterator
from typing import Any, Optional

import numpy as np

from .agents import Agent
from .utils import check_unit_interval, index_of, to_jsonable
from .values import StateActionValue


class _MonteCarloValue(StateActionValue):
    """Tabular Q-function learned from whole-episode returns.

    Args:
        actions: Action space, in table column order.
        states: State space, in table row order.
        gamma: Discount factor in [0, 1).
        start_state: State restored by ``reset()``. Defaults to the first
            listed state, which need not be the environment's start (for
            ``CliffWalking`` it is 0, not 36). Pass
            ``env.current_state()`` when the value function is used outside
            a session; sessions always call ``start_episode`` first.
    """

    def __init__(
        self,
        actions: Iterable[Hashable],
        states: Iterable[Hashable],
        gamma: float,
        start_state: Optional[Hashable] = None,
    ):
        self._actions = list(actions)
        self._states = list(states)
        if not self._actions:
            raise ValueError("actions must be non-empty")
        if not self._states:
            raise ValueError("states must be non-empty")

        self._action_index = index_of(self._actions)
        self._state_index = index_of(self._states)
        self.gamma = check_unit_interval("gamma", gamma)

        if start_state is None:
            start_state = self._states[0]
        elif start_state not in self._state_index:
            raise ValueError(f"start_state {start_state!r} is not in the state space")
        self.start_state = start_state

        shape = (len(self._states), len(self._actions))
        self.q = np.zeros(shape, dtype=np.float64)
        self.n = np.zeros(shape, dtype=np.int64)
        self.state = start_state
        self.trajectory: list[tuple[int, int, float]] = []

    def _indices(self, state: Hashable, action: Hashable) -> tuple[int, int]:
        try:
            s = self._state_index[state]
        except KeyError:
            raise KeyError(f"Unknown state {state!r}") from None
        try:
            a = self._action_index[action]
        except KeyError:
            raise KeyError(f"Unknown action {action!r}") from None
        return s, a

    def actions(self) -> Iterator[Hashable]:
        return iter(self._actions)

    def states(self) -> Iterator[Hashable]:
        return iter(self._states)

    def value(
        self,
        state: Hashable,
        action: Hashable,
        rng: Optional[np.random.Generator] = None,
    ) -> float:
        return float(self.q[self._indices(state, action)])

    def visits(self, state: Hashable, action: Hashable) -> int:
        """Number of returns credited to ``(state, action)`` since ``reset()``."""
        return int(self.n[self._indices(state, action)])

    def update(
        self,
        action: Hashable,
        reward: float,
        next_state: Hashable,
        is_done: bool,
    ) -> None:
        s, a = self._indices(self.state, action)
        if next_state not in self._state_index:
            raise KeyError(f"Unknown state {next_state!r}")

        self.trajectory.append((s, a, float(reward)))
        self.state = next_state

        if is_done:
            self._backup()
            self.trajectory.clear()

    @abstractmethod
    def _backup(self) -> None:
        raise NotImplementedError

    def _credit(self, s: int, a: int, g: float) -> None:
        self.n[s, a] += 1
        self.q[s, a] += (g - self.q[s, a]) / self.n[s, a]

    def start_episode(self, state: Hashable) -> None:
        if state not in self._state_index:
            raise KeyError(f"Unknown state {state!r}")
        self.state = state
        self.trajectory.clear()

    def reset(self) -> None:
        self.state = self.start_state
        self.trajectory.clear()
        self.n.fill(0)
        self.q.fill(0.0)

    def snapshot(self) -> dict[str, Any]:
        data = super().snapshot()
        data.update(
            gamma=self.gamma,
            states=[to_jsonable(s) for s in self._states],
            actions=[to_jsonable(a) for a in self._actions],
            q=self.q.tolist(),
            n=self.n.tolist(),
        )
        return data

    def __str__(self) -> str:
        return f"{type(self).__name__}(γ={self.gamma})"


class FirstVisit(_MonteCarloValue):
    """Monte Carlo Q-function with first-visit backups.

    Examples:
        >>> q = FirstVisit(actions=[0, 1], states=[0, 1], gamma=0.5)
        >>> q.start_episode(0)
        >>> q.update(1, 1.0, 1, False)
        >>> q.update(0, 2.0, 1, True)
        >>> q.value(0, 1), q.value(1, 0)
        (2.0, 2.0)
    """

    def _backup(self) -> None:
        first_visit: dict[tuple[int, int], int] = {}
        for t, (s, a, _) in enumerate(self.trajectory):
            first_visit.setdefault((s, a), t)

        g = 0.0
        for t in range(len(self.trajectory) - 1, -1, -1):
            s, a, r = self.trajectory[t]
            g = self.gamma * g + r
            if first_visit[(s, a)] == t:
                self._credit(s, a, g)


class EveryVisit(_MonteCarloValue):
    """Monte Carlo Q-function with every-visit backups."""

    def _backup(self) -> None:
        g = 0.0
        for s, a, r in reversed(self.trajectory):
            g = self.gamma * g + r
            self._credit(s, a, g)


class MonteCarlo(Agent):
    """Monte Carlo control agent.

    Examples:
        >>> from reilly.policies import EpsilonGreedy
        >>> agent = MonteCarlo(FirstVisit([0, 1], [0, 1, 2], 0.9), EpsilonGreedy(0.1))
        >>> str(agent)
        'EpsilonGreedy(ε=0.1)-FirstVisit(γ=0.9)-MonteCarlo'
    """
