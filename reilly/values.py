"""Value function interfaces.

Two families of value functions are supported:

- ``ActionValue``: context-free estimates ``V(a)``, e.g. bandit arms.
- ``StateActionValue``: estimates ``Q(s, a)``, e.g. Monte Carlo tables.

Policies only ever talk to a ``StateActionValue``. An ``ActionValue`` is
lifted to one through ``ActionValueAdapter``, which exposes the single unit
state ``()``.
"""

from abc import ABC, abstractmethod
from collections.abc import Hashable, Iterator
from typing import Any, Optional

import numpy as np

UNIT_STATE: tuple = ()


class ActionValue(ABC):
    """Base class for action-value functions ``V(a)``."""

    @abstractmethod
    def actions(self) -> Iterator[Hashable]:
        """Iterate over the action space."""
        raise NotImplementedError

    @abstractmethod
    def value(self, action: Hashable, rng: np.random.Generator) -> float:
        """Expected (or sampled) reward of ``action``.

        Args:
            action: Action to evaluate.
            rng: Random generator, used by sampling algorithms.

        Returns:
            Score of the action.
        """
        raise NotImplementedError

    @abstractmethod
    def update(self, action: Hashable, reward: float, is_done: bool = False) -> None:
        """Update the estimate of ``action`` with an observed reward."""
        raise NotImplementedError

    @abstractmethod
    def reset(self) -> None:
        """Forget everything learned so far."""
        raise NotImplementedError

    def snapshot(self) -> dict[str, Any]:
        """JSON-compatible description of the current estimates."""
        return {"type": type(self).__name__, "label": str(self)}


class StateActionValue(ABC):
    """Base class for state-action value functions ``Q(s, a)``."""

    @abstractmethod
    def actions(self) -> Iterator[Hashable]:
        """Iterate over the action space."""
        raise NotImplementedError

    @abstractmethod
    def states(self) -> Iterator[Hashable]:
        """Iterate over the state space."""
        raise NotImplementedError

    @abstractmethod
    def value(
        self,
        state: Hashable,
        action: Hashable,
        rng: Optional[np.random.Generator] = None,
    ) -> float:
        """Estimated return of taking ``action`` in ``state``."""
        raise NotImplementedError

    @abstractmethod
    def update(
        self,
        action: Hashable,
        reward: float,
        next_state: Hashable,
        is_done: bool,
    ) -> None:
        """Record one transition.

        Args:
            action: Action performed from the current state.
            reward: Reward obtained.
            next_state: State reached.
            is_done: End-of-episode flag.
        """
        raise NotImplementedError

    @abstractmethod
    def start_episode(self, state: Hashable) -> None:
        """Mark an episode boundary starting from ``state``.

        Learned estimates are kept.
        """
        raise NotImplementedError

    @abstractmethod
    def reset(self) -> None:
        """Forget everything learned so far."""
        raise NotImplementedError

    def snapshot(self) -> dict[str, Any]:
        """JSON-compatible description of the current estimates."""
        return {"type": type(self).__name__, "label": str(self)}


class ActionValueAdapter(StateActionValue):
    """Expose an ``ActionValue`` as a ``StateActionValue`` over the unit state.

    The state argument is ignored everywhere and the state space is ``{()}``.

    Args:
        inner: Wrapped action-value function.

    Examples:
        >>> from reilly.bandits import Arms, Bernoulli
        >>> adapter = ActionValueAdapter(Arms({0: Bernoulli(), 1: Bernoulli()}))
        >>> list(adapter.states())
        [()]
    """

    def __init__(self, inner: ActionValue):
        if not isinstance(inner, ActionValue):
            raise TypeError(
                f"inner must be an ActionValue, got {type(inner).__name__}"
            )
        self.inner = inner

    def actions(self) -> Iterator[Hashable]:
        return self.inner.actions()

    def states(self) -> Iterator[Hashable]:
        return iter([UNIT_STATE])

    def value(
        self,
        state: Hashable,
        action: Hashable,
        rng: Optional[np.random.Generator] = None,
    ) -> float:
        return self.inner.value(action, rng)

    def update(
        self,
        action: Hashable,
        reward: float,
        next_state: Hashable,
        is_done: bool,
    ) -> None:
        self.inner.update(action, reward, is_done)

    def start_episode(self, state: Hashable) -> None:
        pass

    def reset(self) -> None:
        self.inner.reset()

    def snapshot(self) -> dict[str, Any]:
        return self.inner.snapshot()

    def __str__(self) -> str:
        return str(self.inner)

    def __repr__(self) -> str:
        return f"ActionValueAdapter({self.inner!r})"
