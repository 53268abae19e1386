"""Agent interface.

An agent owns exactly one value function and one policy. Updates and
resets always reach the value function before the policy.
"""

from collections.abc import Hashable, Iterator
from typing import Any

import numpy as np

from .policies import Policy
from .values import StateActionValue


class Agent:
    """Composition of a state-action value function and a policy.

    Args:
        value: Value function, owned by the agent.
        policy: Action selection policy, owned by the agent.
    """

    def __init__(self, value: StateActionValue, policy: Policy):
        if not isinstance(value, StateActionValue):
            raise TypeError(
                f"value must be a StateActionValue, got {type(value).__name__}"
            )
        if not isinstance(policy, Policy):
            raise TypeError(f"policy must be a Policy, got {type(policy).__name__}")
        self.value = value
        self.policy = policy

    def actions(self) -> Iterator[Hashable]:
        """Iterate over the action space."""
        return self.value.actions()

    def states(self) -> Iterator[Hashable]:
        """Iterate over the state space."""
        return self.value.states()

    def act(self, state: Hashable, rng: np.random.Generator) -> Hashable:
        """Select an action for ``state``."""
        return self.policy.select(self.value, state, rng)

    def update(
        self,
        action: Hashable,
        reward: float,
        next_state: Hashable,
        is_done: bool,
    ) -> None:
        """Learn from one transition."""
        self.value.update(action, reward, next_state, is_done)
        self.policy.update(is_done)

    def start_episode(self, state: Hashable) -> None:
        """Begin a new episode from ``state`` without forgetting anything."""
        self.value.start_episode(state)

    def reset(self) -> None:
        """Forget everything learned and restore the initial policy."""
        self.value.reset()
        self.policy.reset()

    def snapshot(self) -> dict[str, Any]:
        return {
            "type": type(self).__name__,
            "label": str(self),
            "value": self.value.snapshot(),
            "policy": self.policy.snapshot(),
        }

    def __str__(self) -> str:
        return f"{self.policy}-{self.value}-{type(self).__name__}"
