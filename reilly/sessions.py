"""Agent-environment experiment sessions.

``TrainTest`` repeats a train-then-test cycle ``repeat`` times. Each fold
starts from a freshly reset agent, trains it for ``train`` episodes and
then records the cumulative reward of ``test`` episodes without learning.

Results are returned as a ``pandas.DataFrame`` with one row per test
episode and columns ``environment, agent, fold, test, reward``.

``TrainTest.par_call`` runs many independent (agent, environment) pairs on
a worker pool. One 64-bit sub-seed is drawn per pair, in pair order,
before any task starts, so every pair's rows are reproducible from the
top-level generator alone. The order of different pairs' rows in the
merged table is not specified.
"""

from __future__ import annotations

import concurrent.futures
import dataclasses
from abc import ABC, abstractmethod
from collections.abc import Iterable
from dataclasses import dataclass
from typing import Any, Optional, Tuple

import numpy as np
import pandas as pd

from .agents import Agent
from .config import default_max_workers, is_debug_enabled
from .envs import Env
from .logging import get_logger
from .utils import spawn_seeds

logger = get_logger(__name__)

COLUMNS = ["environment", "agent", "fold", "test", "reward"]


def check_compatible(agent: Agent, env: Env) -> None:
    """Check that ``agent`` and ``env`` share action and state spaces.

    Raises:
        ValueError: If the action sets or the state sets differ.
    """
    agent_actions, env_actions = set(agent.actions()), set(env.actions())
    if agent_actions != env_actions:
        raise ValueError(
            f"Agent and environment have different action spaces: "
            f"{sorted(map(repr, agent_actions))} != {sorted(map(repr, env_actions))}"
        )
    agent_states, env_states = set(agent.states()), set(env.states())
    if agent_states != env_states:
        raise ValueError(
            f"Agent and environment have different state spaces "
            f"({len(agent_states)} vs {len(env_states)} states)"
        )


def check_exclusive(pairs: list[Tuple[Agent, Env]]) -> None:
    """Check that no agent or environment object appears in two pairs.

    Raises:
        ValueError: If an agent or an environment is shared between pairs.
    """
    seen_agents: dict[int, int] = {}
    seen_envs: dict[int, int] = {}
    for i, (agent, env) in enumerate(pairs):
        for kind, obj, seen in (("agent", agent, seen_agents), ("environment", env, seen_envs)):
            first = seen.setdefault(id(obj), i)
            if first != i:
                raise ValueError(
                    f"Pairs {first} and {i} share the same {kind} object; "
                    f"every pair needs its own {kind}"
                )


def _as_count(name: str, value: Any, minimum: int) -> int:
    if isinstance(value, bool) or not isinstance(value, (int, np.integer)):
        raise ValueError(f"{name} must be an integer, got {value!r}")
    if value < minimum:
        raise ValueError(f"{name} must be >= {minimum}, got {value}")
    return int(value)


class Session(ABC):
    """Base class for experiment sessions."""

    @property
    @abstractmethod
    def total_episodes(self) -> int:
        """Number of training episodes the session will run."""
        raise NotImplementedError

    @abstractmethod
    def call(
        self,
        agent: Agent,
        env: Env,
        rng: np.random.Generator,
    ) -> pd.DataFrame:
        """Run the session on one agent-environment pair."""
        raise NotImplementedError


@dataclass(frozen=True)
class TrainTest(Session):
    """Train-test session.

    Attributes:
        train: Training episodes per fold.
        test: Test episodes per fold.
        repeat: Number of folds.
        steps_max: Optional cap on the number of steps of every episode.

    Example:
        >>> session = TrainTest(train=10, test=3, repeat=2, steps_max=50)
        >>> session.total_episodes
        20
    """

    train: int
    test: int
    repeat: int
    steps_max: Optional[int] = None

    def __post_init__(self) -> None:
        # Frozen: store plain ints so the config stays JSON serializable.
        for name in ("train", "test", "repeat"):
            object.__setattr__(self, name, _as_count(name, getattr(self, name), 0))
        if self.steps_max is not None:
            object.__setattr__(self, "steps_max", _as_count("steps_max", self.steps_max, 1))

    @property
    def total_episodes(self) -> int:
        return self.repeat * self.train

    def with_steps_max(self, steps_max: Optional[int]) -> "TrainTest":
        """Return a copy with a different step cap."""
        return dataclasses.replace(self, steps_max=steps_max)

    def _capped(self, steps: int) -> bool:
        return self.steps_max is not None and steps >= self.steps_max

    def _train_episode(self, agent: Agent, env: Env, rng: np.random.Generator) -> None:
        state = env.reset(rng)
        agent.start_episode(state)
        steps = 1
        is_done = False
        while not is_done:
            action = agent.act(state, rng)
            reward, state, is_done = env.step(action, rng)
            is_done = is_done or self._capped(steps)
            agent.update(action, reward, state, is_done)
            steps += 1

    def _test_episode(self, agent: Agent, env: Env, rng: np.random.Generator) -> float:
        state = env.reset(rng)
        agent.start_episode(state)
        cum_reward = 0.0
        steps = 1
        is_done = False
        while not is_done:
            action = agent.act(state, rng)
            reward, state, is_done = env.step(action, rng)
            cum_reward += reward
            is_done = is_done or self._capped(steps)
            steps += 1
        return float(cum_reward)

    def call(
        self,
        agent: Agent,
        env: Env,
        rng: np.random.Generator,
    ) -> pd.DataFrame:
        """Run every fold sequentially on one agent-environment pair.

        Args:
            agent: Agent to train and test; reset at the start of each fold.
            env: Environment.
            rng: Random generator driving the agent and the environment.

        Returns:
            DataFrame with columns environment, agent, fold, test, reward,
            ordered by fold then test episode.

        Raises:
            ValueError: If the agent and environment spaces differ.
        """
        check_compatible(agent, env)

        env_label, agent_label = str(env), str(agent)
        folds: list[int] = []
        tests: list[int] = []
        rewards: list[float] = []

        logger.info(
            "Running %s on %s: %d folds x (%d train + %d test)",
            agent_label, env_label, self.repeat, self.train, self.test,
        )

        for fold in range(self.repeat):
            agent.reset()
            for _ in range(self.train):
                self._train_episode(agent, env, rng)
            for test in range(self.test):
                cum_reward = self._test_episode(agent, env, rng)
                if is_debug_enabled():
                    logger.debug("fold %d test %d reward %s", fold, test, cum_reward)
                folds.append(fold)
                tests.append(test)
                rewards.append(cum_reward)
            logger.debug("Fold %d/%d done", fold + 1, self.repeat)

        n_rows = len(rewards)
        return pd.DataFrame(
            {
                "environment": pd.Series([env_label] * n_rows, dtype=object),
                "agent": pd.Series([agent_label] * n_rows, dtype=object),
                "fold": pd.Series(folds, dtype=np.int64),
                "test": pd.Series(tests, dtype=np.int64),
                "reward": pd.Series(rewards, dtype=np.float64),
            },
            columns=COLUMNS,
        )

    def par_call(
        self,
        pairs: Iterable[Tuple[Agent, Env]],
        rng: np.random.Generator,
        max_workers: Optional[int] = None,
        use_processes: bool = True,
    ) -> pd.DataFrame:
        """Run ``call`` on many independent pairs in parallel.

        Args:
            pairs: (agent, environment) pairs; each is used by one task only.
            rng: Top-level generator; advanced by one draw per pair.
            max_workers: Pool size. Defaults to REILLY_MAX_WORKERS, then to
                the concurrent.futures default.
            use_processes: Use a process pool (default) or a thread pool.
                With processes, the pairs are copied into the workers and
                the caller's objects are left untouched.

        Returns:
            Concatenation of every pair's result table. Rows of one pair
            keep their fold/test order; the order across pairs is
            unspecified.

        Raises:
            ValueError: If a pair is incompatible or shares its agent or
                environment with another pair. Nothing runs in that case.
            Exception: The first failure of any task; no partial result is
                returned.
        """
        pairs = list(pairs)
        for agent, env in pairs:
            check_compatible(agent, env)
        check_exclusive(pairs)

        seeds = spawn_seeds(rng, len(pairs))
        logger.debug("Sub-seeds for %d pairs: %s", len(pairs), seeds)

        if not pairs:
            return pd.DataFrame(columns=COLUMNS)

        if max_workers is None:
            max_workers = default_max_workers()

        pool_cls = (
            concurrent.futures.ProcessPoolExecutor
            if use_processes
            else concurrent.futures.ThreadPoolExecutor
        )
        frames = []
        with pool_cls(max_workers=max_workers) as pool:
            futures = [
                pool.submit(_run_pair, self, agent, env, seed)
                for (agent, env), seed in zip(pairs, seeds)
            ]
            try:
                for future in concurrent.futures.as_completed(futures):
                    frames.append(future.result())
            except BaseException:
                for future in futures:
                    future.cancel()
                raise

        return pd.concat(frames, ignore_index=True)

    def to_dict(self) -> dict[str, Any]:
        return dataclasses.asdict(self)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "TrainTest":
        known = {f.name for f in dataclasses.fields(cls)}
        unknown = set(data) - known
        if unknown:
            raise ValueError(f"Unknown TrainTest fields: {sorted(unknown)}")
        return cls(**data)


def _run_pair(session: TrainTest, agent: Agent, env: Env, seed: int) -> pd.DataFrame:
    return session.call(agent, env, np.random.default_rng(seed))
