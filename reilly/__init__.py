"""reilly - a REInforcement Learning LibrarY.

Generic agents, policies, value functions and environments, bandit and
Monte Carlo algorithms, and a train/test session runner with
reproducible parallel execution. All randomness flows from explicitly
passed ``numpy.random.Generator`` instances.
"""

__version__ = "0.1.0"

from .agents import Agent
from .bandits import (
    Arm,
    Arms,
    ArmsAlgorithm,
    Bernoulli,
    MultiArmedBandit,
    Normal,
    SampleAverage,
)
from .config import debug_context, is_debug_enabled, set_debug_enabled
from .envs import BernoulliReward, ChainMDP, CliffWalking, Env, FarWest, NormalReward
from .io import (
    results_from_csv,
    results_to_csv,
    session_from_json,
    session_to_json,
    snapshot_to_json,
)
from .logging import configure_logging, get_logger, set_log_level
from .montecarlo import EveryVisit, FirstVisit, MonteCarlo
from .policies import EpsilonDecayGreedy, EpsilonGreedy, Greedy, Policy, Random
from .sessions import Session, TrainTest
from .utils import seed_rng, spawn_seeds
from .values import ActionValue, ActionValueAdapter, StateActionValue

__all__ = [
    # Value functions
    "ActionValue",
    "StateActionValue",
    "ActionValueAdapter",
    # Bandits
    "Arm",
    "Bernoulli",
    "Normal",
    "SampleAverage",
    "Arms",
    "ArmsAlgorithm",
    "MultiArmedBandit",
    # Monte Carlo
    "FirstVisit",
    "EveryVisit",
    "MonteCarlo",
    # Policies
    "Policy",
    "Greedy",
    "Random",
    "EpsilonGreedy",
    "EpsilonDecayGreedy",
    # Agents
    "Agent",
    # Environments
    "Env",
    "FarWest",
    "ChainMDP",
    "CliffWalking",
    "NormalReward",
    "BernoulliReward",
    # Sessions
    "Session",
    "TrainTest",
    # IO
    "results_to_csv",
    "results_from_csv",
    "snapshot_to_json",
    "session_to_json",
    "session_from_json",
    # Utilities
    "seed_rng",
    "spawn_seeds",
    "get_logger",
    "set_log_level",
    "configure_logging",
    "is_debug_enabled",
    "set_debug_enabled",
    "debug_context",
]
