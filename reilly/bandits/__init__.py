"""Multi-armed bandits: arms, arm collections and the bandit agent."""

from .arms import Arm, Bernoulli, Normal, SampleAverage
from .mab import Arms, ArmsAlgorithm, MultiArmedBandit

__all__ = [
    "Arm",
    "Bernoulli",
    "Normal",
    "SampleAverage",
    "Arms",
    "ArmsAlgorithm",
    "MultiArmedBandit",
]
