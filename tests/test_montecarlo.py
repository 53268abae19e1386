"""Tests for Monte Carlo value functions."""

import numpy as np
import pytest

from reilly.montecarlo import EveryVisit, FirstVisit, MonteCarlo
from reilly.policies import EpsilonGreedy, Greedy


def run_episode(value, start, steps):
    """Feed ``(action, reward, next_state)`` steps; the last one is terminal."""
    value.start_episode(start)
    for i, (action, reward, next_state) in enumerate(steps):
        value.update(action, reward, next_state, i == len(steps) - 1)


# (s0, a0) occurs twice: at t=0 and t=2.
REPEATED = [(0, 1.0, 1), (0, 2.0, 0), (0, 3.0, 1)]


class TestBackups:
    """Tests for first-visit and every-visit backups."""

    def test_first_visit_credits_once(self):
        q = FirstVisit(actions=[0, 1], states=[0, 1], gamma=0.5)
        run_episode(q, 0, REPEATED)
        assert q.visits(0, 0) == 1
        assert q.visits(1, 0) == 1

    def test_every_visit_credits_each_occurrence(self):
        q = EveryVisit(actions=[0, 1], states=[0, 1], gamma=0.5)
        run_episode(q, 0, REPEATED)
        assert q.visits(0, 0) == 2
        assert q.visits(1, 0) == 1

    def test_first_visit_returns(self):
        q = FirstVisit(actions=[0, 1], states=[0, 1], gamma=0.5)
        run_episode(q, 0, REPEATED)
        # G2 = 3, G1 = 2 + 0.5 * 3, G0 = 1 + 0.5 * G1
        assert q.value(1, 0) == pytest.approx(3.5)
        assert q.value(0, 0) == pytest.approx(2.75)

    def test_every_visit_returns(self):
        q = EveryVisit(actions=[0, 1], states=[0, 1], gamma=0.5)
        run_episode(q, 0, REPEATED)
        # Average of G2 = 3 and G0 = 2.75.
        assert q.value(0, 0) == pytest.approx(2.875)
        assert q.value(1, 0) == pytest.approx(3.5)

    def test_undiscounted_return(self):
        q = EveryVisit(actions=["a"], states=["x", "y", "z"], gamma=0.0)
        run_episode(q, "x", [("a", 1.0, "y"), ("a", 1.0, "z")])
        assert q.value("x", "a") == pytest.approx(1.0)
        assert q.value("y", "a") == pytest.approx(1.0)

    def test_incremental_average_over_episodes(self):
        q = FirstVisit(actions=[0], states=[0, 1], gamma=0.9)
        run_episode(q, 0, [(0, 1.0, 1)])
        run_episode(q, 0, [(0, 3.0, 1)])
        assert q.visits(0, 0) == 2
        assert q.value(0, 0) == pytest.approx(2.0)

    def test_nothing_learned_before_terminal(self):
        q = EveryVisit(actions=[0, 1], states=[0, 1], gamma=0.9)
        q.start_episode(0)
        q.update(1, 5.0, 1, False)
        assert q.value(0, 1) == 0.0
        assert len(q.trajectory) == 1
        q.update(0, 0.0, 0, True)
        assert q.trajectory == []
        assert q.value(0, 1) == pytest.approx(5.0)

    def test_start_episode_discards_partial_trajectory(self):
        q = EveryVisit(actions=[0, 1], states=[0, 1], gamma=0.9)
        q.start_episode(0)
        q.update(1, 5.0, 1, False)
        q.start_episode(0)
        q.update(0, 1.0, 0, True)
        assert q.visits(0, 1) == 0
        assert q.visits(0, 0) == 1


class TestTable:
    """Tests for table bookkeeping and validation."""

    def test_reset_clears_table(self):
        q = FirstVisit(actions=[0, 1], states=[0, 1], gamma=0.5, start_state=1)
        run_episode(q, 0, REPEATED)
        q.reset()
        assert np.all(q.q == 0.0)
        assert np.all(q.n == 0)
        assert q.state == 1
        assert q.trajectory == []

    def test_start_state_from_environment(self, rng):
        from reilly.envs import CliffWalking

        env = CliffWalking()
        q = EveryVisit(env.actions(), env.states(), 0.9, start_state=env.current_state())
        assert q.state == 36
        q.start_episode(env.reset(rng))
        q.update(0, -1.0, 24, True)
        q.reset()
        assert q.state == 36
        assert FirstVisit(env.actions(), env.states(), 0.9).state == 0

    def test_unknown_action(self):
        q = FirstVisit(actions=[0, 1], states=[0, 1], gamma=0.5)
        with pytest.raises(KeyError, match="Unknown action"):
            q.value(0, 7)
        with pytest.raises(KeyError, match="Unknown action"):
            q.update(7, 1.0, 0, False)

    def test_unknown_state(self):
        q = FirstVisit(actions=[0, 1], states=[0, 1], gamma=0.5)
        with pytest.raises(KeyError, match="Unknown state"):
            q.value(9, 0)
        with pytest.raises(KeyError, match="Unknown state"):
            q.update(0, 1.0, 9, False)
        with pytest.raises(KeyError, match="Unknown state"):
            q.start_episode(9)
        assert q.trajectory == []

    @pytest.mark.parametrize("gamma", [-0.1, 1.0, 1.5])
    def test_invalid_gamma(self, gamma):
        with pytest.raises(ValueError, match="gamma"):
            FirstVisit(actions=[0], states=[0], gamma=gamma)

    def test_empty_spaces(self):
        with pytest.raises(ValueError, match="actions"):
            EveryVisit(actions=[], states=[0], gamma=0.5)
        with pytest.raises(ValueError, match="states"):
            EveryVisit(actions=[0], states=[], gamma=0.5)

    def test_duplicate_states(self):
        with pytest.raises(ValueError, match="unique"):
            EveryVisit(actions=[0], states=[0, 0], gamma=0.5)

    def test_invalid_start_state(self):
        with pytest.raises(ValueError, match="start_state"):
            FirstVisit(actions=[0], states=[0, 1], gamma=0.5, start_state=3)

    def test_snapshot(self):
        q = FirstVisit(actions=[0, 1], states=[(0, 0), (0, 1)], gamma=0.5)
        q.start_episode((0, 0))
        q.update(1, 2.0, (0, 1), True)
        snapshot = q.snapshot()
        assert snapshot["type"] == "FirstVisit"
        assert snapshot["label"] == "FirstVisit(γ=0.5)"
        assert snapshot["states"] == [[0, 0], [0, 1]]
        assert snapshot["q"] == [[0.0, 2.0], [0.0, 0.0]]
        assert snapshot["n"] == [[0, 1], [0, 0]]


class TestMonteCarloAgent:
    """Tests for the Monte Carlo agent."""

    def test_label(self):
        agent = MonteCarlo(EveryVisit([0, 1], [0, 1], 0.9), Greedy())
        assert str(agent) == "Greedy-EveryVisit(γ=0.9)-MonteCarlo"

    def test_learns_chain(self, rng):
        from reilly.envs import ChainMDP

        env = ChainMDP(n_states=4)
        agent = MonteCarlo(FirstVisit(env.actions(), env.states(), 0.9), EpsilonGreedy(0.2))
        for _ in range(200):
            state = env.reset(rng)
            agent.start_episode(state)
            done = False
            steps = 0
            while not done and steps < 100:
                action = agent.act(state, rng)
                reward, state, done = env.step(action, rng)
                steps += 1
                agent.update(action, reward, state, done or steps >= 100)

        for s in range(3):
            assert agent.value.value(s, 1) > agent.value.value(s, 0)
