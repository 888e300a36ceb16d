"""
Tests for model/agent.py

Agent state codes, the transition function and entry actions.
"""

import pytest

from physarum_transport.config import AgentConfig
from physarum_transport.model.agent import Agent, AgentState, transition


@pytest.fixture
def cfg():
    return AgentConfig()


class TestAgentState:
    """Tests for AgentState."""

    def test_codes(self):
        assert AgentState.SEEK_PICKUP == 0
        assert AgentState.LOADING == 1
        assert AgentState.SEEK_DELIVERY == 2
        assert AgentState.UNLOADING == 3

    def test_labels(self):
        assert AgentState.SEEK_DELIVERY.label == "seek_delivery"


class TestTransition:
    """Tests for transition()."""

    def test_pickup_above_threshold(self, cfg):
        assert transition(AgentState.SEEK_PICKUP, 0, 2.6, 0.0, cfg) is AgentState.LOADING

    def test_pickup_at_threshold_stays(self, cfg):
        assert transition(AgentState.SEEK_PICKUP, 0, 2.5, 9.0, cfg) is AgentState.SEEK_PICKUP

    def test_loading_waits_for_timer(self, cfg):
        assert transition(AgentState.LOADING, 3, 9.0, 9.0, cfg) is AgentState.LOADING
        assert transition(AgentState.LOADING, 0, 9.0, 9.0, cfg) is AgentState.SEEK_DELIVERY

    def test_delivery_above_threshold(self, cfg):
        assert transition(AgentState.SEEK_DELIVERY, 0, 9.0, 2.4, cfg) is AgentState.SEEK_DELIVERY
        assert transition(AgentState.SEEK_DELIVERY, 0, 0.0, 3.0, cfg) is AgentState.UNLOADING

    def test_unloading_waits_for_timer(self, cfg):
        assert transition(AgentState.UNLOADING, 1, 0.0, 0.0, cfg) is AgentState.UNLOADING
        assert transition(AgentState.UNLOADING, 0, 0.0, 0.0, cfg) is AgentState.SEEK_PICKUP


class TestAgent:
    """Tests for Agent."""

    def test_initial_state(self):
        agent = Agent(x=1.0, y=2.0, heading=0.3, speed=0.5)
        assert agent.state is AgentState.SEEK_PICKUP
        assert agent.timer == 0
        assert agent.position == (1.0, 2.0)
        assert len(agent.history) == 0
        assert not agent.is_dwelling()

    def test_enter_loading_clears_history(self, make_agent):
        agent = make_agent(5.0, 5.0)
        agent.history.extend([(1.0, 1.0), (2.0, 2.0)])
        agent.enter(AgentState.LOADING, 50)
        assert agent.state is AgentState.LOADING
        assert agent.timer == 50
        assert len(agent.history) == 0
        assert agent.is_dwelling()

    def test_enter_unloading_keeps_history(self, make_agent):
        agent = make_agent(5.0, 5.0)
        agent.history.append((1.0, 1.0))
        agent.enter(AgentState.UNLOADING, 50)
        assert agent.timer == 50
        assert list(agent.history) == [(1.0, 1.0)]

    def test_enter_seek_state_leaves_timer(self, make_agent):
        agent = make_agent(5.0, 5.0)
        agent.enter(AgentState.SEEK_DELIVERY, 50)
        assert agent.timer == 0

    def test_records_only_while_seeking_delivery(self, make_agent):
        agent = make_agent(5.0, 5.0)
        agent.record_position()
        assert len(agent.history) == 0
        agent.state = AgentState.SEEK_DELIVERY
        agent.record_position()
        assert list(agent.history) == [(5.0, 5.0)]

    def test_history_evicts_oldest(self, make_agent):
        agent = make_agent(0.0, 0.0, history_cap=3)
        agent.state = AgentState.SEEK_DELIVERY
        for i in range(5):
            agent.x = float(i)
            agent.record_position()
        assert [p[0] for p in agent.history] == [2.0, 3.0, 4.0]
