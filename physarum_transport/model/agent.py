"""Transport agent and its pickup/delivery state machine."""

from collections import deque
from enum import IntEnum
from typing import Deque, Tuple

from ..config import AgentConfig


class AgentState(IntEnum):
    """Possible states for an agent; values are the snapshot state codes."""
    SEEK_PICKUP = 0
    LOADING = 1
    SEEK_DELIVERY = 2
    UNLOADING = 3

    @property
    def label(self) -> str:
        return self.name.lower()


DWELL_STATES = (AgentState.LOADING, AgentState.UNLOADING)


def transition(state: AgentState, timer: int,
               pickup_here: float, delivery_here: float,
               config: AgentConfig) -> AgentState:
    """
    Next state given the field values under the agent.

    SEEK_PICKUP   -> LOADING        when pickup potential exceeds its threshold
    LOADING       -> SEEK_DELIVERY  when the dwell timer has run out
    SEEK_DELIVERY -> UNLOADING      when delivery potential exceeds its threshold
    UNLOADING     -> SEEK_PICKUP    when the dwell timer has run out
    """
    if state is AgentState.SEEK_PICKUP:
        if pickup_here > config.pickup_threshold:
            return AgentState.LOADING
    elif state is AgentState.LOADING:
        if timer == 0:
            return AgentState.SEEK_DELIVERY
    elif state is AgentState.SEEK_DELIVERY:
        if delivery_here > config.delivery_threshold:
            return AgentState.UNLOADING
    elif state is AgentState.UNLOADING:
        if timer == 0:
            return AgentState.SEEK_PICKUP
    return state


class Agent:
    """
    A point particle shuttling between the pickup and delivery zones.

    Position is continuous; the containing cell is found by flooring.
    The path history is only filled while seeking the delivery zone and
    keeps the most recent ``history_cap`` positions.
    """

    def __init__(self, x: float, y: float, heading: float, speed: float,
                 history_cap: int = 300):
        self.x = x
        self.y = y
        self.heading = heading
        self.speed = speed
        self.state = AgentState.SEEK_PICKUP
        self.timer = 0
        self.history: Deque[Tuple[float, float]] = deque(maxlen=history_cap)

    @property
    def position(self) -> Tuple[float, float]:
        return (self.x, self.y)

    def is_dwelling(self) -> bool:
        return self.timer > 0

    def enter(self, state: AgentState, dwell_ticks: int) -> None:
        """Switch state and run its entry actions."""
        if state is AgentState.LOADING:
            self.history.clear()
        if state in DWELL_STATES:
            self.timer = dwell_ticks
        self.state = state

    def record_position(self) -> None:
        if self.state is AgentState.SEEK_DELIVERY:
            self.history.append((self.x, self.y))

    def __repr__(self) -> str:
        return (f"Agent(pos=({self.x:.2f}, {self.y:.2f}), "
                f"state={self.state.label}, timer={self.timer})")
