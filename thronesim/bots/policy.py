"""
Agent Policy - Interface for decision-making agents.

An Agent receives the masked PlayerView of its house and returns one
Action answering the pending decision. decide() dispatches on the
decision tag to one method per decision type, named after the tag.

Reference agents:
- RandomAgent: uniformly random, well-formed answers (seeded)
- PassiveAgent: the minimal legal answer to every decision
"""

from __future__ import annotations
import random
from abc import ABC, abstractmethod

from ..engine_core.action import Action, MusterStep
from ..engine_core.orders import ORDER_TOKENS, default_assignment
from ..engine_core.state import PendingDecision, SupportChoice, Track, UnitType
from ..engine_core.visibility import PlayerView


class Agent(ABC):
    """
    Abstract base class for agents.

    Implementations range from trivial reference agents to search-based
    players; the engine only relies on decide().
    """

    def decide(self, view: PlayerView) -> Action:
        """Answer the pending decision in a view."""
        pending = view.pending
        if pending is None:
            raise ValueError(f"No decision pending for {view.viewer.value}")
        method = getattr(self, pending.decision_type.value)
        return method(view, pending)

    def get_name(self) -> str:
        """Get the agent's name/identifier."""
        return self.__class__.__name__

    @staticmethod
    def own_unit_index(view: PlayerView, area_id: int) -> int:
        """Index of the viewer's first unit in an area."""
        units = view.areas[area_id].units
        return next(i for i, u in enumerate(units) if u.house == view.viewer)

    # Planning
    @abstractmethod
    def place_orders(self, view: PlayerView, pending: PendingDecision) -> Action: ...

    @abstractmethod
    def messenger_raven(self, view: PlayerView, pending: PendingDecision) -> Action: ...

    # Action phase
    @abstractmethod
    def choose_raid(self, view: PlayerView, pending: PendingDecision) -> Action: ...

    @abstractmethod
    def choose_march(self, view: PlayerView, pending: PendingDecision) -> Action: ...

    @abstractmethod
    def leave_power_token(self, view: PlayerView, pending: PendingDecision) -> Action: ...

    @abstractmethod
    def muster(self, view: PlayerView, pending: PendingDecision) -> Action: ...

    # Westeros phase
    @abstractmethod
    def reconcile(self, view: PlayerView, pending: PendingDecision) -> Action: ...

    @abstractmethod
    def bid(self, view: PlayerView, pending: PendingDecision) -> Action: ...

    @abstractmethod
    def westeros_choice(self, view: PlayerView, pending: PendingDecision) -> Action: ...

    @abstractmethod
    def wildling_penalty(self, view: PlayerView, pending: PendingDecision) -> Action: ...

    # Combat
    @abstractmethod
    def select_card(self, view: PlayerView, pending: PendingDecision) -> Action: ...

    @abstractmethod
    def declare_support(self, view: PlayerView, pending: PendingDecision) -> Action: ...

    @abstractmethod
    def use_blade(self, view: PlayerView, pending: PendingDecision) -> Action: ...

    @abstractmethod
    def choose_casualties(self, view: PlayerView, pending: PendingDecision) -> Action: ...

    @abstractmethod
    def retreat(self, view: PlayerView, pending: PendingDecision) -> Action: ...

    # Card abilities
    @abstractmethod
    def tyrion_replace(self, view: PlayerView, pending: PendingDecision) -> Action: ...

    @abstractmethod
    def aeron_swap(self, view: PlayerView, pending: PendingDecision) -> Action: ...

    @abstractmethod
    def queen_of_thorns(self, view: PlayerView, pending: PendingDecision) -> Action: ...

    @abstractmethod
    def doran_choose_track(self, view: PlayerView, pending: PendingDecision) -> Action: ...

    @abstractmethod
    def robb_retreat(self, view: PlayerView, pending: PendingDecision) -> Action: ...

    @abstractmethod
    def cersei_remove_order(self, view: PlayerView, pending: PendingDecision) -> Action: ...

    @abstractmethod
    def patchface_discard(self, view: PlayerView, pending: PendingDecision) -> Action: ...


class PassiveAgent(Agent):
    """
    Passive agent - always the minimal legal answer.

    Skips, passes, bids zero and picks the first option. Used as the
    driver's fallback when another agent keeps answering illegally.
    """

    def place_orders(self, view, pending):
        return Action.place_orders(view.viewer, default_assignment(pending.areas, pending.tokens, pending.limit))

    def messenger_raven(self, view, pending):
        return Action.messenger_raven(view.viewer)

    def choose_raid(self, view, pending):
        return Action.raid(view.viewer, None)

    def choose_march(self, view, pending):
        return Action.skip_march(view.viewer)

    def leave_power_token(self, view, pending):
        return Action.leave_power_token(view.viewer, False)

    def muster(self, view, pending):
        return Action.muster(view.viewer, [])

    def reconcile(self, view, pending):
        area_id = pending.areas[0]
        return Action.reconcile(view.viewer, area_id, self.own_unit_index(view, area_id))

    def bid(self, view, pending):
        return Action.bid(view.viewer, 0)

    def westeros_choice(self, view, pending):
        return Action.westeros_choice(view.viewer, 0)

    def wildling_penalty(self, view, pending):
        return Action.wildling_penalty(view.viewer, 0)

    def select_card(self, view, pending):
        return Action.select_card(view.viewer, pending.cards[0])

    def declare_support(self, view, pending):
        return Action.declare_support(view.viewer, SupportChoice.NONE)

    def use_blade(self, view, pending):
        return Action.use_blade(view.viewer, False)

    def choose_casualties(self, view, pending):
        return Action.choose_casualties(view.viewer, pending.units[:pending.count])

    def retreat(self, view, pending):
        return Action.retreat(view.viewer, pending.areas[0])

    def tyrion_replace(self, view, pending):
        return Action.tyrion_replace(view.viewer, pending.cards[0])

    def aeron_swap(self, view, pending):
        return Action.aeron_swap(view.viewer, None)

    def queen_of_thorns(self, view, pending):
        return Action.queen_of_thorns(view.viewer, None)

    def doran_choose_track(self, view, pending):
        return Action.doran_choose_track(view.viewer, Track.IRON_THRONE)

    def robb_retreat(self, view, pending):
        return Action.robb_retreat(view.viewer, pending.areas[0])

    def cersei_remove_order(self, view, pending):
        return Action.cersei_remove_order(view.viewer, None)

    def patchface_discard(self, view, pending):
        return Action.patchface_discard(view.viewer, pending.cards[0])


class RandomAgent(Agent):
    """
    Random agent - uniformly random, well-formed answers.

    Used for:
    - Testing (full games, determinism)
    - Baseline comparison

    Answers are not always legal (a march may break supply); the driver
    retries and eventually falls back to the passive answer.
    """

    def __init__(self, seed: int | None = None):
        self.rng = random.Random(seed)

    def place_orders(self, view, pending):
        plain = [t for t in pending.tokens if not ORDER_TOKENS[t].star]
        starred = [t for t in pending.tokens if ORDER_TOKENS[t].star]
        count = pending.count
        low = max(0, count - len(plain))
        high = min(pending.limit, len(starred), count)
        n_starred = self.rng.randint(low, high)
        tokens = self.rng.sample(plain, count - n_starred) + self.rng.sample(starred, n_starred)
        self.rng.shuffle(tokens)
        areas = self.rng.sample(pending.areas, count)
        return Action.place_orders(view.viewer, dict(zip(areas, tokens)))

    def messenger_raven(self, view, pending):
        return Action.messenger_raven(view.viewer)

    def choose_raid(self, view, pending):
        return Action.raid(view.viewer, self.rng.choice(pending.areas + [None]))

    def choose_march(self, view, pending):
        if self.rng.random() < 0.2:
            return Action.skip_march(view.viewer)
        destination = self.rng.choice(pending.areas)
        size = self.rng.randint(1, len(pending.units))
        units = sorted(self.rng.sample(pending.units, size))
        return Action.march(view.viewer, destination, units)

    def leave_power_token(self, view, pending):
        return Action.leave_power_token(view.viewer, self.rng.random() < 0.5)

    def muster(self, view, pending):
        if not pending.muster_areas or view.me.pool[UnitType.FOOTMAN.value] <= 0:
            return Action.muster(view.viewer, [])
        area = self.rng.choice(pending.muster_areas)
        if self.rng.random() < 0.3:
            return Action.muster(view.viewer, [])
        return Action.muster(view.viewer, [MusterStep(area_id=area.area_id, unit_type=UnitType.FOOTMAN)])

    def reconcile(self, view, pending):
        area_id = self.rng.choice(pending.areas)
        return Action.reconcile(view.viewer, area_id, self.own_unit_index(view, area_id))

    def bid(self, view, pending):
        return Action.bid(view.viewer, self.rng.randint(0, pending.limit or 0))

    def westeros_choice(self, view, pending):
        return Action.westeros_choice(view.viewer, self.rng.randrange(len(pending.options)))

    def wildling_penalty(self, view, pending):
        return Action.wildling_penalty(view.viewer, self.rng.randrange(len(pending.options)))

    def select_card(self, view, pending):
        return Action.select_card(view.viewer, self.rng.choice(pending.cards))

    def declare_support(self, view, pending):
        return Action.declare_support(view.viewer, self.rng.choice(list(SupportChoice)))

    def use_blade(self, view, pending):
        return Action.use_blade(view.viewer, self.rng.random() < 0.5)

    def choose_casualties(self, view, pending):
        return Action.choose_casualties(view.viewer, self.rng.sample(pending.units, pending.count))

    def retreat(self, view, pending):
        return Action.retreat(view.viewer, self.rng.choice(pending.areas))

    def tyrion_replace(self, view, pending):
        return Action.tyrion_replace(view.viewer, self.rng.choice(pending.cards))

    def aeron_swap(self, view, pending):
        return Action.aeron_swap(view.viewer, self.rng.choice(pending.cards + [None]))

    def queen_of_thorns(self, view, pending):
        return Action.queen_of_thorns(view.viewer, self.rng.choice(pending.areas + [None]))

    def doran_choose_track(self, view, pending):
        return Action.doran_choose_track(view.viewer, self.rng.choice(list(Track)))

    def robb_retreat(self, view, pending):
        return Action.robb_retreat(view.viewer, self.rng.choice(pending.areas))

    def cersei_remove_order(self, view, pending):
        return Action.cersei_remove_order(view.viewer, self.rng.choice(pending.areas + [None]))

    def patchface_discard(self, view, pending):
        return Action.patchface_discard(view.viewer, self.rng.choice(pending.cards))
