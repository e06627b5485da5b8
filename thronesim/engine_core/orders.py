"""
Order tokens.

Every house owns the same fifteen tokens: three of each order type, one of
which is starred. The functions here take plain values (not a GameState)
so agents can evaluate them from a PlayerView as well.
"""

from __future__ import annotations
from dataclasses import dataclass

from .state import House, Order, OrderType


@dataclass(frozen=True)
class OrderToken:
    order_type: OrderType
    strength: int
    star: bool

    def place(self, house: House, token_index: int) -> Order:
        return Order(
            order_type=self.order_type,
            strength=self.strength,
            star=self.star,
            house=house,
            token_index=token_index,
        )


ORDER_TOKENS: tuple[OrderToken, ...] = (
    OrderToken(OrderType.MARCH, -1, False),
    OrderToken(OrderType.MARCH, 0, False),
    OrderToken(OrderType.MARCH, 1, True),
    OrderToken(OrderType.DEFENSE, 1, False),
    OrderToken(OrderType.DEFENSE, 1, False),
    OrderToken(OrderType.DEFENSE, 2, True),
    OrderToken(OrderType.SUPPORT, 0, False),
    OrderToken(OrderType.SUPPORT, 0, False),
    OrderToken(OrderType.SUPPORT, 1, True),
    OrderToken(OrderType.RAID, 0, False),
    OrderToken(OrderType.RAID, 0, False),
    OrderToken(OrderType.RAID, 0, True),
    OrderToken(OrderType.CONSOLIDATE_POWER, 0, False),
    OrderToken(OrderType.CONSOLIDATE_POWER, 0, False),
    OrderToken(OrderType.CONSOLIDATE_POWER, 0, True),
)

# King's Court position -> starred orders allowed, per player count
_STAR_LIMITS = {
    6: (3, 3, 2, 1, 0, 0),
    5: (3, 3, 2, 1, 0),
    4: (3, 3, 1, 0),
    3: (3, 2, 1),
}


def star_order_limit(player_count: int, kings_court_position: int) -> int:
    """Number of starred orders a house may place this round."""
    limits = _STAR_LIMITS.get(player_count, ())
    if 1 <= kings_court_position <= len(limits):
        return limits[kings_court_position - 1]
    return 0


def token_usable(
    token_index: int,
    restricted: list[OrderType],
    restricted_star: list[OrderType],
) -> bool:
    token = ORDER_TOKENS[token_index]
    if token.order_type in restricted:
        return False
    if token.star and token.order_type in restricted_star:
        return False
    return True


def usable_tokens(restricted: list[OrderType], restricted_star: list[OrderType]) -> list[int]:
    """Token indices not forbidden by this round's Westeros cards."""
    return [i for i in range(len(ORDER_TOKENS)) if token_usable(i, restricted, restricted_star)]


def max_orders(tokens: list[int], star_limit: int) -> int:
    """Most orders that can be placed from a token list under a star limit."""
    plain = sum(1 for i in tokens if not ORDER_TOKENS[i].star)
    starred = sum(1 for i in tokens if ORDER_TOKENS[i].star)
    return plain + min(starred, star_limit)


def default_assignment(areas: list[int], tokens: list[int], star_limit: int) -> dict[int, int]:
    """
    A legal order assignment: plain tokens first, then starred ones.

    Used as the fallback answer to PLACE_ORDERS.
    """
    ordered = [i for i in tokens if not ORDER_TOKENS[i].star]
    ordered += [i for i in tokens if ORDER_TOKENS[i].star][:star_limit]
    return dict(zip(areas, ordered))
