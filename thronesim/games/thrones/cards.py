"""
Card catalog - Combat cards, Westeros decks and the wildling deck.

Combat card structure:
- House (7 cards each, 42 total)
- Printed strength, sword icons, fortification icons
- Ability tag (or None for a stats-only card)

Each ability tag is bound to exactly one combat stage in ABILITY_STAGES.
The combat resolver looks handlers up by tag; a card whose tag has no
handler at a stage simply does nothing there.
"""

from __future__ import annotations
from dataclasses import dataclass
from enum import Enum

from ...engine_core.state import (
    CombatStage,
    House,
    WesterosCard,
    WesterosCardType,
    WildlingCardType,
)


class AbilityTag(Enum):
    # Card selection (fire right after both cards are revealed)
    TYRION = "tyrion"
    AERON = "aeron"
    QUEEN_OF_THORNS = "queen_of_thorns"
    DORAN = "doran"
    MACE = "mace"

    # Strength calculation
    CATELYN = "catelyn"
    KEVAN = "kevan"
    STANNIS = "stannis"
    DAVOS = "davos"
    SALLADHOR = "salladhor"
    VICTARION = "victarion"
    BALON = "balon"
    THEON = "theon"
    ASHA = "asha"
    NYMERIA = "nymeria"

    # Resolution
    BLACKFISH = "blackfish"
    ROBB = "robb"

    # Post combat
    TYWIN = "tywin"
    CERSEI = "cersei"
    RENLY = "renly"
    PATCHFACE = "patchface"
    ROOSE = "roose"


ABILITY_STAGES: dict[AbilityTag, CombatStage] = {
    AbilityTag.TYRION: CombatStage.CARD_SELECTION,
    AbilityTag.AERON: CombatStage.CARD_SELECTION,
    AbilityTag.QUEEN_OF_THORNS: CombatStage.CARD_SELECTION,
    AbilityTag.DORAN: CombatStage.CARD_SELECTION,
    AbilityTag.MACE: CombatStage.CARD_SELECTION,
    AbilityTag.CATELYN: CombatStage.STRENGTH_CALCULATION,
    AbilityTag.KEVAN: CombatStage.STRENGTH_CALCULATION,
    AbilityTag.STANNIS: CombatStage.STRENGTH_CALCULATION,
    AbilityTag.DAVOS: CombatStage.STRENGTH_CALCULATION,
    AbilityTag.SALLADHOR: CombatStage.STRENGTH_CALCULATION,
    AbilityTag.VICTARION: CombatStage.STRENGTH_CALCULATION,
    AbilityTag.BALON: CombatStage.STRENGTH_CALCULATION,
    AbilityTag.THEON: CombatStage.STRENGTH_CALCULATION,
    AbilityTag.ASHA: CombatStage.STRENGTH_CALCULATION,
    AbilityTag.NYMERIA: CombatStage.STRENGTH_CALCULATION,
    AbilityTag.BLACKFISH: CombatStage.RESOLUTION,
    AbilityTag.ROBB: CombatStage.RESOLUTION,
    AbilityTag.TYWIN: CombatStage.POST_COMBAT,
    AbilityTag.CERSEI: CombatStage.POST_COMBAT,
    AbilityTag.RENLY: CombatStage.POST_COMBAT,
    AbilityTag.PATCHFACE: CombatStage.POST_COMBAT,
    AbilityTag.ROOSE: CombatStage.POST_COMBAT,
}

# Order in which card-selection abilities fire when both sides have one
CARD_SELECTION_PRIORITY: tuple[AbilityTag, ...] = (
    AbilityTag.TYRION,
    AbilityTag.AERON,
    AbilityTag.QUEEN_OF_THORNS,
    AbilityTag.DORAN,
    AbilityTag.MACE,
)


@dataclass(frozen=True)
class HouseCard:
    """A combat (house) card."""
    id: str
    name: str
    house: House
    strength: int
    swords: int = 0
    fortifications: int = 0
    ability: AbilityTag | None = None

    @property
    def stage(self) -> CombatStage | None:
        """Combat stage the ability fires at, None for stats-only cards."""
        if self.ability is None:
            return None
        return ABILITY_STAGES[self.ability]


def _card(house, id, name, strength, swords=0, fortifications=0, ability=None) -> HouseCard:
    return HouseCard(
        id=id, name=name, house=house, strength=strength,
        swords=swords, fortifications=fortifications, ability=ability,
    )


_S, _L, _B = House.STARK, House.LANNISTER, House.BARATHEON
_G, _T, _M = House.GREYJOY, House.TYRELL, House.MARTELL

HOUSE_CARDS: tuple[HouseCard, ...] = (
    _card(_S, "eddard_stark", "Eddard Stark", 4, swords=2),
    _card(_S, "robb_stark", "Robb Stark", 3, ability=AbilityTag.ROBB),
    _card(_S, "greatjon_umber", "Greatjon Umber", 2, swords=1),
    _card(_S, "roose_bolton", "Roose Bolton", 2, ability=AbilityTag.ROOSE),
    _card(_S, "the_blackfish", "The Blackfish", 1, ability=AbilityTag.BLACKFISH),
    _card(_S, "ser_rodrik_cassel", "Ser Rodrik Cassel", 1, fortifications=2),
    _card(_S, "catelyn_stark", "Catelyn Stark", 0, ability=AbilityTag.CATELYN),

    _card(_L, "tywin_lannister", "Tywin Lannister", 4, ability=AbilityTag.TYWIN),
    _card(_L, "ser_gregor_clegane", "Ser Gregor Clegane", 3, swords=3),
    _card(_L, "ser_jaime_lannister", "Ser Jaime Lannister", 2, swords=1),
    _card(_L, "the_hound", "The Hound", 2, fortifications=2),
    _card(_L, "tyrion_lannister", "Tyrion Lannister", 1, ability=AbilityTag.TYRION),
    _card(_L, "ser_kevan_lannister", "Ser Kevan Lannister", 1, ability=AbilityTag.KEVAN),
    _card(_L, "cersei_lannister", "Cersei Lannister", 0, ability=AbilityTag.CERSEI),

    _card(_B, "stannis_baratheon", "Stannis Baratheon", 4, ability=AbilityTag.STANNIS),
    _card(_B, "renly_baratheon", "Renly Baratheon", 3, ability=AbilityTag.RENLY),
    _card(_B, "brienne_of_tarth", "Brienne of Tarth", 2, swords=1, fortifications=1),
    _card(_B, "ser_davos_seaworth", "Ser Davos Seaworth", 2, ability=AbilityTag.DAVOS),
    _card(_B, "melisandre", "Melisandre", 1, swords=1),
    _card(_B, "salladhor_saan", "Salladhor Saan", 1, ability=AbilityTag.SALLADHOR),
    _card(_B, "patchface", "Patchface", 0, ability=AbilityTag.PATCHFACE),

    _card(_G, "euron_crows_eye", "Euron Crow's Eye", 4, swords=1),
    _card(_G, "victarion_greyjoy", "Victarion Greyjoy", 3, ability=AbilityTag.VICTARION),
    _card(_G, "balon_greyjoy", "Balon Greyjoy", 2, ability=AbilityTag.BALON),
    _card(_G, "theon_greyjoy", "Theon Greyjoy", 2, ability=AbilityTag.THEON),
    _card(_G, "asha_greyjoy", "Asha Greyjoy", 1, ability=AbilityTag.ASHA),
    _card(_G, "dagmer_cleftjaw", "Dagmer Cleftjaw", 1, swords=1, fortifications=1),
    _card(_G, "aeron_damphair", "Aeron Damphair", 0, ability=AbilityTag.AERON),

    _card(_T, "mace_tyrell", "Mace Tyrell", 4, ability=AbilityTag.MACE),
    _card(_T, "ser_loras_tyrell", "Ser Loras Tyrell", 3),
    _card(_T, "ser_garlan_tyrell", "Ser Garlan Tyrell", 2, swords=2),
    _card(_T, "randyll_tarly", "Randyll Tarly", 2, swords=1),
    _card(_T, "margaery_tyrell", "Margaery Tyrell", 1, fortifications=1),
    _card(_T, "alester_florent", "Alester Florent", 1, fortifications=1),
    _card(_T, "queen_of_thorns", "The Queen of Thorns", 0, ability=AbilityTag.QUEEN_OF_THORNS),

    _card(_M, "the_red_viper", "The Red Viper", 4, swords=2, fortifications=1),
    _card(_M, "areo_hotah", "Areo Hotah", 3, fortifications=1),
    _card(_M, "obara_sand", "Obara Sand", 2, swords=1),
    _card(_M, "darkstar", "Darkstar", 2, swords=1),
    _card(_M, "nymeria_sand", "Nymeria Sand", 1, ability=AbilityTag.NYMERIA),
    _card(_M, "arianne_martell", "Arianne Martell", 1),
    _card(_M, "doran_martell", "Doran Martell", 0, ability=AbilityTag.DORAN),
)


def _westeros(deck: int, entries: list[tuple[WesterosCardType, int, bool]]) -> list[WesterosCard]:
    cards = []
    for card_type, copies, wildling_icon in entries:
        cards.extend(
            WesterosCard(deck=deck, card_type=card_type, wildling_icon=wildling_icon)
            for _ in range(copies)
        )
    return cards


W = WesterosCardType

WESTEROS_DECK_1 = (
    (W.SUPPLY, 3, False),
    (W.MUSTERING, 3, False),
    (W.A_THRONE_OF_BLADES, 2, True),
    (W.WINTER_IS_COMING, 1, False),
    (W.LAST_DAYS_OF_SUMMER, 1, True),
)
WESTEROS_DECK_2 = (
    (W.CLASH_OF_KINGS, 3, False),
    (W.GAME_OF_THRONES, 3, False),
    (W.DARK_WINGS_DARK_WORDS, 2, True),
    (W.WINTER_IS_COMING, 1, False),
    (W.LAST_DAYS_OF_SUMMER, 1, True),
)
WESTEROS_DECK_3 = (
    (W.WILDLING_ATTACK, 3, False),
    (W.PUT_TO_THE_SWORD, 2, True),
    (W.SEA_OF_STORMS, 1, True),
    (W.RAINS_OF_AUTUMN, 1, True),
    (W.FEAST_FOR_CROWS, 1, True),
    (W.WEB_OF_LIES, 1, True),
    (W.STORM_OF_SWORDS, 1, True),
)


class CardCatalog:
    """
    Read-only registry of every card in the game.

    One instance (CATALOG) is shared by all games in the process.
    """

    def __init__(self, house_cards: tuple[HouseCard, ...]):
        self._by_id = {card.id: card for card in house_cards}
        if len(self._by_id) != len(house_cards):
            raise ValueError("Duplicate house card id")
        self._by_house: dict[House, tuple[HouseCard, ...]] = {
            house: tuple(c for c in house_cards if c.house == house) for house in House
        }

    def card(self, card_id: str) -> HouseCard:
        return self._by_id[card_id]

    def house_cards(self, house: House) -> tuple[HouseCard, ...]:
        return self._by_house[house]

    def house_card_ids(self, house: House) -> list[str]:
        return [c.id for c in self._by_house[house]]

    def ability(self, card_id: str | None) -> AbilityTag | None:
        if card_id is None:
            return None
        return self._by_id[card_id].ability

    def all_cards(self) -> list[HouseCard]:
        return list(self._by_id.values())

    def westeros_deck(self, deck: int) -> list[WesterosCard]:
        """Fresh, unshuffled copy of Westeros deck 1, 2 or 3."""
        specs = {1: WESTEROS_DECK_1, 2: WESTEROS_DECK_2, 3: WESTEROS_DECK_3}
        return _westeros(deck, list(specs[deck]))

    def wildling_deck(self) -> list[WildlingCardType]:
        return list(WildlingCardType)


CATALOG = CardCatalog(HOUSE_CARDS)
