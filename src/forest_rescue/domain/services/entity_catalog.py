from __future__ import annotations

import random
from collections.abc import Mapping, Sequence
from dataclasses import replace
from typing import Optional

from forest_rescue.domain.models.enemy import (
    Companion,
    Enemy,
    EnemyType,
    HiddenTreasure,
    ItemEffect,
    Treasure,
)
from forest_rescue.domain.services.probability import sample_without_replacement


SORCERER_TIER = 100
CAPTOR_PET_TIER = 90
MOUSE_TIER = 0
ADJECTIVES_PER_ENEMY = 2
SORCERER_PET_CHANCE = 0.5
SORCERER_PET_TIERS: Sequence[int] = (10, 20, 30, 40, 50, 60, 70, 80, 90)
HIDDEN_TREASURE_CHANCE = 0.10


ENEMY_TYPES: Sequence[EnemyType] = (
    EnemyType(0, "Mouse", "🐭", "A small, defenceless mouse."),
    EnemyType(10, "Toad", "🐸", "A slimy, repulsive toad."),
    EnemyType(20, "Lizard", "🦎", "A lizard with razor-sharp scales."),
    EnemyType(30, "Wolf", "🐺", "A wolf with glowing eyes."),
    EnemyType(40, "Goblin", "👺", "A goblin with a wicked grin."),
    EnemyType(50, "Warlock", "🧙", "A warlock wrapped in black smoke."),
    EnemyType(60, "Wraith", "👻", "A wraith drifting between the shadows."),
    EnemyType(70, "Golem", "🗿", "A golem of living stone."),
    EnemyType(80, "Ogre", "👹", "An ogre of monstrous strength."),
    EnemyType(90, "Dragon", "🔥", "A dragon breathing hellfire."),
    EnemyType(100, "Sorcerer", "🧙‍♂️", "A sorcerer of immeasurable power."),
)

ENEMY_TYPES_BY_TIER: Mapping[int, EnemyType] = {enemy_type.tier: enemy_type for enemy_type in ENEMY_TYPES}

ADJECTIVES: Sequence[str] = (
    "Lurking",
    "Hostile",
    "Horrid",
    "Sinister",
    "Corrupt",
    "Wicked",
    "Menacing",
    "Dreadful",
    "Ruthless",
    "Terrifying",
)

TREASURES: Sequence[Treasure] = (
    Treasure(10, "10 gold coins", "🪙"),
    Treasure(20, "A ritual dagger", "🗡️"),
    Treasure(30, "A necklace of blessed fangs", "📿"),
    Treasure(40, "A pouch of invisible dust", "👝"),
    Treasure(50, "An ancient copper cauldron", "🫕"),
    Treasure(60, "A gem with a dormant soul", "💎"),
    Treasure(70, "A petrified forest heart", "🪨"),
    Treasure(80, "A golden ogre scale", "✨"),
    Treasure(90, "An orb of eternal fire", "🔮"),
    Treasure(100, "A treasure chest", "💰"),
)

HIDDEN_TREASURES: Sequence[HiddenTreasure] = (
    HiddenTreasure(
        "ring_of_power",
        "Ring of Power",
        "💍",
        "Slays any enemy instantly.",
        ItemEffect.INSTANT_KILL,
    ),
    HiddenTreasure(
        "dragonmaster_sword",
        "Sword of the Dragon Master",
        "⚔️",
        "Slays any dragon instantly.",
        ItemEffect.DRAGON_KILL,
    ),
    HiddenTreasure(
        "bat_wings",
        "Bat Wings",
        "🦇",
        "Carry you to a random place in the forest.",
        ItemEffect.TELEPORT,
    ),
    HiddenTreasure(
        "explosive_pill",
        "Explosive Pill",
        "💊",
        "If you swallow it... you explode and die.",
        ItemEffect.SELF_DESTRUCT,
    ),
    HiddenTreasure(
        "elixir_of_life",
        "Elixir of Life",
        "🧪",
        "Restores all of your original energy (1000).",
        ItemEffect.FULL_HEAL,
    ),
)


def enemy_type_for_tier(tier: int) -> EnemyType:
    return ENEMY_TYPES_BY_TIER.get(int(tier), ENEMY_TYPES[0])


def compose_full_name(name: str, adjectives: Sequence[str]) -> str:
    if not adjectives:
        return name
    return f"{name}, {' and '.join(adjectives)}"


def _build_companion(tier: int, rng: random.Random) -> Companion:
    companion_type = enemy_type_for_tier(tier)
    adjectives = tuple(sample_without_replacement(rng, ADJECTIVES, ADJECTIVES_PER_ENEMY))
    return Companion(
        tier=companion_type.tier,
        name=companion_type.name,
        icon=companion_type.icon,
        adjectives=adjectives,
        full_name=compose_full_name(companion_type.name, adjectives),
    )


def create_enemy(tier: int, rng: random.Random, is_princess_captor: bool = False) -> Enemy:
    """Assemble a concrete enemy for ``tier``.

    The princess captor is always a sorcerer guarding a dragon and carries no
    treasure. Other sorcerers have an even chance of a companion drawn from the
    non-mouse, non-sorcerer tiers.
    """
    if is_princess_captor:
        tier = SORCERER_TIER
    enemy_type = enemy_type_for_tier(tier)
    tier = enemy_type.tier

    adjectives: tuple[str, ...] = ()
    if tier != MOUSE_TIER:
        adjectives = tuple(sample_without_replacement(rng, ADJECTIVES, ADJECTIVES_PER_ENEMY))

    pet: Optional[Companion] = None
    total_strength = tier
    if is_princess_captor:
        pet = _build_companion(CAPTOR_PET_TIER, rng)
        total_strength = SORCERER_TIER + CAPTOR_PET_TIER
    elif tier == SORCERER_TIER and rng.random() < SORCERER_PET_CHANCE:
        pet = _build_companion(rng.choice(SORCERER_PET_TIERS), rng)
        total_strength = SORCERER_TIER + pet.tier

    treasure = None if is_princess_captor else rng.choice(TREASURES)

    return Enemy(
        tier=tier,
        name=enemy_type.name,
        icon=enemy_type.icon,
        description=enemy_type.description,
        adjectives=adjectives,
        full_name=compose_full_name(enemy_type.name, adjectives),
        pet=pet,
        total_strength=total_strength,
        treasure=treasure,
        is_princess_captor=is_princess_captor,
    )


def roll_hidden_treasure(rng: random.Random) -> Optional[HiddenTreasure]:
    if rng.random() < HIDDEN_TREASURE_CHANCE:
        return replace(rng.choice(HIDDEN_TREASURES))
    return None
