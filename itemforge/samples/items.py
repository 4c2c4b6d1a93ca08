"""Demo item definitions usable as generation targets."""

from enum import Enum
from typing import List

from pydantic import BaseModel, Field


class ItemRarity(str, Enum):
    """Rarity tiers shared by the demo items."""
    COMMON = "common"
    UNCOMMON = "uncommon"
    RARE = "rare"
    EPIC = "epic"
    LEGENDARY = "legendary"


class MeleeWeaponType(str, Enum):
    SWORD = "sword"
    AXE = "axe"
    MACE = "mace"
    DAGGER = "dagger"
    SPEAR = "spear"
    HAMMER = "hammer"
    STAFF = "staff"
    FLAIL = "flail"


class ArmorSlot(str, Enum):
    HEAD = "head"
    CHEST = "chest"
    LEGS = "legs"
    FEET = "feet"
    HANDS = "hands"
    SHIELD = "shield"


class ArmorType(str, Enum):
    CLOTH = "cloth"
    LEATHER = "leather"
    CHAINMAIL = "chainmail"
    PLATE = "plate"
    SCALE = "scale"
    BONE = "bone"
    MAGICAL = "magical"


class ConsumableEffect(str, Enum):
    HEAL = "heal"
    RESTORE_MANA = "restore_mana"
    BUFF_STRENGTH = "buff_strength"
    BUFF_SPEED = "buff_speed"
    BUFF_DEFENSE = "buff_defense"
    POISON = "poison"
    CURE = "cure"
    RESURRECT = "resurrect"


class MeleeWeapon(BaseModel):
    """A melee weapon used in close combat."""
    name: str = Field(default="", description="Display name of the weapon")
    description: str = Field(default="", description="Short flavor text")
    damage: int = Field(default=10, ge=1, le=100, description="Base damage dealt by the weapon")
    weight: float = Field(default=1.0, ge=0.1, le=50.0, description="Weight of the weapon in kg")
    value: int = Field(default=50, ge=1, le=10000, description="Gold value of the weapon")
    attack_speed: float = Field(default=1.0, ge=0.5, le=5.0, description="Attack speed (attacks per second)")
    durability: int = Field(default=100, ge=1, le=500, description="Durability of the weapon")
    weapon_type: MeleeWeaponType = Field(default=MeleeWeaponType.SWORD, description="Type/category of melee weapon")
    rarity: ItemRarity = Field(default=ItemRarity.COMMON, description="Rarity tier of the weapon")


class Armor(BaseModel):
    """Armor or other wearable equipment."""
    name: str = Field(default="", description="Name of the armor")
    slot: ArmorSlot = Field(default=ArmorSlot.CHEST, description="Equipment slot")
    defense: int = Field(default=10, ge=1, le=200, description="Defense rating")
    weight: float = Field(default=5.0, ge=0.1, le=100.0, description="Weight in kg")
    value: int = Field(default=100, ge=1, le=10000, description="Gold value")
    durability: int = Field(default=100, ge=1, le=1000, description="Durability")
    armor_type: ArmorType = Field(default=ArmorType.LEATHER, description="Armor type/material")
    rarity: ItemRarity = Field(default=ItemRarity.COMMON, description="Rarity tier")
    bonus_health: int = Field(default=0, ge=0, le=100, description="Bonus health from wearing")
    speed_modifier: float = Field(default=1.0, ge=0.5, le=1.5, description="Movement speed modifier (1.0 = normal)")


class Consumable(BaseModel):
    """A single-use item such as a potion or scroll."""
    name: str = Field(default="", description="Name of the consumable")
    effect_type: ConsumableEffect = Field(default=ConsumableEffect.HEAL, description="Effect type when consumed")
    effect_power: int = Field(default=10, ge=1, le=100, description="Power/magnitude of the effect")
    duration: float = Field(default=0.0, ge=0, le=300, description="Duration of effect in seconds (0 for instant)")
    value: int = Field(default=25, ge=1, le=1000, description="Gold value")
    max_stack: int = Field(default=20, ge=1, le=99, description="Maximum stack size")
    rarity: ItemRarity = Field(default=ItemRarity.COMMON, description="Rarity tier")
    tags: List[str] = Field(default_factory=list, description="Free-form search tags")
