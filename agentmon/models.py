from typing import Dict, List, Literal, NamedTuple, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator


CardType = Literal[
    "Electric",
    "Psychic",
    "Normal",
    "Ground",
    "Steel",
    "Dragon",
    "Water",
    "Fire",
    "Grass",
    "Ice",
    "Ghost",
    "Fairy",
]

Rarity = Literal[
    "Common",
    "Uncommon",
    "Rare",
    "Epic",
    "Legendary",
    "Hyper Rare",
    "Singularity",
]

EvolutionStage = Literal["Basic", "Stage 1", "Stage 2"]

ContentDepth = Literal["minimal", "moderate", "rich"]

LAYOUT_VERSION = "1.3"


class TypeInfo(NamedTuple):
    icon: str
    color: str
    hex: str


TYPE_METADATA: Dict[str, TypeInfo] = {
    "Electric": TypeInfo("⚡", "Yellow", "#FFD700"),
    "Psychic": TypeInfo("🔮", "Purple", "#9B59B6"),
    "Normal": TypeInfo("📚", "Gray", "#95A5A6"),
    "Ground": TypeInfo("🔍", "Brown", "#8B4513"),
    "Steel": TypeInfo("🛡️", "Silver", "#C0C0C0"),
    "Dragon": TypeInfo("🐉", "Indigo", "#4B0082"),
    "Water": TypeInfo("🌊", "Blue", "#3498DB"),
    "Fire": TypeInfo("🔥", "Red", "#E74C3C"),
    "Grass": TypeInfo("🌿", "Green", "#27AE60"),
    "Ice": TypeInfo("🧊", "Cyan", "#00BCD4"),
    "Ghost": TypeInfo("👻", "Dark purple", "#2C003E"),
    "Fairy": TypeInfo("✨", "Pink", "#FF69B4"),
}

CARD_TYPES = tuple(TYPE_METADATA)

# Ordered from most to least common.
RARITIES = (
    "Common",
    "Uncommon",
    "Rare",
    "Epic",
    "Legendary",
    "Hyper Rare",
    "Singularity",
)

RARITY_SYMBOLS: Dict[str, str] = {
    "Common": "●",
    "Uncommon": "◆",
    "Rare": "★",
    "Epic": "★★",
    "Legendary": "★★★",
    "Hyper Rare": "✦",
    "Singularity": "◉",
}


class Ability(BaseModel):
    """Passive ability printed under the art box."""

    model_config = ConfigDict(frozen=True)

    name: str
    description: str


class Attack(BaseModel):
    """A single attack row.

    - energy_cost: icon string, e.g. "🛡️🛡️⚡".
    - damage: printed damage, e.g. "80", "100+" or "30x2".
    """

    model_config = ConfigDict(frozen=True)

    name: str
    energy_cost: str
    damage: str
    description: str


class Weakness(BaseModel):
    model_config = ConfigDict(frozen=True)

    type: CardType
    modifier: Literal["×2"]


class Resistance(BaseModel):
    model_config = ConfigDict(frozen=True)

    type: CardType
    modifier: Literal["-30"]


class CardProfile(BaseModel):
    """Card content as produced by the text generator and finalized by the pipeline."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    name: str
    subtitle: str

    primary_type: CardType
    secondary_type: Optional[CardType] = Field(...)

    hp: int = Field(..., ge=50, le=180)
    evolution_stage: EvolutionStage

    ability: Ability
    attacks: List[Attack] = Field(..., min_length=1, max_length=2)

    weakness: Weakness
    resistance: Resistance
    retreat_cost: int = Field(..., ge=0, le=4)

    rarity: Rarity
    stat_budget: int = Field(..., ge=0, le=500)
    illustrator: str

    flavor_text: str
    image_prompt: str
    layout_version: Literal["1.3"]

    @property
    def type_icons(self) -> List[str]:
        icons = [TYPE_METADATA[self.primary_type].icon]
        if self.secondary_type:
            icons.append(TYPE_METADATA[self.secondary_type].icon)
        return icons


class FullCardProfile(CardProfile):
    """Card profile with the serial number attached after the pipeline ran."""

    serial_number: int = Field(..., ge=1)


class SkillRecord(BaseModel):
    """Entry of the public skills database."""

    slug: str
    name: str
    author: str = ""
    description: str = ""
    category: str
    primary_type: CardType
    complexity: Literal["low", "medium", "high"]

    @model_validator(mode="after")
    def _normalize_slug(self) -> "SkillRecord":
        self.slug = self.slug.strip().lower()
        return self
