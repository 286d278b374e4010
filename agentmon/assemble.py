"""Render a finalized card profile into the image-generation prompt.

Substitution is a single regex pass over ``[UPPER_SNAKE]`` tokens. Values are
never rescanned, so text that happens to contain a token (or a token that is a
prefix of another, like ``[RARITY]`` and ``[RARITY_SYMBOL]``) cannot collide.
"""
from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Callable, Dict, Mapping, Optional

from .models import LAYOUT_VERSION, RARITY_SYMBOLS, TYPE_METADATA, FullCardProfile
from .prompts import CARD_LAYOUT_TEMPLATE, RARITY_TREATMENTS

TOKEN_PATTERN = re.compile(r"\[([A-Z][A-Z_]*)\]")

FREE_RETREAT = "none (free retreat)"
RETREAT_DOT = "⚪"


@dataclass(frozen=True)
class AssembledPrompt:
    prompt: str
    layout_version: str


def type_label(card_type: str) -> str:
    return f"{TYPE_METADATA[card_type].icon} {card_type}"


def build_border_style(profile: FullCardProfile) -> str:
    primary = TYPE_METADATA[profile.primary_type]
    if profile.secondary_type:
        secondary = TYPE_METADATA[profile.secondary_type]
        return (
            f"Gradient border transitioning from {profile.primary_type} color ({primary.hex}) "
            f"to {profile.secondary_type} color ({secondary.hex}) with metallic edge effect"
        )
    return f"Solid {profile.primary_type} colored border ({primary.hex}) with metallic edge effect"


def build_secondary_type_line(profile: FullCardProfile) -> str:
    if profile.secondary_type:
        return (
            f"- Show a smaller {type_label(profile.secondary_type)} type icon next to the "
            f"primary {TYPE_METADATA[profile.primary_type].icon} icon"
        )
    return f"- Single-type card: only the {type_label(profile.primary_type)} icon is shown"


def build_attack_rows(profile: FullCardProfile) -> str:
    rows = ["ATTACK ROWS:"]
    for attack in profile.attacks:
        rows.append("Attack row:")
        rows.append(f"- Left side: energy cost icons: {attack.energy_cost}")
        rows.append(f'- Center: "{attack.name}" in bold')
        rows.append(f'- Right side: "{attack.damage}" in large bold text')
        rows.append(f'- Below: "{attack.description}" in small text')
        rows.append("")
    return "\n".join(rows).rstrip("\n")


def build_retreat_dots(retreat_cost: int) -> str:
    if retreat_cost <= 0:
        return FREE_RETREAT
    return " ".join([RETREAT_DOT] * retreat_cost)


def placeholder_values(
    profile: FullCardProfile, treatments: Mapping[str, str]
) -> Dict[str, Callable[[], str]]:
    primary = TYPE_METADATA[profile.primary_type]
    return {
        "BORDER_STYLE": lambda: build_border_style(profile),
        "PRIMARY_TYPE_COLOR": lambda: f"{profile.primary_type} ({primary.color}, {primary.hex})",
        "EVOLUTION_STAGE": lambda: profile.evolution_stage,
        "NAME": lambda: profile.name,
        "HP": lambda: str(profile.hp),
        "PRIMARY_TYPE_ICON": lambda: type_label(profile.primary_type),
        "SUBTITLE": lambda: profile.subtitle,
        "SECONDARY_TYPE_ICON_LINE": lambda: build_secondary_type_line(profile),
        "IMAGE_PROMPT": lambda: profile.image_prompt,
        "ABILITY_NAME": lambda: profile.ability.name,
        "ABILITY_DESCRIPTION": lambda: profile.ability.description,
        "ATTACK_ROWS": lambda: build_attack_rows(profile),
        "WEAKNESS_TYPE_ICON": lambda: type_label(profile.weakness.type),
        "WEAKNESS_MODIFIER": lambda: profile.weakness.modifier,
        "RESISTANCE_TYPE_ICON": lambda: type_label(profile.resistance.type),
        "RESISTANCE_MODIFIER": lambda: profile.resistance.modifier,
        "RETREAT_DOTS": lambda: build_retreat_dots(profile.retreat_cost),
        "SERIAL_NUMBER": lambda: str(profile.serial_number),
        "ILLUSTRATOR": lambda: profile.illustrator,
        "RARITY_SYMBOL": lambda: RARITY_SYMBOLS[profile.rarity],
        "FLAVOR_TEXT": lambda: profile.flavor_text,
        "RARITY": lambda: profile.rarity,
        "RARITY_TREATMENT": lambda: treatments[profile.rarity],
    }


def render_template(template: str, values: Mapping[str, Callable[[], str]]) -> str:
    """Replace every token in ``template``; an unknown token raises ``KeyError``."""

    def _substitute(match: "re.Match[str]") -> str:
        token = match.group(1)
        if token not in values:
            raise KeyError(f"Layout template references unknown placeholder [{token}]")
        return values[token]()

    return TOKEN_PATTERN.sub(_substitute, template)


def assemble_prompt(
    profile: FullCardProfile,
    treatments: Optional[Mapping[str, str]] = None,
    template: str = CARD_LAYOUT_TEMPLATE,
) -> AssembledPrompt:
    """Combine a finalized profile with the layout template."""
    values = placeholder_values(profile, treatments if treatments is not None else RARITY_TREATMENTS)
    return AssembledPrompt(prompt=render_template(template, values), layout_version=LAYOUT_VERSION)
