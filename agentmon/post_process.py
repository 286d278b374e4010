import json
import re
from typing import Any, Dict, List, Optional, Pattern, Tuple

from pydantic import ValidationError

from .errors import ProfileValidationError, UpstreamFormatError
from .models import TYPE_METADATA, Attack, CardProfile
from .policy import DEFAULT_POLICY, ContentPolicy
from .rarity import has_expanded_variance
from .utils import get_logger

LOGGER = get_logger(__name__)

# Keys emitted by older prompt versions; dropped along with any other unknown key.
DEPRECATED_FIELDS = ("card_number", "set_name", "rarity_score")

STANDARD_HP_BAND = (60, 160)
EXPANDED_HP_BAND = (50, 180)

MAX_ENERGY_ICONS = 3
VARIATION_SELECTOR = "\ufe0f"

_LEADING_INT = re.compile(r"^(\d+)")
_WHITESPACE_RUN = re.compile(r"\s{2,}")


def strip_markdown_fences(text: str) -> str:
    """Remove ``` or ```json fences if the model insists on adding them."""
    text = text.strip()

    # Remove opening ``` or ```json
    if text.startswith("```"):
        first_newline = text.find("\n")
        if first_newline != -1:
            text = text[first_newline + 1 :].strip()

    # Remove trailing ```
    if text.endswith("```"):
        text = text[:-3].strip()

    return text


def parse_profile_json(raw_text: str) -> Dict[str, Any]:
    """Parse upstream text into a JSON object or raise :class:`UpstreamFormatError`."""
    cleaned = strip_markdown_fences(raw_text or "")
    try:
        parsed = json.loads(cleaned)
    except json.JSONDecodeError as exc:
        LOGGER.debug("Unparseable upstream text: %s", cleaned[:500])
        raise UpstreamFormatError(
            f"Failed to parse generator response as JSON: {exc.msg}", raw_text=raw_text
        ) from exc

    if not isinstance(parsed, dict):
        raise UpstreamFormatError(
            f"Generator response is a JSON {type(parsed).__name__}, expected an object",
            raw_text=raw_text,
        )
    return parsed


# ----------------------------------------------------------------------
# Validation


def _format_violation(error: Dict[str, Any]) -> str:
    location = ".".join(str(part) for part in error.get("loc", ())) or "<root>"
    return f"{location}: {error.get('msg', 'invalid value')}"


def validate_card_profile(payload: Dict[str, Any], rarity: str) -> CardProfile:
    """Validate an upstream object against the card profile contract.

    Unknown and deprecated keys are dropped. ``rarity`` always replaces whatever
    the payload carried. All violations are reported together.
    """
    if not isinstance(payload, dict):
        raise ProfileValidationError([f"<root>: expected an object, got {type(payload).__name__}"])

    prepared: Dict[str, Any] = dict(payload)
    for key in DEPRECATED_FIELDS:
        prepared.pop(key, None)
    prepared.setdefault("stat_budget", 0)

    if prepared.get("rarity") != rarity:
        LOGGER.info("Overriding generated rarity %r with assigned %s", prepared.get("rarity"), rarity)
    prepared["rarity"] = rarity

    try:
        return CardProfile.model_validate(prepared)
    except ValidationError as exc:
        violations = [_format_violation(error) for error in exc.errors()]
        raise ProfileValidationError(violations, payload=payload) from exc


# ----------------------------------------------------------------------
# Stat budget


def parse_leading_int(damage: str) -> int:
    """Leading digit run of a damage string: "100+" -> 100, "30x2" -> 30, else 0."""
    match = _LEADING_INT.match(damage or "")
    return int(match.group(1)) if match else 0


def compute_stat_budget(hp: int, damages: List[str], retreat_cost: int) -> int:
    return hp + sum(parse_leading_int(d) for d in damages) + (4 - retreat_cost) * 10


def profile_stat_budget(profile: CardProfile) -> int:
    return compute_stat_budget(
        profile.hp, [attack.damage for attack in profile.attacks], profile.retreat_cost
    )


def hp_band(rarity: str) -> Tuple[int, int]:
    return EXPANDED_HP_BAND if has_expanded_variance(rarity) else STANDARD_HP_BAND


def clamp_stats(profile: CardProfile) -> CardProfile:
    """Clamp hp into the rarity band and recompute stat_budget."""
    low, high = hp_band(profile.rarity)
    hp = max(low, min(high, profile.hp))
    if hp != profile.hp:
        LOGGER.info("Clamped hp %d -> %d for %s", profile.hp, hp, profile.rarity)

    budget = compute_stat_budget(hp, [a.damage for a in profile.attacks], profile.retreat_cost)
    return profile.model_copy(update={"hp": hp, "stat_budget": budget})


# ----------------------------------------------------------------------
# Brand sanitizing


def strip_brands(text: str, policy: ContentPolicy = DEFAULT_POLICY) -> str:
    """Remove blacklisted terms; whitespace is only tidied when something was removed.

    Removal and whitespace collapsing repeat until the text is stable, since
    collapsing can join words into another blacklisted phrase.
    """
    result = text
    while True:
        before = result
        for pattern in policy.brand_patterns:
            result = pattern.sub("", result)
        if result == before:
            break
        result = _WHITESPACE_RUN.sub(" ", result).strip()
    return result


def sanitize_brand_names(profile: CardProfile, policy: ContentPolicy = DEFAULT_POLICY) -> CardProfile:
    update: Dict[str, Any] = {}
    for field in ("name", "subtitle", "flavor_text", "image_prompt", "illustrator"):
        value = getattr(profile, field)
        cleaned = strip_brands(value, policy)
        if cleaned != value:
            update[field] = cleaned

    ability = profile.ability.model_copy(
        update={
            "name": strip_brands(profile.ability.name, policy),
            "description": strip_brands(profile.ability.description, policy),
        }
    )
    attacks = [
        attack.model_copy(
            update={
                "name": strip_brands(attack.name, policy),
                "description": strip_brands(attack.description, policy),
            }
        )
        for attack in profile.attacks
    ]

    if update or ability != profile.ability or attacks != profile.attacks:
        LOGGER.info("Removed blacklisted terms from %s", profile.name)
    update["ability"] = ability
    update["attacks"] = attacks
    return profile.model_copy(update=update)


# ----------------------------------------------------------------------
# Energy cost


def _icon_pattern() -> Pattern[str]:
    # Icons such as the Steel shield carry a variation selector that models
    # often drop, so it is optional when matching.
    alternatives = []
    for info in TYPE_METADATA.values():
        base = info.icon.rstrip(VARIATION_SELECTOR)
        alternatives.append(re.escape(base) + VARIATION_SELECTOR + "?")
    return re.compile("|".join(alternatives))


ICON_PATTERN = _icon_pattern()
_ICON_BY_BASE = {info.icon.rstrip(VARIATION_SELECTOR): info.icon for info in TYPE_METADATA.values()}


def find_energy_icons(energy_cost: str) -> List[str]:
    """Recognized type icons in order of appearance, in canonical form."""
    return [_ICON_BY_BASE[m.group(0).rstrip(VARIATION_SELECTOR)] for m in ICON_PATTERN.finditer(energy_cost or "")]


def correct_energy_cost(energy_cost: str, primary_icon: str, secondary_icon: Optional[str] = None) -> str:
    allowed = {primary_icon}
    if secondary_icon:
        allowed.add(secondary_icon)

    icons = find_energy_icons(energy_cost)
    if not icons:
        return primary_icon

    corrected = [icon if icon in allowed else primary_icon for icon in icons[:MAX_ENERGY_ICONS]]
    return "".join(corrected)


def enforce_energy_cost(profile: CardProfile) -> CardProfile:
    primary_icon = TYPE_METADATA[profile.primary_type].icon
    secondary_icon = TYPE_METADATA[profile.secondary_type].icon if profile.secondary_type else None

    attacks: List[Attack] = []
    for attack in profile.attacks:
        corrected = correct_energy_cost(attack.energy_cost, primary_icon, secondary_icon)
        if corrected != attack.energy_cost:
            LOGGER.debug("Energy cost for %s: %r -> %r", attack.name, attack.energy_cost, corrected)
        attacks.append(attack.model_copy(update={"energy_cost": corrected}))

    return profile.model_copy(update={"attacks": attacks})


# ----------------------------------------------------------------------


def post_process_card_profile(
    data: Dict[str, Any], rarity: str, policy: ContentPolicy = DEFAULT_POLICY
) -> CardProfile:
    """Validate raw generator output and apply the correction chain in order."""
    profile = validate_card_profile(data, rarity)
    profile = clamp_stats(profile)
    profile = sanitize_brand_names(profile, policy)
    profile = enforce_energy_cost(profile)
    return profile
