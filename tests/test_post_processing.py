import json

import pytest

from agentmon.errors import ProfileValidationError, UpstreamFormatError
from agentmon.models import TYPE_METADATA
from agentmon.policy import DEFAULT_POLICY
from agentmon.post_process import (
    clamp_stats,
    compute_stat_budget,
    correct_energy_cost,
    find_energy_icons,
    parse_leading_int,
    parse_profile_json,
    post_process_card_profile,
    sanitize_brand_names,
    strip_brands,
    strip_markdown_fences,
    validate_card_profile,
)

STEEL = TYPE_METADATA["Steel"].icon
ELECTRIC = TYPE_METADATA["Electric"].icon
FIRE = TYPE_METADATA["Fire"].icon


def test_strip_markdown_fences():
    assert strip_markdown_fences('```json\n{"a": 1}\n```') == '{"a": 1}'
    assert strip_markdown_fences('{"a": 1}') == '{"a": 1}'


def test_parse_profile_json_accepts_fenced_object(card_payload):
    raw = "```json\n" + json.dumps(card_payload) + "\n```"

    assert parse_profile_json(raw)["name"] == "Sentinel"


@pytest.mark.parametrize("raw", ["not json at all", "[1, 2, 3]", ""])
def test_parse_profile_json_rejects_non_objects(raw):
    with pytest.raises(UpstreamFormatError) as excinfo:
        parse_profile_json(raw)

    assert excinfo.value.raw_text == raw


def test_validation_reports_every_violation(card_payload):
    card_payload["hp"] = 999
    card_payload["retreat_cost"] = 9
    card_payload["primary_type"] = "Cosmic"
    del card_payload["subtitle"]

    with pytest.raises(ProfileValidationError) as excinfo:
        validate_card_profile(card_payload, "Common")

    fields = {violation.split(":")[0] for violation in excinfo.value.violations}
    assert {"hp", "retreat_cost", "primary_type", "subtitle"} <= fields


def test_secondary_type_must_be_present_but_may_be_null(card_payload):
    card_payload["secondary_type"] = None
    assert validate_card_profile(card_payload, "Common").secondary_type is None

    del card_payload["secondary_type"]
    with pytest.raises(ProfileValidationError) as excinfo:
        validate_card_profile(card_payload, "Common")

    assert any(v.startswith("secondary_type:") for v in excinfo.value.violations)


def test_validation_rejects_more_than_two_attacks(card_payload):
    card_payload["attacks"] = card_payload["attacks"] * 2

    with pytest.raises(ProfileValidationError):
        validate_card_profile(card_payload, "Common")


def test_assigned_rarity_replaces_generated_one(card_payload):
    card_payload["rarity"] = "Mythic"

    profile = validate_card_profile(card_payload, "Epic")

    assert profile.rarity == "Epic"


def test_unknown_and_deprecated_fields_are_dropped(card_payload):
    card_payload["card_number"] = 12
    card_payload["set_name"] = "Base"
    card_payload["favorite_color"] = "teal"
    del card_payload["stat_budget"]

    profile = validate_card_profile(card_payload, "Common")
    dumped = profile.model_dump()

    assert "card_number" not in dumped
    assert "favorite_color" not in dumped
    assert dumped["stat_budget"] == 0


def test_parse_leading_int():
    assert parse_leading_int("100+") == 100
    assert parse_leading_int("30x2") == 30
    assert parse_leading_int("") == 0
    assert parse_leading_int("abc") == 0


def test_compute_stat_budget_examples():
    assert compute_stat_budget(100, ["50"], 2) == 170
    assert compute_stat_budget(120, ["40", "80"], 3) == 250
    assert compute_stat_budget(100, ["40", "30+"], 2) == 190


def test_clamp_stats_standard_band(card_payload):
    profile = validate_card_profile(card_payload, "Common").model_copy(update={"hp": 175})

    clamped = clamp_stats(profile)

    assert clamped.hp == 160
    assert clamped.stat_budget == 160 + 50 + 80 + 20


def test_clamp_stats_raises_low_hp(card_payload):
    card_payload["hp"] = 55

    clamped = clamp_stats(validate_card_profile(card_payload, "Rare"))

    assert clamped.hp == 60


def test_clamp_stats_expanded_band_for_rarest_tiers(card_payload):
    card_payload["hp"] = 175

    clamped = clamp_stats(validate_card_profile(card_payload, "Hyper Rare"))

    assert clamped.hp == 175
    assert clamped.stat_budget == 175 + 50 + 80 + 20


def test_clamp_stats_caps_out_of_range_expanded(card_payload):
    profile = validate_card_profile(card_payload, "Singularity").model_copy(update={"hp": 200})

    assert clamp_stats(profile).hp == 180


def test_strip_brands():
    assert strip_brands("Pokemon Guardian") == "Guardian"
    assert strip_brands("The NINTENDO  way") == "The way"
    assert strip_brands("two  spaces stay") == "two  spaces stay"


def test_strip_brands_is_idempotent():
    once = strip_brands("Pokémon Pokédex Keeper of MTG lore")

    assert strip_brands(once) == once
    assert "pok" not in once.lower()


def test_strip_brands_handles_nested_terms():
    # Removing the inner term reveals another one.
    assert strip_brands("pokepikachumon Scout") == "Scout"


def test_strip_brands_removes_phrases_joined_by_whitespace_collapse():
    once = strip_brands("Keeper of Magic the Pokemon Gathering lore")

    assert once == "Keeper of lore"
    assert strip_brands("Magic the Pokemon Gathering") == ""
    assert not any(pattern.search(once) for pattern in DEFAULT_POLICY.brand_patterns)
    assert strip_brands(once) == once


def test_sanitize_brand_names_covers_text_fields(card_payload):
    card_payload["name"] = "Pokémon Sentinel"
    card_payload["attacks"][0]["description"] = "Summons a Digimon ally."
    card_payload["ability"]["name"] = "Yu-Gi-Oh Shield"

    profile = sanitize_brand_names(validate_card_profile(card_payload, "Common"), DEFAULT_POLICY)

    assert profile.name == "Sentinel"
    assert profile.attacks[0].description == "Summons a ally."
    assert profile.ability.name == "Shield"


def test_custom_policy_brand_terms(card_payload):
    card_payload["subtitle"] = "Acme Keeper"
    policy = DEFAULT_POLICY.with_brands("acme")

    profile = sanitize_brand_names(validate_card_profile(card_payload, "Common"), policy)

    assert profile.subtitle == "Keeper"


def test_find_energy_icons_accepts_missing_variation_selector():
    assert find_energy_icons("\U0001F6E1" + ELECTRIC) == [STEEL, ELECTRIC]


def test_correct_energy_cost_replaces_foreign_icons():
    assert correct_energy_cost(FIRE + ELECTRIC, STEEL, ELECTRIC) == STEEL + ELECTRIC


def test_correct_energy_cost_defaults_to_primary_when_empty():
    assert correct_energy_cost("???", STEEL) == STEEL
    assert correct_energy_cost("", STEEL) == STEEL


def test_correct_energy_cost_caps_icon_count():
    assert correct_energy_cost(ELECTRIC * 5, ELECTRIC) == ELECTRIC * 3


def test_post_process_chain(card_payload):
    card_payload["name"] = "Pokemon Sentinel"
    card_payload["attacks"][1]["energy_cost"] = FIRE * 4
    card_payload["rarity"] = "Legendary"

    profile = post_process_card_profile(card_payload, "Common")

    assert profile.rarity == "Common"
    assert profile.name == "Sentinel"
    assert profile.attacks[1].energy_cost == STEEL * 3
    assert profile.stat_budget == 120 + 50 + 80 + 20
