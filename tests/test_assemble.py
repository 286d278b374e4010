import re

import pytest

from agentmon.assemble import FREE_RETREAT, assemble_prompt, build_retreat_dots, render_template
from agentmon.models import LAYOUT_VERSION, RARITIES
from agentmon.pipeline import attach_serial
from agentmon.post_process import post_process_card_profile
from agentmon.prompts import RARITY_TREATMENTS

UNRESOLVED = re.compile(r"\[[A-Z_]+\]")


def _full_profile(payload, rarity="Rare", serial=42):
    return attach_serial(post_process_card_profile(payload, rarity), serial)


def test_every_placeholder_is_resolved(card_payload):
    assembled = assemble_prompt(_full_profile(card_payload))

    assert not UNRESOLVED.search(assembled.prompt)
    assert assembled.layout_version == LAYOUT_VERSION == "1.3"
    assert '"Sentinel"' in assembled.prompt
    assert '"#42"' in assembled.prompt
    assert '"80+" in large bold text' in assembled.prompt


@pytest.mark.parametrize("rarity", RARITIES)
def test_only_the_matching_treatment_is_included(card_payload, rarity):
    prompt = assemble_prompt(_full_profile(card_payload, rarity)).prompt

    assert RARITY_TREATMENTS[rarity] in prompt
    for other, treatment in RARITY_TREATMENTS.items():
        if other != rarity:
            assert treatment not in prompt


def test_common_card_has_no_foil_language(card_payload):
    prompt = assemble_prompt(_full_profile(card_payload, "Common")).prompt

    assert "No foil, no shimmer, no glow" in prompt
    assert "Gold metallic border" not in prompt


def test_free_retreat_text(card_payload):
    card_payload["retreat_cost"] = 0

    prompt = assemble_prompt(_full_profile(card_payload)).prompt

    assert f'"retreat {FREE_RETREAT}"' in prompt


def test_retreat_dots():
    assert build_retreat_dots(0) == FREE_RETREAT
    assert build_retreat_dots(3) == "⚪ ⚪ ⚪"


def test_single_type_card_never_mentions_a_second_icon(card_payload):
    card_payload["secondary_type"] = None

    prompt = assemble_prompt(_full_profile(card_payload)).prompt

    secondary_line = next(line for line in prompt.splitlines() if "Single-type card" in line)
    assert " and " not in secondary_line
    assert "Gradient border" not in prompt


def test_dual_type_card_uses_gradient_border(card_payload):
    prompt = assemble_prompt(_full_profile(card_payload)).prompt

    assert "Gradient border transitioning from Steel" in prompt
    assert "Electric type icon" in prompt


def test_values_containing_tokens_are_not_rescanned(card_payload):
    card_payload["name"] = "[RARITY] Bot"
    card_payload["flavor_text"] = "Ask me about [RARITY_SYMBOL]."

    prompt = assemble_prompt(_full_profile(card_payload, "Epic")).prompt

    assert '"[RARITY] Bot"' in prompt
    assert '"Ask me about [RARITY_SYMBOL]."' in prompt


def test_unknown_placeholder_raises():
    with pytest.raises(KeyError):
        render_template("Hello [MISSING]", {"NAME": lambda: "x"})


def test_custom_treatments_are_used(card_payload):
    treatments = {rarity: f"custom {rarity} treatment" for rarity in RARITIES}

    prompt = assemble_prompt(_full_profile(card_payload, "Epic"), treatments=treatments).prompt

    assert "custom Epic treatment" in prompt
    assert "custom Rare treatment" not in prompt
