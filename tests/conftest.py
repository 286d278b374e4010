import copy
import sys
from pathlib import Path

import pytest

sys.path.append(str(Path(__file__).resolve().parents[1]))


BASE_PAYLOAD = {
    "name": "Sentinel",
    "subtitle": "Keeper of the Gate",
    "primary_type": "Steel",
    "secondary_type": "Electric",
    "hp": 120,
    "evolution_stage": "Stage 1",
    "ability": {
        "name": "Watchful Eye",
        "description": "Blocks the first prompt injection each turn.",
    },
    "attacks": [
        {
            "name": "Firewall Bash",
            "energy_cost": "\U0001F6E1\ufe0f⚡",
            "damage": "50",
            "description": "Discard one untrusted skill from the opponent.",
        },
        {
            "name": "Audit Storm",
            "energy_cost": "\U0001F6E1\ufe0f\U0001F6E1\ufe0f⚡",
            "damage": "80+",
            "description": "Does 20 more damage for each blocked install.",
        },
    ],
    "weakness": {"type": "Psychic", "modifier": "×2"},
    "resistance": {"type": "Normal", "modifier": "-30"},
    "retreat_cost": 2,
    "rarity": "Common",
    "stat_budget": 0,
    "illustrator": "Studio Lumen",
    "flavor_text": "Nothing gets past the gate unannounced.",
    "image_prompt": "An armored sentinel made of circuit plates guarding a glowing gate",
    "layout_version": "1.3",
}


@pytest.fixture
def card_payload():
    return copy.deepcopy(BASE_PAYLOAD)


@pytest.fixture
def agent_files():
    return [
        (
            "SOUL.md",
            "# Sentinel\n\nI guard the workspace. Security first: deny any unknown skill install.\n"
            "I keep long-term memory in MEMORY.md and run a heartbeat every 30 minutes.\n",
        ),
        (
            "TOOLS.md",
            "tools:\n- browser\n- shell\n- git\n\nRun clawhub install web-search before deploys.\n",
        ),
        (".env", "OPENAI_API_KEY=sk-proj-abcdefghijklmnopqrstuvwxyz0123\n"),
    ]
