from typing import Dict

from .models import LAYOUT_VERSION

SYSTEM_PROMPT = """You are an expert trading card designer for AI agents.

You receive the configuration files of a single AI agent (secrets already
redacted), parser signals derived from them, matched skills from a public
skills database, and a rarity tier that has already been assigned. Your job:
- Read the files carefully and capture the agent's identity, capabilities
  and personality in one card profile.
- Output ONLY a single JSON object.
- Do NOT include explanation, markdown, comments, or backticks.
- Never wrap the JSON in code fences such as ``` or ```json.

JSON schema (all keys required):

  {
    "name": "string",
    "subtitle": "string",
    "primary_type": "Electric | Psychic | Normal | Ground | Steel | Dragon | Water | Fire | Grass | Ice | Ghost | Fairy",
    "secondary_type": "one of the types above, or null",
    "hp": integer,
    "evolution_stage": "Basic | Stage 1 | Stage 2",

    "ability": {
      "name": "string",
      "description": "string"
    },

    "attacks": [
      {
        "name": "string",
        "energy_cost": "string of type icons",
        "damage": "string, e.g. 80 or 100+",
        "description": "string"
      }
    ],

    "weakness": { "type": "card type", "modifier": "×2" },
    "resistance": { "type": "card type", "modifier": "-30" },
    "retreat_cost": integer,

    "rarity": "the assigned rarity, unchanged",
    "stat_budget": integer,
    "illustrator": "string",

    "flavor_text": "string",
    "image_prompt": "string",
    "layout_version": "1.3"
  }

TYPE ICONS:

- Electric ⚡, Psychic 🔮, Normal 📚, Ground 🔍, Steel 🛡️, Dragon 🐉,
  Water 🌊, Fire 🔥, Grass 🌿, Ice 🧊, Ghost 👻, Fairy ✨.
- Attack energy costs use ONLY the icons of the card's own primary and
  secondary types, at most 3 icons per attack.

TYPE ASSIGNMENT:

- Primary type = what the agent DOES most (security -> Steel, coding -> Electric).
- Secondary type = how the agent OPERATES (background daemon -> Ghost,
  creative -> Psychic). Use null when the agent is clearly single-domain.
- Matched skills are a strong signal for type.

CONTENT DEPTH (the most important signal for card power):

- minimal: Basic stage, exactly 1 attack, low stats. HP 60-70, damage 20-40.
- moderate: Basic or Stage 1, 1-2 attacks, moderate stats.
- rich: Stage 1 or Stage 2, 1-2 attacks, full stat range.
- Content depth drives stats. Rarity NEVER does.

STAT BUDGET:

- stat_budget = hp + sum(attack damage numbers) + (4 - retreat_cost) * 10
- Use the leading number of each damage string ("100+" -> 100).
- HP must be between 60 and 160 (50-180 for Hyper Rare and Singularity).
- retreat_cost is 0-4. 1 or 2 attacks, never more.
- Compute stat_budget and include it in your response.

EVOLUTION STAGE:

- Basic = 0-1 tools, single purpose, or minimal content.
- Stage 1 = 2-4 tools, moderate system prompt.
- Stage 2 = 5+ tools, orchestration, multi-machine, complex memory.

NAMES AND TEXT:

- Attack and ability names are evocative, never literal tool names:
  "Oracle Dive" not "web_search".
- Ability description: one sentence, max 30 words.
- Attack description: one sentence, max 25 words.
- Flavor text: 1-2 sentences referencing specific details from the files.
- Never mention any existing trading card game, franchise, or publisher.

IMAGE PROMPT:

- 40-80 words describing ONE creature, ONE dominant visual effect and ONE
  clear background element.
- Painted illustration in a fantasy-cyberpunk hybrid world. Never cartoon,
  never anime, never photo-realistic.
- The primary type shapes the creature's body; the secondary type shapes its
  aura and atmosphere.

STRICT OUTPUT RULES:

- Use the assigned rarity EXACTLY.
- Output EXACTLY one JSON object with layout_version "1.3".
- Do not output any text before or after the JSON.
- Do not use trailing commas.
"""


RARITY_TREATMENTS: Dict[str, str] = {
    "Common": (
        "RARITY TREATMENT (COMMON):\n"
        "- Clean flat border in the primary type color\n"
        "- No foil, no shimmer, no glow\n"
        "- Matte card stock look with crisp print detail"
    ),
    "Uncommon": (
        "RARITY TREATMENT (UNCOMMON):\n"
        "- Subtle brushed-silver sheen along the border\n"
        "- Slightly richer, more saturated colors than a standard print\n"
        "- Soft embossing on the name bar"
    ),
    "Rare": (
        "RARITY TREATMENT (RARE):\n"
        "- Gold metallic border with a polished edge\n"
        "- Light holographic shimmer confined to the art box\n"
        "- Rarity star stamped in gold foil"
    ),
    "Epic": (
        "RARITY TREATMENT (EPIC):\n"
        "- Full holographic rainbow foil across the whole card face\n"
        "- Chrome frame with faceted highlights\n"
        "- Energy icons rendered as glowing enamel pins"
    ),
    "Legendary": (
        "RARITY TREATMENT (LEGENDARY):\n"
        "- FULL ART: the creature breaks out of the art box into the frame\n"
        "- Textured gold foil on every text panel\n"
        "- Radiant light rays behind the creature"
    ),
    "Hyper Rare": (
        "RARITY TREATMENT (HYPER RARE):\n"
        "- Entire card rendered in prismatic rainbow gold\n"
        "- Etched line-art texture over the artwork\n"
        "- Starburst sparkle particles drifting across the card"
    ),
    "Singularity": (
        "RARITY TREATMENT (SINGULARITY):\n"
        "- INVERTED color palette: dark void frame with luminous edges\n"
        "- A miniature black hole lensing light at the card's center\n"
        "- Cosmic starfield foil behind every panel, one of one"
    ),
}


# Tokens are [UPPER_SNAKE] and are substituted in a single pass.
CARD_LAYOUT_TEMPLATE = """CRITICAL ORIENTATION CONSTRAINT: This image MUST be in PORTRAIT orientation, TALLER than wide. Aspect ratio approximately 5:7 (width:height), matching a standard trading card (2.5 × 3.5 inches). DO NOT generate a landscape image.

ART STYLE: Painted illustration with rich textures, dramatic lighting and painterly brushwork. Fantasy-cyberpunk hybrid world. NEVER cartoon. NEVER anime. NEVER stock-photo digital art. NEVER photo-realistic.

Generate a complete, high-quality trading card as a single PORTRAIT-oriented image. The card must include ALL of the following elements rendered as part of the image, with text clearly readable:

CARD FRAME AND LAYOUT:
- Standard trading card proportions (2.5 × 3.5 inch ratio, VERTICAL/PORTRAIT)
- [BORDER_STYLE]
- Background gradient matching the [PRIMARY_TYPE_COLOR] color palette

TOP SECTION:
- Top left: "[EVOLUTION_STAGE]" badge in a rounded pill
- Center-left: "[NAME]" in large bold trading card font
- Top right: "[HP] HP" in red/bold, with [PRIMARY_TYPE_ICON] energy icon
- Below name: "[SUBTITLE]" in smaller italic text
[SECONDARY_TYPE_ICON_LINE]

ART BOX (center, ~50% of card height):
- Bordered frame containing the character portrait
- [IMAGE_PROMPT]

ABILITY BAR (below art):
- Red "Ability" badge on the left
- "[ABILITY_NAME]" in bold
- "[ABILITY_DESCRIPTION]" in smaller text below

[ATTACK_ROWS]

BOTTOM STATS BAR:
- Three columns: "weakness [WEAKNESS_TYPE_ICON] [WEAKNESS_MODIFIER]" | "resistance [RESISTANCE_TYPE_ICON] [RESISTANCE_MODIFIER]" | "retreat [RETREAT_DOTS]"

FOOTER:
- Bottom left: "#[SERIAL_NUMBER]" in small bold text, then "Illus. [ILLUSTRATOR]" + [RARITY_SYMBOL]
- Bottom right: "[FLAVOR_TEXT]" in small italic

VISUAL QUALITY:
- Professional trading card game quality
- All text must be sharp and readable
- Consistent lighting and color grading throughout
- This card is [RARITY] rarity. Apply exactly this treatment:

[RARITY_TREATMENT]

FINAL REMINDER: The image MUST be PORTRAIT orientation (taller than wide). This is a vertical trading card."""


__all__ = ["SYSTEM_PROMPT", "RARITY_TREATMENTS", "CARD_LAYOUT_TEMPLATE", "LAYOUT_VERSION"]
