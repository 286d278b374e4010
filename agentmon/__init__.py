"""Agentmon trading card profile pipeline."""

from .models import (
    CARD_TYPES,
    LAYOUT_VERSION,
    RARITIES,
    RARITY_SYMBOLS,
    TYPE_METADATA,
    Ability,
    Attack,
    CardProfile,
    FullCardProfile,
    Resistance,
    SkillRecord,
    TypeInfo,
    Weakness,
)
from .errors import (
    ConfigurationError,
    PipelineError,
    ProfileValidationError,
    UpstreamFormatError,
    describe_error,
)
from .policy import DEFAULT_POLICY, ContentPolicy
from .redaction import is_sensitive_file, redact_secrets, redact_submission
from .signals import SanitizedInput, calculate_content_depth, extract_skill_slugs, prepare_submission
from .rarity import RARITY_WEIGHTS, RarityAllocator, roll_rarity
from .post_process import (
    clamp_stats,
    compute_stat_budget,
    enforce_energy_cost,
    parse_profile_json,
    post_process_card_profile,
    sanitize_brand_names,
    strip_markdown_fences,
    validate_card_profile,
)
from .prompts import CARD_LAYOUT_TEMPLATE, RARITY_TREATMENTS, SYSTEM_PROMPT
from .assemble import AssembledPrompt, assemble_prompt
from .skills import SkillLibrary
from .client import GenerationRequest, OpenAIImageGenerator, OpenAIProfileGenerator, build_user_message
from .image_utils import CardImage, load_card_image
from .pipeline import CardPipeline, CardResult, attach_serial
from .cli import clean_filename, main

__all__ = [
    "CARD_TYPES",
    "LAYOUT_VERSION",
    "RARITIES",
    "RARITY_SYMBOLS",
    "TYPE_METADATA",
    "Ability",
    "Attack",
    "CardProfile",
    "FullCardProfile",
    "Resistance",
    "SkillRecord",
    "TypeInfo",
    "Weakness",
    "ConfigurationError",
    "PipelineError",
    "ProfileValidationError",
    "UpstreamFormatError",
    "describe_error",
    "DEFAULT_POLICY",
    "ContentPolicy",
    "is_sensitive_file",
    "redact_secrets",
    "redact_submission",
    "SanitizedInput",
    "calculate_content_depth",
    "extract_skill_slugs",
    "prepare_submission",
    "RARITY_WEIGHTS",
    "RarityAllocator",
    "roll_rarity",
    "clamp_stats",
    "compute_stat_budget",
    "enforce_energy_cost",
    "parse_profile_json",
    "post_process_card_profile",
    "sanitize_brand_names",
    "strip_markdown_fences",
    "validate_card_profile",
    "CARD_LAYOUT_TEMPLATE",
    "RARITY_TREATMENTS",
    "SYSTEM_PROMPT",
    "AssembledPrompt",
    "assemble_prompt",
    "SkillLibrary",
    "GenerationRequest",
    "OpenAIImageGenerator",
    "OpenAIProfileGenerator",
    "build_user_message",
    "CardImage",
    "load_card_image",
    "CardPipeline",
    "CardResult",
    "attach_serial",
    "clean_filename",
    "main",
]
