"""Orchestrate one card: sanitize input, generate, post-process, render the prompt."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Iterable, Optional, Tuple

from .assemble import AssembledPrompt, assemble_prompt
from .client import GenerationRequest
from .models import CardProfile, FullCardProfile
from .policy import DEFAULT_POLICY, ContentPolicy
from .post_process import parse_profile_json, post_process_card_profile
from .rarity import RarityAllocator
from .signals import prepare_submission
from .skills import SkillLibrary
from .utils import get_logger

LOGGER = get_logger(__name__)

TextGenerator = Callable[[GenerationRequest], str]


@dataclass(frozen=True)
class CardResult:
    profile: FullCardProfile
    prompt: AssembledPrompt


def attach_serial(profile: CardProfile, serial_number: int) -> FullCardProfile:
    """Promote a finalized profile; its fields were validated upstream and are not re-checked."""
    if serial_number < 1:
        raise ValueError(f"serial_number must be >= 1, got {serial_number}")
    fields = {name: getattr(profile, name) for name in CardProfile.model_fields}
    return FullCardProfile.model_construct(**fields, serial_number=serial_number)


class CardPipeline:
    """Run the card profile stages in order for a single submission."""

    def __init__(
        self,
        generator: TextGenerator,
        skill_library: Optional[SkillLibrary] = None,
        allocator: Optional[RarityAllocator] = None,
        policy: ContentPolicy = DEFAULT_POLICY,
    ) -> None:
        self.generator = generator
        self.skill_library = skill_library
        self.allocator = allocator or RarityAllocator()
        self.policy = policy

    def prepare(
        self, files: Iterable[Tuple[str, str]], rarity_override: Optional[str] = None
    ) -> GenerationRequest:
        sanitized = prepare_submission(files, self.policy)
        matched = self.skill_library.lookup_many(sanitized.skill_slugs) if self.skill_library else []
        rarity = self.allocator.allocate(rarity_override)
        LOGGER.info(
            "Prepared %s: %d file(s), depth=%s, %d matched skill(s), rarity=%s",
            sanitized.display_name,
            sanitized.file_count,
            sanitized.content_depth,
            len(matched),
            rarity,
        )
        return GenerationRequest(sanitized=sanitized, rarity=rarity, matched_skills=matched)

    def generate_profile(self, request: GenerationRequest) -> CardProfile:
        raw_text = self.generator(request)
        data = parse_profile_json(raw_text)
        return post_process_card_profile(data, request.rarity, self.policy)

    def run(
        self,
        files: Iterable[Tuple[str, str]],
        serial_number: int,
        rarity_override: Optional[str] = None,
    ) -> CardResult:
        request = self.prepare(files, rarity_override)
        profile = attach_serial(self.generate_profile(request), serial_number)
        return CardResult(profile=profile, prompt=assemble_prompt(profile))
