"""Derive structured signals from sanitized agent configuration text."""
from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Iterable, List, Optional, Pattern, Sequence, Tuple

from .models import ContentDepth
from .policy import DEFAULT_POLICY, ContentPolicy
from .redaction import redact_submission
from .utils import basename, dedupe_preserve_order, get_logger, stable_hash

LOGGER = get_logger(__name__)

NAME_PRIORITY_FILES = ("identity.md", "soul.md", "readme.md")

NAME_PATTERNS: Tuple[Pattern[str], ...] = (
    re.compile(r"^#\s+(.+)$", re.MULTILINE),
    re.compile(r"name:\s*(.+)", re.IGNORECASE),
    re.compile(r"^##\s+(.+)$", re.MULTILINE),
)

INSTALL_PATTERN = re.compile(r"clawhub[@\w.]*\s+install\s+([\w-]+)", re.IGNORECASE)
LIST_ITEM_PATTERN = re.compile(r"^[ \t]*[-*]\s+([\w][\w-]{2,})[ \t]*(?:$|[-—:])", re.MULTILINE)
SKILL_PATH_PATTERN = re.compile(r"skills/[\w-]+/([\w-]+)", re.IGNORECASE)

SECURITY_PATTERNS = (
    r"security",
    r"\bblock\b.*\b(skill|install|prompt)\b",
    r"\b(deny|reject|forbidden)\b",
    r"prompt.?injection",
    r"allowlist",
    r"blocklist",
    r"\bsandbox",
    r"trust.*level",
    r"\baudit\b",
)

SCHEDULE_PATTERNS = (
    r"\bcron\b",
    r"heartbeat",
    r"schedule[ds]?\s*(task|job|run)",
    r"\bevery\s+\d+\s*(minute|hour|day|morning|evening)",
    r"daily\s*(scan|check|run|task|report)",
    r"at\s+\d{1,2}:\d{2}",
)

MEMORY_PATTERNS = (
    r"memory\.md",
    r"long.?term\s*memory",
    r"persistent\s*memory",
    r"\bremember\b.*\b(across|between|sessions)\b",
    r"memory\s*(system|store|layer|bank)",
    r"daily\s*persist",
)

ORCHESTRATION_PATTERNS = (
    r"sub.?agent",
    r"\bswarm\b",
    r"orchestrat",
    r"multi.?agent",
    r"agent.?fleet",
    r"delegate.*agent",
    r"spawn.*agent",
)

MULTI_MACHINE_PATTERNS = (
    r"multi.?machine",
    r"remote\s*(server|machine|host)",
    r"\bssh\b.*\b(tunnel|connect|remote)\b",
    r"distributed",
    r"cross.?machine",
    r"\btailnet\b",
    r"\bcluster\b",
)

TOOL_REFERENCE_PATTERN = re.compile(r"(?:mcp|server|tool)[-_\s]*[\"']?([\w-]+)[\"']?", re.IGNORECASE)
TOOL_LIST_PATTERN = re.compile(r"tools?:[ \t]*\n((?:[ \t]*[-*]\s+.+\n?)+)", re.IGNORECASE)
TOOL_LIST_ITEM = re.compile(r"^[ \t]*[-*]\s+", re.MULTILINE)
MAX_TOOL_COUNT = 50

FILE_MARKER = "--- FILE: {name} ---\n"


@dataclass(frozen=True)
class SanitizedInput:
    """Redacted text plus everything derived from it."""

    raw_text: str
    file_names: List[str]
    agent_name: Optional[str]
    fallback_name: str
    skill_slugs: List[str]
    has_security_rules: bool
    has_cron_tasks: bool
    has_memory_system: bool
    has_subagent_orchestration: bool
    has_multi_machine_setup: bool
    tool_count: int
    content_depth: ContentDepth
    total_content_length: int
    file_count: int
    dropped_files: List[str] = field(default_factory=list)

    @property
    def display_name(self) -> str:
        return self.agent_name or self.fallback_name


def extract_agent_name(files: Sequence[Tuple[str, str]]) -> Optional[str]:
    """Look for a name in IDENTITY.md, then SOUL.md, then README.md."""
    by_name = {}
    for name, content in files:
        by_name.setdefault(basename(name).lower(), content)

    for priority in NAME_PRIORITY_FILES:
        content = by_name.get(priority)
        if content is None:
            continue
        for pattern in NAME_PATTERNS:
            match = pattern.search(content)
            if match and match.group(1).strip():
                return match.group(1).strip()
    return None


def generate_name_number(text: str) -> int:
    """Deterministic number in 1..999 used when no agent name was found."""
    return stable_hash(text) % 999 + 1


def extract_skill_slugs(raw_text: str, policy: ContentPolicy = DEFAULT_POLICY) -> List[str]:
    slugs: List[str] = []

    for match in INSTALL_PATTERN.finditer(raw_text):
        slugs.append(match.group(1).lower())

    for match in LIST_ITEM_PATTERN.finditer(raw_text):
        candidate = match.group(1).lower()
        if candidate not in policy.skill_stopwords and len(candidate) > 2:
            slugs.append(candidate)

    for match in SKILL_PATH_PATTERN.finditer(raw_text):
        slugs.append(match.group(1).lower())

    return dedupe_preserve_order(slugs)


def _matches_any(text: str, patterns: Iterable[str]) -> bool:
    return any(re.search(p, text, re.IGNORECASE) for p in patterns)


def has_security_rules(text: str) -> bool:
    return _matches_any(text, SECURITY_PATTERNS)


def has_cron_tasks(text: str) -> bool:
    return _matches_any(text, SCHEDULE_PATTERNS)


def has_memory_system(text: str) -> bool:
    return _matches_any(text, MEMORY_PATTERNS)


def has_subagent_orchestration(text: str) -> bool:
    return _matches_any(text, ORCHESTRATION_PATTERNS)


def has_multi_machine_setup(text: str) -> bool:
    return _matches_any(text, MULTI_MACHINE_PATTERNS)


def count_tools(raw_text: str) -> int:
    """Estimate how many distinct tools or MCP servers the agent references."""
    references = {m.group(1).lower() for m in TOOL_REFERENCE_PATTERN.finditer(raw_text)}
    count = len(references)

    for match in TOOL_LIST_PATTERN.finditer(raw_text):
        items = TOOL_LIST_ITEM.findall(match.group(1))
        count = max(count, len(items))

    return min(count, MAX_TOOL_COUNT)


def calculate_content_depth(total_length: int, file_count: int) -> ContentDepth:
    """Classify how much material was supplied.

    Under 200 characters is always minimal; a single file under 500
    characters is minimal; 4+ files or 5000+ characters is rich.
    """
    if total_length < 200:
        return "minimal"
    if file_count <= 1 and total_length < 500:
        return "minimal"
    if file_count >= 4 or total_length >= 5000:
        return "rich"
    return "moderate"


def concatenate_files(files: Sequence[Tuple[str, str]]) -> str:
    return "\n\n".join(
        FILE_MARKER.format(name=basename(name)) + content for name, content in files
    )


def prepare_submission(
    files: Iterable[Tuple[str, str]], policy: ContentPolicy = DEFAULT_POLICY
) -> SanitizedInput:
    """Turn raw (filename, content) pairs into a :class:`SanitizedInput`."""
    kept, dropped = redact_submission(files, policy)
    if dropped:
        LOGGER.warning("Excluded %d sensitive file(s): %s", len(dropped), ", ".join(dropped))

    raw_text = concatenate_files(kept)
    total_length = sum(len(content) for _, content in kept)
    file_count = len(kept)

    return SanitizedInput(
        raw_text=raw_text,
        file_names=[basename(name) for name, _ in kept],
        agent_name=extract_agent_name(kept),
        fallback_name=f"Agent #{generate_name_number(raw_text)}",
        skill_slugs=extract_skill_slugs(raw_text, policy),
        has_security_rules=has_security_rules(raw_text),
        has_cron_tasks=has_cron_tasks(raw_text),
        has_memory_system=has_memory_system(raw_text),
        has_subagent_orchestration=has_subagent_orchestration(raw_text),
        has_multi_machine_setup=has_multi_machine_setup(raw_text),
        tool_count=count_tools(raw_text),
        content_depth=calculate_content_depth(total_length, file_count),
        total_content_length=total_length,
        file_count=file_count,
        dropped_files=dropped,
    )
