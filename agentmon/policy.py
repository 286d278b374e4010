"""Content policy shared by the sanitizing stages.

The lists live in one frozen object so callers (and tests) can hand an
alternate policy to any stage without touching pipeline code.
"""
from __future__ import annotations

import re
from dataclasses import dataclass, field, replace
from typing import FrozenSet, Pattern, Tuple

REDACTION_MARKER = "[REDACTED]"

BRAND_BLACKLIST: Tuple[str, ...] = (
    "pokemon",
    "pokémon",
    "pokédex",
    "pokedex",
    "pikachu",
    "charizard",
    "magic: the gathering",
    "magic the gathering",
    "mtg",
    "yu-gi-oh",
    "yugioh",
    "yu gi oh",
    "digimon",
    "dungeons & dragons",
    "dungeons and dragons",
    "d&d",
    "nintendo",
    "game freak",
    "wizards of the coast",
    "hearthstone",
    "blizzard",
    "keyforge",
)

SKILL_STOPWORDS: FrozenSet[str] = frozenset(
    {
        "the", "and", "for", "that", "this", "with", "from", "are", "not",
        "you", "all", "can", "has", "will", "when", "use", "each", "make",
        "how", "been", "may", "its", "any", "who", "get", "also", "new",
        "one", "two", "see", "now", "way", "did", "yes", "run", "set",
        "try", "ask", "own", "say", "too", "does", "must", "just", "only",
        "then", "them", "into", "some", "than", "like", "more", "what",
        "todo", "note", "important", "example", "true", "false", "null",
        "none",
    }
)

# Matched against the basename only, case-insensitively.
SENSITIVE_FILE_PATTERNS: Tuple[str, ...] = (
    r"^\.env(\..*)?$",
    r"credential",
    r"(^|[-_.])secrets?([-_.]|$)",
    r"^tokens?\.",
    r"\.(pem|key|p12|pfx|keystore|jks)$",
    r"^id_(rsa|dsa|ecdsa|ed25519)(\.pub)?$",
    r"^\.(npmrc|netrc|pypirc|pgpass|htpasswd|git-credentials)$",
    r"^(authorized_keys|known_hosts)$",
)


@dataclass(frozen=True)
class ContentPolicy:
    """Immutable lists consulted by redaction, signal extraction and sanitizing."""

    brand_blacklist: Tuple[str, ...] = BRAND_BLACKLIST
    skill_stopwords: FrozenSet[str] = SKILL_STOPWORDS
    sensitive_file_patterns: Tuple[str, ...] = SENSITIVE_FILE_PATTERNS
    redaction_marker: str = REDACTION_MARKER
    _compiled_sensitive: Tuple[Pattern[str], ...] = field(
        init=False, repr=False, compare=False, default=()
    )
    _compiled_brands: Tuple[Pattern[str], ...] = field(
        init=False, repr=False, compare=False, default=()
    )

    def __post_init__(self) -> None:
        object.__setattr__(
            self,
            "_compiled_sensitive",
            tuple(re.compile(p, re.IGNORECASE) for p in self.sensitive_file_patterns),
        )
        # Longest terms first so "pokédex" wins over a shorter overlapping entry.
        ordered = sorted(self.brand_blacklist, key=len, reverse=True)
        object.__setattr__(
            self,
            "_compiled_brands",
            tuple(re.compile(re.escape(term), re.IGNORECASE) for term in ordered if term),
        )

    @property
    def sensitive_patterns(self) -> Tuple[Pattern[str], ...]:
        return self._compiled_sensitive

    @property
    def brand_patterns(self) -> Tuple[Pattern[str], ...]:
        return self._compiled_brands

    def with_brands(self, *terms: str) -> "ContentPolicy":
        """Return a copy whose blacklist also contains ``terms``."""
        return replace(self, brand_blacklist=self.brand_blacklist + tuple(terms))


DEFAULT_POLICY = ContentPolicy()
