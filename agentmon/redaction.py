"""Drop sensitive files and redact secret-shaped substrings from uploaded text.

Everything here is a pure function: the same input always produces the same
output and nothing is written anywhere. Files whose basename looks like a
credential store are excluded entirely; all other content is scanned for
provider keys, bearer tokens, ``KEY=value`` assignments and long opaque
tokens, each replaced by the policy's redaction marker.
"""
from __future__ import annotations

import re
from functools import lru_cache
from typing import Iterable, List, Pattern, Tuple

from .policy import DEFAULT_POLICY, ContentPolicy
from .utils import basename

# Provider-prefixed keys. Applied first so the generic assignment pattern
# below sees the marker instead of the raw value.
PROVIDER_KEY_PATTERNS: Tuple[Pattern[str], ...] = (
    re.compile(r"sk-ant-[A-Za-z0-9_\-]{10,}"),
    re.compile(r"sk-(?:proj-)?[A-Za-z0-9_\-]{20,}"),
    re.compile(r"AIza[0-9A-Za-z_\-]{20,}"),
    re.compile(r"gh[pousr]_[A-Za-z0-9]{20,}"),
    re.compile(r"github_pat_[A-Za-z0-9_]{20,}"),
    re.compile(r"xox[abposr]-[A-Za-z0-9\-]{10,}"),
    re.compile(r"(?:AKIA|ASIA)[0-9A-Z]{16}"),
    re.compile(r"hf_[A-Za-z0-9]{20,}"),
)

# Key names whose final segment is a secret word: API_KEY, db-password,
# apiKey, github_tokens. Words that merely contain one, such as "Keywords"
# or "monkey", are not key names.
SECRET_KEY_NAME = r"\b(?:[A-Za-z0-9]+[_\-])*(?:api[_\-]?)?(?:key|token|secret|password|passwd|pwd)s?"


@lru_cache(maxsize=None)
def marker_guarded_patterns(marker: str) -> Tuple[Pattern[str], Pattern[str]]:
    """Bearer and assignment patterns that skip values already replaced by ``marker``."""
    guard = "(?!" + re.escape(marker) + ")"
    bearer = re.compile(r"(\bBearer\s+)" + guard + r"[A-Za-z0-9._~+/=\-]{8,}", re.IGNORECASE)
    assignment = re.compile(
        "(" + SECRET_KEY_NAME + r"[\"']?\s*[=:]\s*[\"']?)" + guard + r"([^\s\"',;]{8,})",
        re.IGNORECASE,
    )
    return bearer, assignment


# 40+ chars drawn from the base64 alphabet, with at least one lowercase
# letter, one uppercase letter and one digit.
OPAQUE_TOKEN_PATTERN = re.compile(
    r"(?<![A-Za-z0-9+/])"
    r"(?=[A-Za-z0-9+/]*[a-z])(?=[A-Za-z0-9+/]*[A-Z])(?=[A-Za-z0-9+/]*[0-9])"
    r"[A-Za-z0-9+/]{40,}={0,2}"
)


def is_sensitive_file(name: str, policy: ContentPolicy = DEFAULT_POLICY) -> bool:
    """Return True when the basename of ``name`` matches a sensitive-file pattern."""
    base = basename(name)
    return any(pattern.search(base) for pattern in policy.sensitive_patterns)


def redact_secrets(text: str, policy: ContentPolicy = DEFAULT_POLICY) -> str:
    """Replace secret-shaped substrings in ``text`` with the redaction marker."""
    if not text:
        return text
    marker = policy.redaction_marker
    redacted = text
    for pattern in PROVIDER_KEY_PATTERNS:
        redacted = pattern.sub(marker, redacted)
    bearer_pattern, assignment_pattern = marker_guarded_patterns(marker)
    redacted = bearer_pattern.sub(lambda m: m.group(1) + marker, redacted)
    redacted = assignment_pattern.sub(lambda m: m.group(1) + marker, redacted)
    redacted = OPAQUE_TOKEN_PATTERN.sub(marker, redacted)
    return redacted


def redact_submission(
    files: Iterable[Tuple[str, str]], policy: ContentPolicy = DEFAULT_POLICY
) -> Tuple[List[Tuple[str, str]], List[str]]:
    """Split a submission into redacted files and the names of dropped files."""
    kept: List[Tuple[str, str]] = []
    dropped: List[str] = []
    for name, content in files:
        if is_sensitive_file(name, policy):
            dropped.append(basename(name))
            continue
        kept.append((name, redact_secrets(content, policy)))
    return kept, dropped
