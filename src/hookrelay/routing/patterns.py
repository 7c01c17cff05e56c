"""Branch pattern matching for repository rules.

Patterns are either an exact branch name (``main``), the catch-all ``*``,
or a glob with embedded ``*`` wildcards (``release/*``, ``feature/*-wip``).
Only ``*`` is special; every other character, including ``.``, ``?`` and
``[``, is matched literally.
"""

from __future__ import annotations

import functools
import re
from collections.abc import Iterable

from hookrelay.core.models import RepositoryRule

WILDCARD = "*"


@functools.lru_cache(maxsize=256)
def compile_pattern(pattern: str) -> re.Pattern[str]:
    """Compile a wildcard pattern into an anchored regex."""
    body = ".*".join(re.escape(part) for part in pattern.split(WILDCARD))
    return re.compile(f"^{body}$")


def matches(candidate: str, pattern: str) -> bool:
    """Return True if ``candidate`` matches ``pattern`` in full."""
    if pattern == WILDCARD:
        return True
    if WILDCARD not in pattern:
        return candidate == pattern
    return compile_pattern(pattern).fullmatch(candidate) is not None


def matches_any(candidate: str, patterns: Iterable[str]) -> bool:
    return any(matches(candidate, p) for p in patterns)


def is_branch_allowed(branch: str, rule: RepositoryRule) -> bool:
    """Check a branch against a rule's exclusion then inclusion patterns.

    Any exclusion hit rejects the branch, whatever the inclusion patterns say.
    """
    if matches_any(branch, rule.excluded_branch_patterns):
        return False
    return matches_any(branch, rule.allowed_branch_patterns)
