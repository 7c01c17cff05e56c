"""Constants and mappings used across the application."""

from __future__ import annotations

APP_VERSION = "0.1.0"

# ── Webhook delivery headers ─────────────────────────────────────────────────

SIGNATURE_HEADER = "X-Hub-Signature-256"
EVENT_HEADER = "X-GitHub-Event"
DELIVERY_HEADER = "X-GitHub-Delivery"

SIGNATURE_PREFIX = "sha256="
BRANCH_REF_PREFIX = "refs/heads/"

# ── Event filtering (event kind → actions that may be forwarded) ─────────────
# ``synchronize`` is never forwarded; push events announce the same commits.

FORWARDED_ACTIONS: dict[str, frozenset[str]] = {
    "pull_request": frozenset({"opened", "closed"}),
    "issues": frozenset({"opened", "closed"}),
    "release": frozenset({"published"}),
}

# Override values that are really misplaced booleans
PLACEHOLDER_DESTINATIONS: frozenset[str] = frozenset({"true", "false"})

# ── Credential encryption ────────────────────────────────────────────────────

SALT_LENGTH = 64
IV_LENGTH = 16
TAG_LENGTH = 16
DERIVED_KEY_LENGTH = 32
KDF_ITERATIONS = 100_000
MIN_ENCRYPTION_KEY_LENGTH = 32

# ── Message rendering ────────────────────────────────────────────────────────

COLOR_PUSH = 0x2EA043
COLOR_OPENED = 0x28A745
COLOR_CLOSED = 0xD73A49
COLOR_MERGED = 0x6F42C1
COLOR_UPDATED = 0x0366D6
COLOR_RELEASE = 0xF1E05A

BODY_PREVIEW_CHARS = 500
RELEASE_NOTES_PREVIEW_CHARS = 1000
MAX_LISTED_COMMITS = 10
SHORT_SHA_LENGTH = 7
