"""Validation helpers for identifiers coming in over the API.

Session, game and player ids end up as primary keys in the store and as
path fragments in bot requests, so they are restricted to a conservative
Unicode-aware character set.
"""
import regex as re


# Allow: any Unicode letter/mark/number, spaces, plus a small, explicit set of name punctuation
VALID_NAME_RE = re.compile(r"^[\p{L}\p{M}\p{N} .'\-`’·]+$", flags=re.UNICODE)

# Ids are stricter than display names: no spaces, no quotes
VALID_ID_RE = re.compile(r"^[\p{L}\p{N}_\-]+$", flags=re.UNICODE)

# "#rrggbb" or an hsl(...) string as produced by the colour picker
VALID_COLOUR_RE = re.compile(r"^(#[0-9a-fA-F]{6}|hsl\(\s*[0-9.]+\s*,\s*[0-9.]+%\s*,\s*[0-9.]+%\s*\))$")


def is_valid_name(s: str) -> bool:
    """Return True if `s` is a reasonable display name for players/bots.

    - Strips and enforces a sensible maximum length.
    - Uses Unicode-aware character class matching.
    """
    if not s:
        return False
    if s.isspace() or s == "system":
        return False
    s = s.strip()
    if len(s) == 0 or len(s) > 200:
        return False
    return bool(VALID_NAME_RE.match(s))


def is_valid_id(s: str) -> bool:
    """Return True if `s` can be used as a session, game or player id."""
    if not s or len(s) > 128:
        return False
    return bool(VALID_ID_RE.match(s))


def is_valid_colour(s: str) -> bool:
    if not s:
        return False
    return bool(VALID_COLOUR_RE.match(s.strip()))
