"""Text normalization for business-name comparison."""

from __future__ import annotations

import re
import unicodedata

_WHITESPACE = re.compile(r"\s+")


def normalize_text(value: str) -> str:
    """Fold a name for case- and accent-insensitive comparison.

    'Công Ty  ACME ' -> 'cong ty acme'. Idempotent; '' -> ''.
    """
    # Lowercase before decomposing: 'İ'.lower() yields a combining dot.
    decomposed = unicodedata.normalize("NFD", value.lower())
    stripped = "".join(ch for ch in decomposed if not unicodedata.combining(ch))
    return _WHITESPACE.sub(" ", stripped).strip()
