"""Human-readable record codes (``BEN-4821``, ``STR-1093``)."""

from __future__ import annotations

import secrets
from typing import Callable

MAX_ATTEMPTS = 50


def generate_code(prefix: str, exists: Callable[[str], bool]) -> str:
    """Return ``PREFIX-####`` not yet taken according to ``exists``."""

    for _ in range(MAX_ATTEMPTS):
        code = f"{prefix}-{1000 + secrets.randbelow(9000)}"
        if not exists(code):
            return code
    # Four-digit space exhausted; fall back to eight digits.
    while True:
        code = f"{prefix}-{secrets.randbelow(10**8):08d}"
        if not exists(code):
            return code
