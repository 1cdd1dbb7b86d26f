"""Helpers shared by text-producing stages."""
from __future__ import annotations


def word_count(text: str | None) -> int:
    if not text:
        return 0
    return len(text.split())
