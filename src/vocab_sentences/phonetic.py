"""Pinyin transcription of fetched sentences."""
from __future__ import annotations

from pypinyin import Style, lazy_pinyin


def to_pinyin(text: str) -> str:
    """Tone-marked pinyin, one syllable per character, separated by spaces.

    Non-Chinese runs such as punctuation are passed through as they are.
    """
    return " ".join(part.strip() for part in lazy_pinyin(text, style=Style.TONE) if part.strip())
