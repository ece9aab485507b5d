"""Vocabulary list loading and clean-up."""
from __future__ import annotations

import csv
import logging
import re
import unicodedata
from pathlib import Path
from typing import Iterable, List

import ftfy

from vocab_sentences.errors import InputError

LOGGER = logging.getLogger(__name__)
PAREN_PATTERN = re.compile(r"\(.*?\)|（.*?）")
WORD_RUN_PATTERN = re.compile(r"[^\W_]+")


def remove_parens(word: str) -> str:
    return PAREN_PATTERN.sub("", word)


def remove_slash(word: str) -> str:
    if "/" not in word:
        return word
    parts = word.split("/")
    # max() keeps the first of equally long parts
    return max(parts, key=len)


def remove_er_character_from_end(word: str) -> str:
    # 女儿 keeps its 儿; 一点儿 becomes 一点
    if len(word) > 2 and word.endswith("儿"):
        return word[:-1]
    return word


def distinct_words(word: str) -> List[str]:
    return WORD_RUN_PATTERN.findall(word)


def normalize_word(raw: str) -> str:
    text = ftfy.fix_text(raw)
    text = unicodedata.normalize("NFC", text).strip()
    text = remove_parens(text)
    text = remove_slash(text)
    text = remove_er_character_from_end(text.strip())
    return " ".join(distinct_words(text))


def edit_vocab(words: Iterable[str]) -> List[str]:
    """Normalize every entry and drop empty results and duplicates, keeping order.

    Composite expressions keep one space between their parts, so
    ``"越。。。越"`` becomes ``"越 越"``.
    """
    seen = set()
    result: List[str] = []
    for raw in words:
        edited = normalize_word(raw)
        if not edited or edited in seen:
            continue
        seen.add(edited)
        result.append(edited)
    return result


def remove_redundant_single_char_words(words: Iterable[str]) -> List[str]:
    """Drop single-character words that also occur inside a longer word.

    ``["看", "书", "看书", "我"]`` becomes ``["我", "看书"]``.
    """
    word_list = list(words)
    single_char_words = [word for word in word_list if len(word) == 1]
    multi_char_words = [word for word in word_list if len(word) != 1]
    if not multi_char_words:
        return single_char_words
    kept = [
        single
        for single in single_char_words
        if not any(single in multi for multi in multi_char_words)
    ]
    LOGGER.info("Removed %d redundant single character words", len(single_char_words) - len(kept))
    return kept + multi_char_words


def load_vocabulary(words: Iterable[str], *, compact: bool = False) -> List[str]:
    vocabulary = edit_vocab(words)
    if compact:
        vocabulary = remove_redundant_single_char_words(vocabulary)
    LOGGER.info("Vocabulary holds %d words", len(vocabulary))
    return vocabulary


def parse_words(path: Path, word_col: int, **reader_options) -> List[str]:
    """Read the vocabulary column (counting from 1) of a CSV file, skipping blank cells.

    Rows may have different lengths; the column range is checked against the
    first non-blank row and shorter rows are skipped.
    """
    try:
        with open(path, newline="", encoding="utf-8") as handle:
            rows = [row for row in csv.reader(handle, **reader_options) if row]
    except (OSError, UnicodeDecodeError, csv.Error) as exc:
        raise InputError(f"Could not read {path}: {exc}") from exc
    if not rows or not 1 <= word_col <= len(rows[0]):
        raise InputError(f"Column number ({word_col}) out of range.")
    col = word_col - 1
    words: List[str] = []
    for row in rows:
        if col >= len(row):
            continue
        word = row[col]
        if word.strip():
            words.append(word)
    return words
