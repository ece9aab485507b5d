"""Coverage tagging and greedy selection of a minimal sentence set."""
from __future__ import annotations

import logging
import re
from concurrent.futures import ThreadPoolExecutor
from typing import Dict, Iterable, List, Sequence, Set

from vocab_sentences.errors import ConsistencyError
from vocab_sentences.models import CoverageRow, SentenceRecord, TaggedRow

LOGGER = logging.getLogger(__name__)
TAGGER_WORKERS = 10
WORD_CHAR_PATTERN = re.compile(r"[^\W_]")


def include_all_tokens(word: str, sentence: str) -> bool:
    """Return True if every whitespace-separated token of ``word`` occurs in ``sentence``.

    Composite expressions such as ``"除了 以外"`` match ``"除了天气以外都好"``
    because both parts appear, regardless of what lies between them.
    """
    tokens = word.split()
    if not tokens:
        return False
    return all(token in sentence for token in tokens)


def target_words_per_sentence(sentence: str, words: Iterable[str]) -> Set[str]:
    return {word for word in words if include_all_tokens(word, sentence)}


def tag(sentences: Sequence[SentenceRecord], words: Iterable[str]) -> List[CoverageRow]:
    word_list = list(words)

    def _tag_one(record: SentenceRecord) -> CoverageRow:
        found = target_words_per_sentence(record.text, word_list)
        return CoverageRow(record=record, target_words=frozenset(found))

    LOGGER.info("Determining the target words for %d sentences", len(sentences))
    with ThreadPoolExecutor(max_workers=TAGGER_WORKERS) as executor:
        return list(executor.map(_tag_one, sentences))


def select(rows: Sequence[CoverageRow], must_cover: Iterable[str]) -> List[CoverageRow]:
    """Greedy set cover over ``rows``.

    Each round takes the row with the most still-uncovered words, preferring the
    shorter sentence on ties and the earlier row after that.
    """
    remaining = set(must_cover)
    chosen: List[CoverageRow] = []
    while remaining:
        LOGGER.debug("Number of remaining words: %d", len(remaining))
        best = None
        best_key = None
        for row in rows:
            key = (-len(row.target_words & remaining), len(row.text))
            if best_key is None or key < best_key:
                best, best_key = row, key
        if best is None or best_key[0] == 0:
            raise ConsistencyError(
                "No sentence covers the remaining words: "
                + ", ".join(sorted(remaining))
            )
        chosen.append(best)
        remaining -= best.target_words
    LOGGER.info("Selected %d of %d sentences", len(chosen), len(rows))
    return chosen


def uwc_tag(target_words: Iterable[str]) -> str:
    size = len(set(target_words))
    if size == 1:
        return "1_word"
    return f"{size}_words"


def uws_tag(target_words: Iterable[str]) -> str:
    return "[" + ", ".join(sorted(target_words)) + "]"


def add_tags(rows: Iterable[CoverageRow]) -> List[TaggedRow]:
    return [
        TaggedRow(row=row, uwc=uwc_tag(row.target_words), uws=uws_tag(row.target_words))
        for row in rows
    ]


def missing_words(texts: Iterable[str], words: Iterable[str]) -> List[str]:
    """Words from ``words`` that no text in ``texts`` contains, in input order."""
    text_list = list(texts)
    return [
        word
        for word in words
        if not any(include_all_tokens(word, text) for text in text_list)
    ]


def word_frequency(texts: Iterable[str], words: Iterable[str]) -> Dict[str, int]:
    text_list = list(texts)
    return {
        word: sum(1 for text in text_list if include_all_tokens(word, text))
        for word in words
    }


def unique_chars(texts: Iterable[str]) -> List[str]:
    """Distinct word characters across ``texts`` in first-seen order; punctuation is skipped."""
    seen: Set[str] = set()
    result: List[str] = []
    for text in texts:
        for char in WORD_CHAR_PATTERN.findall(text):
            if char not in seen:
                seen.add(char)
                result.append(char)
    return result
