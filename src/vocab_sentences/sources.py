"""Sentence lookup backends.

A source answers ``lookup(word, backend, size)`` with one ``(text, translation)``
pair, ``None`` when the backend has no sentence for the word, or raises
``TransientFetchError`` when the backend could not be reached.
"""
from __future__ import annotations

import logging
import os
import re
import socket
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional, Protocol, Sequence, Tuple
from urllib.parse import quote

import ftfy
import requests
from bs4 import BeautifulSoup

from vocab_sentences.coverage import include_all_tokens
from vocab_sentences.errors import InputError, TransientFetchError
from vocab_sentences.models import SIZES

LOGGER = logging.getLogger(__name__)
DEFAULT_TIMEOUT = float(os.environ.get("VOCAB_SENTENCES_TIMEOUT", "20"))

# Failures that abort a run and leave a checkpoint behind.
TRANSIENT_ERRORS = (
    TransientFetchError,
    requests.Timeout,
    requests.ConnectionError,
    requests.exceptions.ChunkedEncodingError,
    socket.gaierror,
    TimeoutError,
    ConnectionError,
    EOFError,
)

SentencePair = Tuple[str, str]
PhoneticTranscriber = Callable[[str], str]


class SentenceSource(Protocol):
    def lookup(self, word: str, backend: str, size: str = "short") -> Optional[SentencePair]:
        ...


@dataclass(frozen=True)
class Backend:
    """A dictionary site; the n-th sentence match pairs with the n-th translation match."""

    name: str
    url_template: str
    sentence_css: str
    translation_css: str


BACKEND_TABLE: Dict[str, Backend] = {
    "nciku": Backend(
        name="nciku",
        url_template="http://www.nciku.com/search/all/examples/{word}",
        sentence_css="div.examples_box p.ex",
        translation_css="div.examples_box p.trans",
    ),
    "jukuu": Backend(
        name="jukuu",
        url_template="http://www.jukuu.com/search.php?q={word}",
        sentence_css="tr.c td:nth-of-type(2)",
        translation_css="tr.e td:nth-of-type(2)",
    ),
}
BACKENDS: Tuple[str, ...] = tuple(BACKEND_TABLE)


def fallback_order(primary: str, backends: Sequence[str] = BACKENDS) -> List[str]:
    """The primary backend first, then every other backend in table order."""
    return [primary] + [name for name in backends if name != primary]


def clean_fragment(fragment: str) -> str:
    text = ftfy.fix_text(fragment)
    return re.sub(r"\s+", " ", text).strip()


def pick_by_size(candidates: Sequence[SentencePair], size: str) -> Optional[SentencePair]:
    """Choose the shortest, longest or closest-to-average sentence."""
    if not candidates:
        return None
    if size == "short":
        return min(candidates, key=lambda pair: len(pair[0]))
    if size == "long":
        return max(candidates, key=lambda pair: len(pair[0]))
    average = sum(len(pair[0]) for pair in candidates) / len(candidates)
    return min(candidates, key=lambda pair: abs(len(pair[0]) - average))


class RequestsSentenceSource:
    def __init__(
        self,
        *,
        timeout: float = DEFAULT_TIMEOUT,
        session: Optional[requests.Session] = None,
        backends: Optional[Dict[str, Backend]] = None,
    ) -> None:
        self.timeout = timeout
        self.session = session or requests.Session()
        self.backends = backends or BACKEND_TABLE

    def lookup(self, word: str, backend: str, size: str = "short") -> Optional[SentencePair]:
        if size not in SIZES:
            raise InputError(f"Unknown size {size!r}; expected one of {', '.join(SIZES)}")
        spec = self.backends.get(backend)
        if spec is None:
            raise InputError(f"Unknown backend {backend!r}")
        url = spec.url_template.format(word=quote(word))
        try:
            response = self.session.get(url, timeout=self.timeout)
        except TRANSIENT_ERRORS as exc:
            raise TransientFetchError(f"{backend}: {exc}") from exc
        if response.status_code == 404:
            return None
        if response.status_code == 429 or response.status_code >= 500:
            raise TransientFetchError(f"{backend}: HTTP {response.status_code} for {word}")
        response.raise_for_status()
        candidates = self.extract(spec, response.text, word)
        LOGGER.debug("%s returned %d candidate(s) for %s", backend, len(candidates), word)
        return pick_by_size(candidates, size)

    @staticmethod
    def extract(spec: Backend, page: str, word: str) -> List[SentencePair]:
        soup = BeautifulSoup(page, "html.parser")
        sentences = soup.select(spec.sentence_css)
        translations = soup.select(spec.translation_css)
        if len(sentences) != len(translations):
            LOGGER.warning(
                "%s: %d sentences but %d translations for %s",
                spec.name,
                len(sentences),
                len(translations),
                word,
            )
        candidates: List[SentencePair] = []
        for sentence_tag, translation_tag in zip(sentences, translations):
            text = clean_fragment(sentence_tag.get_text())
            translation = clean_fragment(translation_tag.get_text())
            if text and include_all_tokens(word, text):
                candidates.append((text, translation))
        return candidates
