"""Data records passed between the acquisition, tagging and selection stages."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, FrozenSet, List, Optional, Tuple

from vocab_sentences.errors import InputError

SIZES = ("short", "average", "long")
DEFAULT_WORKER_COUNT = 8


@dataclass(frozen=True)
class SentenceRecord:
    word: str
    text: str
    translation: str
    phonetic: Optional[str] = None
    backend: Optional[str] = None

    def to_dict(self) -> Dict[str, Optional[str]]:
        return {
            "word": self.word,
            "text": self.text,
            "translation": self.translation,
            "phonetic": self.phonetic,
            "backend": self.backend,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Optional[str]]) -> "SentenceRecord":
        return cls(
            word=data["word"],
            text=data["text"],
            translation=data["translation"],
            phonetic=data.get("phonetic"),
            backend=data.get("backend"),
        )


@dataclass(frozen=True)
class CoverageRow:
    record: SentenceRecord
    target_words: FrozenSet[str] = field(default_factory=frozenset)

    @property
    def text(self) -> str:
        return self.record.text


@dataclass(frozen=True)
class TaggedRow:
    """A selected row with its presentation tags.

    ``uwc`` is the unique-word-count tag (``"1_word"``, ``"3_words"``) and
    ``uws`` the sorted unique-word string (``"[你, 我们]"``).
    """

    row: CoverageRow
    uwc: str
    uws: str

    @property
    def record(self) -> SentenceRecord:
        return self.row.record

    @property
    def target_words(self) -> FrozenSet[str]:
        return self.row.target_words


@dataclass
class Checkpoint:
    pending_words: List[str] = field(default_factory=list)
    fetched: List[SentenceRecord] = field(default_factory=list)
    not_found: List[str] = field(default_factory=list)


@dataclass
class FetchResult:
    sentences: List[SentenceRecord]
    not_found: FrozenSet[str]

    @property
    def fetched_words(self) -> FrozenSet[str]:
        return frozenset(record.word for record in self.sentences)


@dataclass
class FetchOptions:
    source: str = "nciku"
    size: str = "short"
    fallback: bool = True
    with_phonetic: bool = False
    worker_count: int = DEFAULT_WORKER_COUNT

    def validate(self, backends: Tuple[str, ...]) -> None:
        if not isinstance(self.worker_count, int) or self.worker_count < 1:
            raise InputError(f"worker_count must be a positive integer, got {self.worker_count!r}")
        if self.source not in backends:
            raise InputError(f"Unknown source {self.source!r}; expected one of {', '.join(backends)}")
        if self.size not in SIZES:
            raise InputError(f"Unknown size {self.size!r}; expected one of {', '.join(SIZES)}")

    def fingerprint_items(self) -> List[Tuple[str, object]]:
        """Options that change the fetched data, sorted by name.

        The worker count is left out: it changes scheduling, not results.
        """
        return sorted(
            {
                "fallback": self.fallback,
                "size": self.size,
                "source": self.source,
                "with_phonetic": self.with_phonetic,
            }.items()
        )
