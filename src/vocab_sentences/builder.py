"""Fetch sentences for a vocabulary and reduce them to a minimal covering set."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import FrozenSet, List, Optional, Sequence

from vocab_sentences.acquisition import AcquisitionPipeline
from vocab_sentences.coverage import add_tags, missing_words, select, tag
from vocab_sentences.errors import ConsistencyError
from vocab_sentences.models import FetchOptions, FetchResult, TaggedRow

LOGGER = logging.getLogger(__name__)


@dataclass
class CoverResult:
    rows: List[TaggedRow]
    not_found: FrozenSet[str]
    total_sentences: int


def sentences(
    pipeline: AcquisitionPipeline,
    vocabulary: Sequence[str],
    options: Optional[FetchOptions] = None,
) -> FetchResult:
    """One sentence per word, in completion order."""
    return pipeline.run(vocabulary, options)


def cover(vocabulary: Sequence[str], fetched: FetchResult) -> CoverResult:
    must_cover = [word for word in vocabulary if word not in fetched.not_found]
    rows = tag(fetched.sentences, must_cover)
    chosen = select(rows, must_cover)
    missing = missing_words((row.text for row in chosen), must_cover)
    if missing:
        raise ConsistencyError("Words not found in the selected sentences: " + ", ".join(missing))
    LOGGER.info(
        "%d sentences cover %d words (%d words without a sentence)",
        len(chosen),
        len(must_cover),
        len(fetched.not_found),
    )
    return CoverResult(
        rows=add_tags(chosen),
        not_found=fetched.not_found,
        total_sentences=len(fetched.sentences),
    )


def min_sentences(
    pipeline: AcquisitionPipeline,
    vocabulary: Sequence[str],
    options: Optional[FetchOptions] = None,
) -> CoverResult:
    fetched = pipeline.run(vocabulary, options)
    return cover(vocabulary, fetched)
