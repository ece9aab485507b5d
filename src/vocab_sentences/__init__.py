"""Example sentences for a vocabulary list, reduced to a minimal covering set."""

from vocab_sentences.acquisition import AcquisitionPipeline
from vocab_sentences.builder import cover, min_sentences, sentences
from vocab_sentences.coverage import include_all_tokens, select, tag
from vocab_sentences.models import CoverageRow, FetchOptions, SentenceRecord, TaggedRow

__all__ = [
    "AcquisitionPipeline",
    "CoverageRow",
    "FetchOptions",
    "SentenceRecord",
    "TaggedRow",
    "cover",
    "include_all_tokens",
    "min_sentences",
    "select",
    "sentences",
    "tag",
]
