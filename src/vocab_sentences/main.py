"""Command-line pipeline that fetches example sentences for a vocabulary list and keeps a minimal covering set."""
from __future__ import annotations

import argparse
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Sequence

from vocab_sentences.acquisition import AcquisitionPipeline
from vocab_sentences.builder import min_sentences, sentences
from vocab_sentences.checkpoint import DEFAULT_CHECKPOINT_DIR, CheckpointStore
from vocab_sentences.coverage import unique_chars
from vocab_sentences.errors import CheckpointError, ConsistencyError, InputError
from vocab_sentences.models import DEFAULT_WORKER_COUNT, SIZES, FetchOptions
from vocab_sentences.output import write_csv
from vocab_sentences.phonetic import to_pinyin
from vocab_sentences.sources import (
    BACKENDS,
    DEFAULT_TIMEOUT,
    TRANSIENT_ERRORS,
    RequestsSentenceSource,
    SentenceSource,
)
from vocab_sentences.vocab import load_vocabulary, parse_words

LOGGER = logging.getLogger(__name__)


@dataclass
class RunConfig:
    input_path: Path
    word_column: int
    output_path: Path
    checkpoint_dir: Path
    options: FetchOptions
    compact: bool = False
    all_sentences: bool = False
    timeout: float = DEFAULT_TIMEOUT


def run_pipeline(config: RunConfig, source: Optional[SentenceSource] = None) -> None:
    raw_words = parse_words(config.input_path, config.word_column)
    vocabulary = load_vocabulary(raw_words, compact=config.compact)
    if source is None:
        source = RequestsSentenceSource(timeout=config.timeout)
    transcriber = to_pinyin if config.options.with_phonetic else None
    pipeline = AcquisitionPipeline(source, CheckpointStore(config.checkpoint_dir), transcriber=transcriber)
    if config.all_sentences:
        fetched = sentences(pipeline, vocabulary, config.options)
        write_csv(fetched.sentences, config.output_path)
        texts = [record.text for record in fetched.sentences]
        not_found = fetched.not_found
    else:
        result = min_sentences(pipeline, vocabulary, config.options)
        write_csv(result.rows, config.output_path)
        texts = [row.record.text for row in result.rows]
        not_found = result.not_found
        LOGGER.info(
            "Kept %d of %d fetched sentences", len(result.rows), result.total_sentences
        )
    if not_found:
        LOGGER.info("No sentence found for: %s", ", ".join(sorted(not_found)))
    LOGGER.info("The sentences use %d unique characters", len(unique_chars(texts)))


def parse_args(argv: Optional[Sequence[str]] = None) -> RunConfig:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("input", type=Path, help="CSV file holding the vocabulary")
    parser.add_argument(
        "--column",
        type=int,
        default=1,
        help="Vocabulary column of the CSV file (counting starts at 1)",
    )
    parser.add_argument(
        "--output",
        type=Path,
        default=None,
        help="Where to write the sentence CSV (default: <input>_sentences.csv)",
    )
    parser.add_argument(
        "--source",
        default=BACKENDS[0],
        choices=list(BACKENDS),
        help="Online dictionary to download the sentences from",
    )
    parser.add_argument(
        "--size",
        default="short",
        choices=list(SIZES),
        help="Which sentence to keep when a dictionary offers several",
    )
    parser.add_argument(
        "--threads",
        type=int,
        default=DEFAULT_WORKER_COUNT,
        help="Number of concurrent download workers",
    )
    parser.add_argument(
        "--no-fallback",
        action="store_true",
        help="Do not try the other dictionaries when a word is not found",
    )
    parser.add_argument(
        "--compact",
        action="store_true",
        help="Drop single character words that also appear in a longer word",
    )
    parser.add_argument(
        "--all",
        dest="all_sentences",
        action="store_true",
        help="Keep one sentence per word instead of the minimal covering set",
    )
    parser.add_argument(
        "--pinyin",
        action=argparse.BooleanOptionalAction,
        default=True,
        help="Add a pinyin column for every sentence",
    )
    parser.add_argument(
        "--checkpoint-dir",
        type=Path,
        default=DEFAULT_CHECKPOINT_DIR,
        help="Directory for checkpoints of interrupted runs",
    )
    parser.add_argument(
        "--timeout",
        type=float,
        default=DEFAULT_TIMEOUT,
        help="HTTP timeout in seconds",
    )
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging verbosity",
    )
    args = parser.parse_args(argv)
    if args.output is None:
        args.output = args.input.with_name(f"{args.input.stem}_sentences.csv")
    logging.basicConfig(
        level=getattr(logging, args.log_level), format="%(levelname)s %(message)s"
    )
    return RunConfig(
        input_path=args.input,
        word_column=args.column,
        output_path=args.output,
        checkpoint_dir=args.checkpoint_dir,
        options=FetchOptions(
            source=args.source,
            size=args.size,
            fallback=not args.no_fallback,
            with_phonetic=args.pinyin,
            worker_count=args.threads,
        ),
        compact=args.compact,
        all_sentences=args.all_sentences,
        timeout=args.timeout,
    )


def main(argv: Optional[Sequence[str]] = None) -> None:
    config = parse_args(argv)
    try:
        run_pipeline(config)
    except (InputError, CheckpointError, ConsistencyError) as exc:
        raise SystemExit(f"error: {exc}") from exc
    except TRANSIENT_ERRORS as exc:
        raise SystemExit(
            f"Download interrupted ({exc}). Run the same command again to resume."
        ) from exc


if __name__ == "__main__":
    main()
