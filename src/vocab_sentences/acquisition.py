"""Concurrent sentence acquisition with checkpoint/resume on failure."""
from __future__ import annotations

import logging
import threading
from collections import deque
from typing import Deque, Iterable, List, Optional, Sequence

from vocab_sentences.checkpoint import CheckpointStore, fingerprint
from vocab_sentences.coverage import include_all_tokens
from vocab_sentences.errors import InputError
from vocab_sentences.models import Checkpoint, FetchOptions, FetchResult, SentenceRecord
from vocab_sentences.sources import (
    BACKENDS,
    TRANSIENT_ERRORS,
    PhoneticTranscriber,
    SentenceSource,
    fallback_order,
)

LOGGER = logging.getLogger(__name__)


class WorkQueue:
    """FIFO queue shared by the fetch workers.

    ``pop`` blocks until an item is available and returns ``None`` once the queue
    is closed and empty, or as soon as the queue has been aborted. A popped item
    stays in flight until ``task_done`` or ``requeue`` is called for it, and
    ``pending`` reports queued and in-flight items together. Items pushed after
    an abort are kept so they end up in the checkpoint.
    """

    def __init__(self, items: Iterable[str] = ()) -> None:
        self._items: Deque[str] = deque(items)
        self._in_flight: List[str] = []
        self._cond = threading.Condition()
        self._closed = False
        self._aborted = False

    def push(self, item: str) -> None:
        with self._cond:
            self._items.append(item)
            self._cond.notify()

    def pop(self) -> Optional[str]:
        with self._cond:
            while not self._items and not self._closed and not self._aborted:
                self._cond.wait()
            if self._aborted or not self._items:
                return None
            item = self._items.popleft()
            self._in_flight.append(item)
            return item

    def task_done(self, item: str) -> None:
        with self._cond:
            self._in_flight.remove(item)

    def requeue(self, item: str) -> None:
        with self._cond:
            self._in_flight.remove(item)
            self._items.append(item)
            self._cond.notify()

    def close(self) -> None:
        with self._cond:
            self._closed = True
            self._cond.notify_all()

    def abort(self) -> None:
        with self._cond:
            self._aborted = True
            self._cond.notify_all()

    @property
    def aborted(self) -> bool:
        with self._cond:
            return self._aborted

    def snapshot(self) -> List[str]:
        with self._cond:
            return list(self._items)

    def pending(self) -> List[str]:
        with self._cond:
            return list(self._items) + list(self._in_flight)

    def __len__(self) -> int:
        with self._cond:
            return len(self._items)


class AcquisitionPipeline:
    def __init__(
        self,
        source: SentenceSource,
        store: Optional[CheckpointStore] = None,
        *,
        transcriber: Optional[PhoneticTranscriber] = None,
        backends: Sequence[str] = BACKENDS,
    ) -> None:
        self.source = source
        self.store = store or CheckpointStore()
        self.transcriber = transcriber
        self.backends = tuple(backends)

    def run(self, vocabulary: Sequence[str], options: Optional[FetchOptions] = None) -> FetchResult:
        options = options or FetchOptions()
        words = tuple(vocabulary)
        if not words:
            raise InputError("The vocabulary is empty")
        options.validate(self.backends)
        if options.with_phonetic and self.transcriber is None:
            raise InputError("Phonetic output requested but no transcriber was given")

        key = fingerprint(words, options)
        sentences: List[SentenceRecord] = []
        not_found: List[str] = []
        pending: Sequence[str] = words
        checkpoint = self.store.load(key)
        if checkpoint is not None:
            sentences.extend(checkpoint.fetched)
            not_found.extend(checkpoint.not_found)
            pending = checkpoint.pending_words
            self.store.delete(key)
            LOGGER.info("Resuming run %s with %d words left", key[:12], len(pending))

        queue = WorkQueue(pending)
        queue.close()
        lock = threading.Lock()
        errors: List[BaseException] = []

        def worker() -> None:
            while True:
                word = queue.pop()
                if word is None:
                    return
                try:
                    record = self.select_sentence(word, options)
                except Exception as exc:
                    queue.abort()
                    queue.requeue(word)
                    with lock:
                        errors.append(exc)
                    if isinstance(exc, TRANSIENT_ERRORS):
                        LOGGER.warning("Fetching %s failed: %s", word, exc)
                    else:
                        LOGGER.exception("Unexpected error while fetching %s", word)
                    LOGGER.warning("Wrote '%s' back to queue; waiting for the other workers", word)
                    return
                with lock:
                    if record is None:
                        not_found.append(word)
                    else:
                        sentences.append(record)
                    queue.task_done(word)
                LOGGER.info("Processing word: %s (%d words left)", word, len(queue))

        def save_checkpoint() -> List[str]:
            # Workers may still be running after a second interrupt; their words stay pending.
            with lock:
                remaining = queue.pending()
                snapshot = Checkpoint(
                    pending_words=remaining, fetched=list(sentences), not_found=list(not_found)
                )
            self.store.save(key, snapshot)
            return remaining

        LOGGER.info("Fetching sentences for %d words with %d workers", len(pending), options.worker_count)
        threads = [
            threading.Thread(target=worker, name=f"fetch-{idx}", daemon=True)
            for idx in range(options.worker_count)
        ]
        for thread in threads:
            thread.start()
        try:
            try:
                for thread in threads:
                    thread.join()
            except KeyboardInterrupt as exc:
                queue.abort()
                errors.insert(0, exc)
                for thread in threads:
                    thread.join()
        finally:
            if errors:
                remaining = save_checkpoint()
                LOGGER.error(
                    "Run aborted with %d words pending: %s", len(remaining), ", ".join(remaining)
                )
                LOGGER.error(
                    "Run the program again with the same inputs after solving the (connection) problem; "
                    "it will resume from the checkpoint."
                )

        if errors:
            raise errors[0]

        self.store.delete(key)
        LOGGER.info("Fetched %d sentences, %d words not found", len(sentences), len(not_found))
        return FetchResult(sentences=list(sentences), not_found=frozenset(not_found))

    def select_sentence(self, word: str, options: FetchOptions) -> Optional[SentenceRecord]:
        """Look ``word`` up on the primary backend, then on the others if allowed."""
        candidates = fallback_order(options.source, self.backends) if options.fallback else [options.source]
        for backend in candidates:
            pair = self.source.lookup(word, backend, size=options.size)
            if not pair:
                LOGGER.debug("%s: no sentence for %s", backend, word)
                continue
            text, translation = pair
            if not include_all_tokens(word, text):
                LOGGER.debug("%s: sentence for %s does not contain it, skipping", backend, word)
                continue
            phonetic = self.transcriber(text) if options.with_phonetic and self.transcriber else None
            return SentenceRecord(
                word=word,
                text=text,
                translation=translation,
                phonetic=phonetic,
                backend=backend,
            )
        return None
