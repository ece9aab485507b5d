"""Run fingerprints and on-disk checkpoints for interrupted acquisition runs.

A checkpoint file is stored as ``<directory>/<fingerprint>.json``:

    {
        "version": 1,
        "fingerprint": "<sha256 hex>",
        "pending_words": ["..."],
        "fetched": [{"word": "...", "text": "...", "translation": "...",
                     "phonetic": null, "backend": "nciku"}],
        "not_found": ["..."]
    }
"""
from __future__ import annotations

import hashlib
import json
import logging
import os
from pathlib import Path
from typing import Optional, Sequence

from vocab_sentences.errors import CheckpointError
from vocab_sentences.models import Checkpoint, FetchOptions, SentenceRecord

LOGGER = logging.getLogger(__name__)
CHECKPOINT_VERSION = 1
DEFAULT_CHECKPOINT_DIR = Path(os.environ.get("VOCAB_SENTENCES_CHECKPOINT_DIR", ".checkpoints"))


def fingerprint(words: Sequence[str], options: FetchOptions) -> str:
    payload = json.dumps(
        {"words": list(words), "options": options.fingerprint_items()},
        ensure_ascii=False,
        separators=(",", ":"),
    )
    return hashlib.sha256(payload.encode("utf-8")).hexdigest()


class CheckpointStore:
    def __init__(self, directory: Path = DEFAULT_CHECKPOINT_DIR) -> None:
        self.directory = Path(directory)

    def path_for(self, key: str) -> Path:
        return self.directory / f"{key}.json"

    def exists(self, key: str) -> bool:
        return self.path_for(key).exists()

    def load(self, key: str) -> Optional[Checkpoint]:
        path = self.path_for(key)
        if not path.exists():
            return None
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
            if not isinstance(data, dict):
                raise CheckpointError(f"Checkpoint {path} does not hold a JSON object")
            if data.get("version") != CHECKPOINT_VERSION:
                raise CheckpointError(
                    f"Unsupported checkpoint version {data.get('version')!r} in {path}"
                )
            checkpoint = Checkpoint(
                pending_words=list(data["pending_words"]),
                fetched=[SentenceRecord.from_dict(item) for item in data["fetched"]],
                not_found=list(data["not_found"]),
            )
        except (json.JSONDecodeError, KeyError, TypeError) as exc:
            raise CheckpointError(f"Could not read checkpoint {path}: {exc}") from exc
        LOGGER.info(
            "Loaded checkpoint %s: %d pending, %d fetched, %d not found",
            path,
            len(checkpoint.pending_words),
            len(checkpoint.fetched),
            len(checkpoint.not_found),
        )
        return checkpoint

    def save(self, key: str, checkpoint: Checkpoint) -> Path:
        path = self.path_for(key)
        path.parent.mkdir(parents=True, exist_ok=True)
        data = {
            "version": CHECKPOINT_VERSION,
            "fingerprint": key,
            "pending_words": list(checkpoint.pending_words),
            "fetched": [record.to_dict() for record in checkpoint.fetched],
            "not_found": list(checkpoint.not_found),
        }
        tmp_path = path.with_suffix(".json.tmp")
        tmp_path.write_text(json.dumps(data, indent=2, ensure_ascii=False), encoding="utf-8")
        os.replace(tmp_path, path)
        LOGGER.info("Wrote checkpoint %s", path)
        return path

    def delete(self, key: str) -> None:
        path = self.path_for(key)
        if path.exists():
            path.unlink()
            LOGGER.debug("Removed checkpoint %s", path)
