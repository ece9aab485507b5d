"""Conversion of results into table rows and CSV files."""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Dict, Iterable, List, Union

import pandas as pd

from vocab_sentences.models import SentenceRecord, TaggedRow

LOGGER = logging.getLogger(__name__)


def record_to_dict(record: SentenceRecord) -> Dict[str, object]:
    row: Dict[str, object] = {"chinese": record.text}
    if record.phonetic is not None:
        row["pinyin"] = record.phonetic
    row["english"] = record.translation
    return row


def to_records(rows: Iterable[Union[TaggedRow, SentenceRecord]]) -> List[Dict[str, object]]:
    records: List[Dict[str, object]] = []
    for row in rows:
        if isinstance(row, TaggedRow):
            data = record_to_dict(row.record)
            data["uwc"] = row.uwc
            data["uws"] = row.uws
        else:
            data = record_to_dict(row)
        records.append(data)
    return records


def write_csv(rows: Iterable[Union[TaggedRow, SentenceRecord]], path: Path) -> pd.DataFrame:
    frame = pd.DataFrame(to_records(rows))
    path.parent.mkdir(parents=True, exist_ok=True)
    LOGGER.info("Writing %s sentences to %s", len(frame), path)
    frame.to_csv(path, index=False, header=False, encoding="utf-8-sig")
    return frame
