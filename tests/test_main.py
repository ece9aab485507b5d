import logging

import pandas as pd
import pytest

from vocab_sentences.checkpoint import CheckpointStore
from vocab_sentences.main import main, parse_args, run_pipeline
from vocab_sentences.phonetic import to_pinyin

from conftest import FakeSource


def write_vocab(tmp_path):
    path = tmp_path / "hsk.csv"
    path.write_text("1,我\n2,你\n3,我们,wǒmen\n4,朋友\n5,飞机\n6,我们\n", encoding="utf-8")
    return path


def test_parse_args_defaults(tmp_path):
    config = parse_args([str(tmp_path / "hsk.csv"), "--column", "2", "--threads", "3", "--no-fallback"])
    assert config.word_column == 2
    assert config.output_path == tmp_path / "hsk_sentences.csv"
    assert config.options.worker_count == 3
    assert config.options.fallback is False
    assert config.options.source == "nciku"
    assert config.options.with_phonetic is True


def test_parse_args_no_pinyin(tmp_path):
    config = parse_args([str(tmp_path / "hsk.csv"), "--no-pinyin"])
    assert config.options.with_phonetic is False


def test_run_pipeline_writes_minimal_sentences(tmp_path, table):
    path = write_vocab(tmp_path)
    config = parse_args(
        [str(path), "--column", "2", "--no-pinyin", "--checkpoint-dir", str(tmp_path / "cp")]
    )

    run_pipeline(config, FakeSource(table))

    frame = pd.read_csv(config.output_path, header=None, encoding="utf-8-sig")
    assert list(frame[0]) == ["我们是朋友", "你好我也好"]
    assert list(frame[2]) == ["3_words", "2_words"]
    assert list(frame[3]) == ["[我, 我们, 朋友]", "[你, 我]"]


def test_run_pipeline_adds_pinyin_column(tmp_path, table):
    path = write_vocab(tmp_path)
    config = parse_args([str(path), "--column", "2", "--checkpoint-dir", str(tmp_path / "cp")])

    run_pipeline(config, FakeSource(table))

    frame = pd.read_csv(config.output_path, header=None, encoding="utf-8-sig")
    assert list(frame[0]) == ["我们是朋友", "你好我也好"]
    assert list(frame[1]) == [to_pinyin("我们是朋友"), to_pinyin("你好我也好")]
    assert list(frame[3]) == ["3_words", "2_words"]


def test_to_pinyin_uses_tone_marks():
    assert to_pinyin("我很好") == "wǒ hěn hǎo"


def test_run_pipeline_all_sentences(tmp_path, table):
    path = write_vocab(tmp_path)
    config = parse_args([str(path), "--column", "2", "--all", "--no-pinyin", "--threads", "1"])
    config.checkpoint_dir = tmp_path / "cp"

    run_pipeline(config, FakeSource(table))

    frame = pd.read_csv(config.output_path, header=None, encoding="utf-8-sig")
    assert len(frame) == 4
    assert set(frame[0]) == {"我很好", "你好我也好", "我们是朋友"}


def test_main_reports_bad_column(tmp_path):
    path = write_vocab(tmp_path)
    with pytest.raises(SystemExit, match="out of range"):
        main([str(path), "--column", "9"])


def test_main_reports_interrupted_download(tmp_path, table, monkeypatch, caplog):
    path = write_vocab(tmp_path)
    source = FakeSource(table, fail_once={"朋友"})
    monkeypatch.setattr("vocab_sentences.main.RequestsSentenceSource", lambda **kwargs: source)
    caplog.set_level(logging.INFO)
    checkpoint_dir = tmp_path / "cp"

    with pytest.raises(SystemExit, match="Run the same command again to resume"):
        main([str(path), "--column", "2", "--threads", "1", "--checkpoint-dir", str(checkpoint_dir)])

    assert "Run aborted with 2 words pending: 飞机, 朋友" in caplog.text
    assert "resume from the checkpoint" in caplog.text
    assert len(list(CheckpointStore(checkpoint_dir).directory.glob("*.json"))) == 1

    caplog.clear()
    main([str(path), "--column", "2", "--threads", "1", "--checkpoint-dir", str(checkpoint_dir)])
    assert "Resuming run" in caplog.text
    assert list(checkpoint_dir.glob("*.json")) == []
