"""Tests for main — exit codes, progress output and results persistence."""

import json
from dataclasses import replace

import pytest

import main
from models import CheckFailed, CheckSucceeded, RunSummary


@pytest.fixture
def summary():
    return RunSummary(
        timestamp="2024-12-09T10:00:00.000Z",
        results=[CheckSucceeded("addr1", "Solana", True, 10, ["nft"]), CheckFailed("Unknown", "bad key")],
    )


@pytest.fixture
def patched_run_check(monkeypatch, summary):
    seen = {}

    async def fake_run_check(raw_keys, config, progress_cb=None, transport=None):
        seen["raw_keys"] = list(raw_keys)
        for position, result in enumerate(summary.results, start=1):
            progress_cb(position, len(summary.results), result)
        return summary

    monkeypatch.setattr(main, "run_check", fake_run_check)
    return seen


def test_missing_input_file_exits_non_zero(tmp_path, fast_config, log_messages):
    config = replace(fast_config, input_file=str(tmp_path / "privatekey.txt"))
    assert main.run(config) == 1
    assert any("未找到输入文件" in m for m in log_messages)


def test_run_writes_results(tmp_path, fast_config, patched_run_check, log_messages):
    (tmp_path / "privatekey.txt").write_text("key1\n\nkey2\n", encoding="utf-8")
    config = replace(
        fast_config,
        input_file=str(tmp_path / "privatekey.txt"),
        results_dir=str(tmp_path / "results"),
    )

    assert main.run(config) == 0
    assert patched_run_check["raw_keys"] == ["key1", "key2"]

    files = list((tmp_path / "results").glob("pengu-check-*.json"))
    assert len(files) == 1
    record = json.loads(files[0].read_text(encoding="utf-8"))
    assert record["total"] == 2
    assert record["eligible"] == 1
    assert "✅ Wallet 1/2: addr1" in log_messages
    assert "   Error: bad key" in log_messages
    assert "Eligible: 1" in log_messages


def test_unwritable_results_dir_fails_before_checking(tmp_path, fast_config, patched_run_check, log_messages):
    (tmp_path / "privatekey.txt").write_text("key1\n", encoding="utf-8")
    blocker = tmp_path / "results"
    blocker.write_text("not a directory")
    config = replace(fast_config, input_file=str(tmp_path / "privatekey.txt"), results_dir=str(blocker))

    assert main.run(config) == 1
    assert "raw_keys" not in patched_run_check
    assert any("结果目录不可用" in m for m in log_messages)


def test_progress_never_prints_key_material(log_messages):
    main.report_progress(1, 1, CheckSucceeded("addr1", "Solana", False, 0, []))
    assert log_messages == ["❌ Wallet 1/1: addr1", "   Tokens: 0"]


def test_run_app_invalid_settings_exits(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    (tmp_path / "checker_settings.json").write_text(json.dumps({"batch_size": 0}))
    with pytest.raises(SystemExit) as exc_info:
        main.run_app()
    assert exc_info.value.code == 1


def test_run_app_missing_input_exits(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    with pytest.raises(SystemExit) as exc_info:
        main.run_app()
    assert exc_info.value.code == 1


def test_setup_logging_rejects_unknown_level():
    with pytest.raises(ValueError):
        main.setup_logging("LOUD")
