"""Tests for the offline queue command line."""
from __future__ import annotations

from pathlib import Path

import pytest

from pizza_hunt.core.config import OfflineConfig, settings
from pizza_hunt.offline.__main__ import main


@pytest.fixture
def cli_config(tmp_path: Path, monkeypatch) -> OfflineConfig:
    # Port 9 on loopback refuses connections, so flushing never succeeds
    config = OfflineConfig(
        data_dir=str(tmp_path / "cli"),
        api_base_url="http://127.0.0.1:9"
    )
    monkeypatch.setattr(settings, "offline", config)
    return config


def test_save_then_status(cli_config: OfflineConfig, capsys):
    assert main(["save", '{"pizzaName": "Zesty"}']) == 0
    assert "Queued as record 1" in capsys.readouterr().out

    assert main(["status"]) == 0
    assert "1 pizza(s) waiting" in capsys.readouterr().out


def test_save_rejects_invalid_json(cli_config: OfflineConfig):
    assert main(["save", "{not json"]) == 2
    assert not cli_config.db_path.exists()


def test_flush_with_empty_queue(cli_config: OfflineConfig):
    assert main(["flush"]) == 0


def test_flush_keeps_records_when_server_unreachable(cli_config: OfflineConfig, capsys):
    assert main(["save", '{"pizzaName": "Zesty", "size": "Large"}']) == 0
    assert main(["flush"]) == 1

    capsys.readouterr()
    assert main(["status"]) == 0
    assert "1 pizza(s) waiting" in capsys.readouterr().out


def test_status_on_fresh_queue(cli_config: OfflineConfig, capsys):
    assert main(["status"]) == 0
    assert "0 pizza(s) waiting" in capsys.readouterr().out
