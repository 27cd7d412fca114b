# tests/test_user_config.py

from __future__ import annotations

import json
from pathlib import Path

from tasktree.core.user_config import UserConfig


def test_initialize_writes_defaults(tmp_path: Path) -> None:
    cfg = UserConfig("u1", root_dir=tmp_path)
    cfg.initialize()

    raw = json.loads(cfg.config_file.read_text("utf-8"))
    assert raw["version"] == "1.0"
    assert raw["config"] == {"hideCompleted": False}
    assert len(raw["updatedAt"].split("/")) == 3
    assert cfg.hide_completed is False


def test_missing_keys_are_merged_and_unknown_kept(tmp_path: Path) -> None:
    cfg = UserConfig("u1", root_dir=tmp_path)
    cfg.user_dir.mkdir(parents=True)
    cfg.config_file.write_text(
        json.dumps({"version": "0.9", "config": {"viewMode": "tree"}, "updatedAt": "01/01/2024"}),
        "utf-8",
    )

    cfg.initialize()
    assert cfg.get_config() == {"hideCompleted": False, "viewMode": "tree"}


def test_toggle_persists_and_backs_up(tmp_path: Path) -> None:
    cfg = UserConfig("u1", root_dir=tmp_path, backup_keep=2)
    cfg.initialize()

    assert cfg.toggle_hide_completed() is True
    reloaded = UserConfig("u1", root_dir=tmp_path)
    reloaded.initialize()
    assert reloaded.hide_completed is True

    for _ in range(4):
        cfg.toggle_hide_completed()
    assert len(cfg.list_backups()) == 2

    cfg.reset_to_defaults()
    assert cfg.get_config() == {"hideCompleted": False}


def test_corrupt_config_falls_back_to_defaults(tmp_path: Path) -> None:
    cfg = UserConfig("u1", root_dir=tmp_path)
    cfg.user_dir.mkdir(parents=True)
    cfg.config_file.write_text("{broken", "utf-8")

    cfg.initialize()
    assert cfg.get_config() == {"hideCompleted": False}
    assert json.loads(cfg.config_file.read_text("utf-8"))["config"] == {"hideCompleted": False}
