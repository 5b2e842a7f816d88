"""Tests for the iv-scan command-line front end."""

from __future__ import annotations

import json
from pathlib import Path

import cv2
import numpy as np
import pytest

from iv_scanner.core.level_calc import CPM_TABLE, StatTriple, compute_cp
from iv_scanner.run_scan import _merge_positions, _parse_args, main
from iv_scanner.tools.vision_models import BarPositions

WIDTH = 400
HEIGHT = 800
ANCHOR_ARGS = ["--attack-y", "100", "--defense-y", "300", "--hp-y", "500"]


def _write_frame(path: Path) -> str:
    """Attack full, defense empty, HP half full (RGB painted, saved as BGR)."""
    rgb = np.zeros((HEIGHT, WIDTH, 3), dtype=np.uint8)
    rgb[:, :] = (40, 40, 40)
    for center, filled in ((100, 300), (300, 0), (500, 150)):
        rgb[center - 10:center + 11, 50:350] = (200, 200, 200)
        if filled:
            rgb[center - 10:center + 11, 50:50 + filled] = (230, 110, 40)
    assert cv2.imwrite(str(path), cv2.cvtColor(rgb, cv2.COLOR_RGB2BGR))
    return str(path)


@pytest.fixture()
def frame_path(tmp_path: Path) -> str:
    return _write_frame(tmp_path / "frame.png")


class TestArguments:
    def test_defaults(self) -> None:
        args = _parse_args(["--image", "x.png"])

        assert args.image == "x.png"
        assert args.attack_y is None
        assert args.on_missing_anchors is None
        assert not args.json and not args.level and not args.ocr_anchors

    def test_anchor_and_policy_flags(self) -> None:
        args = _parse_args(["--image", "x.png", *ANCHOR_ARGS, "--on-missing-anchors", "fallback"])

        assert (args.attack_y, args.defense_y, args.hp_y) == (100.0, 300.0, 500.0)
        assert args.on_missing_anchors == "fallback"

    def test_rejects_unknown_policy(self) -> None:
        with pytest.raises(SystemExit):
            _parse_args(["--image", "x.png", "--on-missing-anchors", "guess"])

    def test_manual_anchors_win(self) -> None:
        merged = _merge_positions(BarPositions(attack=10.0), BarPositions(attack=99.0, hp=50.0))
        assert (merged.attack, merged.defense, merged.hp) == (10.0, None, 50.0)


class TestMain:
    def test_json_report(self, frame_path: str, capsys: pytest.CaptureFixture[str]) -> None:
        code = main(["--image", frame_path, *ANCHOR_ARGS, "--json"])

        report = json.loads(capsys.readouterr().out)
        assert code == 0
        assert report["ivs"] == {"atk": 15, "def": 0, "sta": 6}
        assert report["total"] == 21
        assert (report["width"], report["height"]) == (WIDTH, HEIGHT)

    def test_pillow_backend(self, frame_path: str, capsys: pytest.CaptureFixture[str]) -> None:
        code = main(["--image", frame_path, *ANCHOR_ARGS, "--backend", "pillow", "--json"])

        assert code == 0
        assert json.loads(capsys.readouterr().out)["ivs"] == {"atk": 15, "def": 0, "sta": 6}

    def test_text_report(self, frame_path: str, capsys: pytest.CaptureFixture[str]) -> None:
        code = main(["--image", frame_path, *ANCHOR_ARGS])

        out = capsys.readouterr().out
        assert code == 0
        assert "21/45 (47%)" in out

    def test_missing_anchors_abort(self, frame_path: str, capsys: pytest.CaptureFixture[str]) -> None:
        code = main(["--image", frame_path, "--on-missing-anchors", "abort", "--json"])

        assert code == 1
        assert json.loads(capsys.readouterr().out)["ivs"] is None

    def test_unreadable_image(self, tmp_path: Path) -> None:
        assert main(["--image", str(tmp_path / "missing.png")]) == 1

    def test_level_and_cp(self, frame_path: str, capsys: pytest.CaptureFixture[str]) -> None:
        base = StatTriple(198, 189, 190)
        cp = compute_cp(base, StatTriple(15, 0, 6), CPM_TABLE[25])

        code = main([
            "--image", frame_path, *ANCHOR_ARGS, "--level", "--json",
            "--cp", str(cp), "--base-atk", "198", "--base-def", "189", "--base-sta", "190",
        ])

        report = json.loads(capsys.readouterr().out)
        assert code == 0
        assert report["level"] is None
        assert report["level_confidence"] == "low"
        assert report["calculated_level"] == 25.0

    def test_overlay_written(self, frame_path: str, tmp_path: Path) -> None:
        out = tmp_path / "overlay.png"

        code = main(["--image", frame_path, *ANCHOR_ARGS, "--overlay", str(out)])

        assert code == 0
        written = cv2.imread(str(out))
        assert written is not None
        assert written.shape == (HEIGHT, WIDTH + 260, 3)
