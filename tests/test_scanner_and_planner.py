"""测试文件扫描、排除规则与转换决策。"""

from __future__ import annotations

import os
from pathlib import Path

import pytest
from PIL import Image

from photo_shrink.core.config import Options
from photo_shrink.core.exceptions import DiscoveryError
from photo_shrink.core.planner import (
    ACTION_CONVERT,
    ACTION_DRY_RUN,
    ACTION_SKIP,
    decide,
    output_path_for,
)
from photo_shrink.core.scanner import build_exclusions, collect_candidates


def test_collect_candidates_matches_extensions_case_insensitively(tmp_path: Path) -> None:
    source = tmp_path / "input"
    (source / "nested").mkdir(parents=True)

    Image.new("RGB", (8, 8), "blue").save(source / "a.JPG", format="JPEG")
    Image.new("RGB", (8, 8), "blue").save(source / "nested" / "b.tiff")
    (source / "notes.txt").write_text("hello")
    (source / "folder.png").mkdir()

    found = collect_candidates(source)

    assert found == [(source / "a.JPG").resolve(), (source / "nested" / "b.tiff").resolve()]
    assert all(path.is_absolute() for path in found)


def test_collect_candidates_applies_exclusions(tmp_path: Path) -> None:
    source = tmp_path / "input"
    (source / "node_modules").mkdir(parents=True)
    (source / "deep" / "node_modules").mkdir(parents=True)
    (source / "out").mkdir()

    for path in (
        source / "keep.png",
        source / "node_modules" / "x.png",
        source / "deep" / "node_modules" / "y.png",
        source / "out" / "z.webp",
    ):
        Image.new("RGB", (4, 4)).save(path)

    found = collect_candidates(source, exclude_patterns=build_exclusions(source, source / "out"))

    assert found == [(source / "keep.png").resolve()]


def test_collect_candidates_missing_directory_is_fatal(tmp_path: Path) -> None:
    with pytest.raises(DiscoveryError):
        collect_candidates(tmp_path / "missing")


def test_collect_candidates_skips_hidden_files_and_directories(tmp_path: Path) -> None:
    source = tmp_path / "input"
    (source / ".thumbs").mkdir(parents=True)
    (source / "album" / ".cache").mkdir(parents=True)

    for path in (
        source / ".hidden.jpg",
        source / ".thumbs" / "a.png",
        source / "album" / ".cache" / "b.png",
        source / "album" / "c.png",
    ):
        Image.new("RGB", (4, 4)).save(path, format="PNG" if path.suffix == ".png" else "JPEG")

    found = collect_candidates(source)

    assert found == [(source / "album" / "c.png").resolve()]


def _deny_scandir(monkeypatch: pytest.MonkeyPatch, blocked: Path) -> None:
    real_scandir = os.scandir

    def guarded(path=".", *args, **kwargs):
        if os.fspath(path) == str(blocked):
            raise PermissionError(13, "Permission denied", os.fspath(path))
        return real_scandir(path, *args, **kwargs)

    monkeypatch.setattr(os, "scandir", guarded)


def test_collect_candidates_unreadable_root_is_fatal(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    source = tmp_path / "input"
    source.mkdir()
    Image.new("RGB", (4, 4)).save(source / "a.png")

    _deny_scandir(monkeypatch, source.resolve())

    with pytest.raises(DiscoveryError, match="Permission denied"):
        collect_candidates(source)


def test_collect_candidates_unreadable_subdirectory_is_fatal(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    source = tmp_path / "input"
    (source / "locked").mkdir(parents=True)
    Image.new("RGB", (4, 4)).save(source / "a.png")
    Image.new("RGB", (4, 4)).save(source / "locked" / "b.png")

    _deny_scandir(monkeypatch, (source / "locked").resolve())

    with pytest.raises(DiscoveryError):
        collect_candidates(source)



def test_build_exclusions_for_nested_output(tmp_path: Path) -> None:
    patterns = build_exclusions(tmp_path, tmp_path / "out" / "webp")
    assert "out/webp/**" in patterns


def test_build_exclusions_escapes_glob_characters(tmp_path: Path) -> None:
    patterns = build_exclusions(tmp_path, tmp_path / "out[1]")
    assert "out[[]1]/**" in patterns


def test_build_exclusions_ignores_outside_or_same_output(tmp_path: Path) -> None:
    source = tmp_path / "input"
    source.mkdir()

    outside = build_exclusions(source, tmp_path / "elsewhere")
    same = build_exclusions(source, source)

    assert outside == same == ["**/node_modules/**"]


def test_output_path_strips_extension(tmp_path: Path) -> None:
    assert output_path_for(Path("/photos/trip/a.jpeg"), tmp_path) == tmp_path / "a.webp"
    assert output_path_for(Path("/photos/a.b.png"), tmp_path) == tmp_path / "a.b.webp"


@pytest.mark.parametrize(
    ("force", "dry_run", "exists", "expected"),
    [
        (False, False, False, ACTION_CONVERT),
        (False, False, True, ACTION_SKIP),
        (False, True, True, ACTION_SKIP),
        (False, True, False, ACTION_DRY_RUN),
        (True, False, True, ACTION_CONVERT),
        (True, True, True, ACTION_DRY_RUN),
    ],
)
def test_decide(tmp_path: Path, force: bool, dry_run: bool, exists: bool, expected: str) -> None:
    options = Options(force=force, dry_run=dry_run)
    checked: list[Path] = []

    def output_exists(path: Path) -> bool:
        checked.append(path)
        return exists

    plan = decide(Path("/in/a.png"), options, tmp_path, output_exists=output_exists)

    assert plan.action == expected
    assert plan.destination == tmp_path / "a.webp"
    if force:
        assert checked == []
