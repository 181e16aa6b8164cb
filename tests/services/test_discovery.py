"""Tests for recent-file discovery."""

from __future__ import annotations

import os

from quality_gates.services.discovery import discover_recent_files


def _touch(path, mtime: float) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text("export {}\n")
    os.utime(path, (mtime, mtime))


class TestDiscoverRecentFiles:

    def test_newest_first_and_limited(self, tmp_path) -> None:
        for i, name in enumerate(["a.tsx", "b.tsx", "c.tsx"]):
            _touch(tmp_path / name, 1_000_000 + i)
        found = discover_recent_files(tmp_path, (".tsx",), limit=2)
        assert found == [str(tmp_path / "c.tsx"), str(tmp_path / "b.tsx")]

    def test_filters_extensions_and_skipped_dirs(self, tmp_path) -> None:
        _touch(tmp_path / "app" / "Hero.tsx", 1_000_000)
        _touch(tmp_path / "app" / "notes.md", 1_000_001)
        _touch(tmp_path / "node_modules" / "lib" / "index.tsx", 1_000_002)
        _touch(tmp_path / "dist" / "bundle.tsx", 1_000_003)
        assert discover_recent_files(tmp_path, (".tsx",)) == [str(tmp_path / "app" / "Hero.tsx")]

    def test_ties_broken_by_path(self, tmp_path) -> None:
        _touch(tmp_path / "b.ts", 1_000_000)
        _touch(tmp_path / "a.ts", 1_000_000)
        assert discover_recent_files(tmp_path, (".ts",)) == [
            str(tmp_path / "a.ts"),
            str(tmp_path / "b.ts"),
        ]

    def test_missing_root(self, tmp_path) -> None:
        assert discover_recent_files(tmp_path / "missing", (".tsx",)) == []

    def test_skipped_dirs_are_not_walked(self, tmp_path, monkeypatch) -> None:
        _touch(tmp_path / "src" / "Hero.tsx", 1_000_000)
        _touch(tmp_path / "node_modules" / "pkg" / "deep" / "index.tsx", 1_000_001)
        _touch(tmp_path / "src" / "dist" / "out.tsx", 1_000_002)
        visited = []
        real_walk = os.walk

        def recording_walk(top, *args, **kwargs):
            for entry in real_walk(top, *args, **kwargs):
                visited.append(entry[0])
                yield entry

        monkeypatch.setattr("quality_gates.services.discovery.os.walk", recording_walk)
        assert discover_recent_files(tmp_path, (".tsx",)) == [str(tmp_path / "src" / "Hero.tsx")]
        assert sorted(visited) == sorted([str(tmp_path), str(tmp_path / "src")])
