"""Tests for tabby.export.writer — output paths and file persistence."""

from __future__ import annotations

from pathlib import Path

import pytest

from tabby._errors import WriteError
from tabby.export.writer import FileWriter, output_path_for


class TestOutputPathFor:
    """output_path_for — route to file conventions."""

    OUT = Path("/out")

    @pytest.mark.parametrize(
        ("route", "expected"),
        [
            ("/", "index.html"),
            ("/about", "about.html"),
            ("/blog/first-post", "blog/first-post.html"),
            ("/docs/", "docs/index.html"),
            ("/feed.xml", "feed.xml"),
            ("/sitemap.xml", "sitemap.xml"),
            ("/notes/v1.2", "notes/v1.2"),
        ],
    )
    def test_conventions(self, route: str, expected: str) -> None:
        assert output_path_for(route, self.OUT) == self.OUT / expected

    def test_root_is_not_dot_html(self) -> None:
        assert output_path_for("/", self.OUT).name == "index.html"

    def test_escape_refused(self) -> None:
        with pytest.raises(WriteError, match="escapes"):
            output_path_for("/../etc/passwd", self.OUT)


class TestFileWriter:
    """FileWriter — atomic writes and best-effort deletes."""

    def test_write_creates_parents(self, tmp_path: Path) -> None:
        writer = FileWriter(tmp_path / "out")
        target = tmp_path / "out" / "blog" / "post.html"

        assert writer.write(target, b"<p>hi</p>") == 9
        assert target.read_bytes() == b"<p>hi</p>"
        assert writer.root == tmp_path / "out"

    def test_overwrite_leaves_no_temp_file(self, tmp_path: Path) -> None:
        writer = FileWriter(tmp_path)
        target = tmp_path / "page.html"
        writer.write(target, b"one")
        writer.write(target, b"two")

        assert target.read_bytes() == b"two"
        assert sorted(p.name for p in tmp_path.iterdir()) == ["page.html"]

    def test_write_failure(self, tmp_path: Path) -> None:
        blocker = tmp_path / "blocker"
        blocker.write_text("a file, not a directory")
        writer = FileWriter(tmp_path)

        with pytest.raises(WriteError, match="Failed to write"):
            writer.write(blocker / "page.html", b"x")

    def test_delete(self, tmp_path: Path) -> None:
        target = tmp_path / "page.html"
        target.write_text("x")
        assert FileWriter(tmp_path).delete(target) is True
        assert not target.exists()

    def test_delete_missing_is_fine(self, tmp_path: Path) -> None:
        assert FileWriter(tmp_path).delete(tmp_path / "ghost.html") is False

    def test_delete_failure_reported(
        self, tmp_path: Path, capsys: pytest.CaptureFixture[str],
    ) -> None:
        folder = tmp_path / "docs.html"
        folder.mkdir()

        assert FileWriter(tmp_path).delete(folder) is False
        err = capsys.readouterr().err
        assert "\u2717" in err
        assert "Delete failed:" in err
        assert "docs.html" in err
