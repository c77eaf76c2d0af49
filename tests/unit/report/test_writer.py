"""Tests for covsubmit.report.writer."""

from __future__ import annotations

import json
from pathlib import Path

from covsubmit.report.writer import write_report


class TestWriteReport:
    """Tests for write_report."""

    def test_creates_parent_directories(self, tmp_path: Path) -> None:
        path = tmp_path / "target" / "nested" / "coveralls.json"

        written = write_report({"source_files": []}, path)

        assert written == path
        assert json.loads(path.read_text(encoding="utf-8")) == {"source_files": []}

    def test_writes_utf8_without_escaping(self, tmp_path: Path) -> None:
        path = write_report({"service_branch": "größe"}, tmp_path / "coveralls.json")

        assert "größe" in path.read_text(encoding="utf-8")

    def test_not_coverable_lines_written_as_null(self, tmp_path: Path) -> None:
        document = {"source_files": [{"name": "A.java", "coverage": [None, 1]}]}

        path = write_report(document, tmp_path / "coveralls.json")

        assert '"coverage": [null, 1]' in path.read_text(encoding="utf-8")
