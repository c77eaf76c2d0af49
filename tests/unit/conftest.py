"""Shared fixtures for covsubmit unit tests."""

from __future__ import annotations

from collections import defaultdict
from pathlib import Path
from typing import Callable, Dict, List, Optional

import pytest

JACOCO_DOCTYPE = '<!DOCTYPE report PUBLIC "-//JACOCO//DTD Report 1.1//EN" "report.dtd">'


def jacoco_xml(files: Dict[str, Dict[int, int]], name: str = "module") -> str:
    """Render a JaCoCo XML report.

    Args:
        files: Map of "package/File.java" to {line number: covered instructions}.
        name: Report name.
    """
    packages: Dict[str, List[str]] = defaultdict(list)
    for path, lines in files.items():
        package, _, source = path.rpartition("/")
        line_xml = "".join(
            f'<line nr="{nr}" mi="{0 if ci else 2}" ci="{ci}" mb="0" cb="0"/>'
            for nr, ci in sorted(lines.items())
        )
        packages[package].append(f'<sourcefile name="{source}">{line_xml}</sourcefile>')

    body = "".join(
        f'<package name="{package}">{"".join(sources)}</package>'
        for package, sources in packages.items()
    )
    return f'<?xml version="1.0" encoding="UTF-8" standalone="yes"?>{JACOCO_DOCTYPE}<report name="{name}">{body}</report>'


def cobertura_xml(files: Dict[str, Dict[int, int]]) -> str:
    """Render a Cobertura XML report with one class per file."""
    classes = []
    for path, lines in files.items():
        line_xml = "".join(f'<line number="{nr}" hits="{hits}"/>' for nr, hits in sorted(lines.items()))
        class_name = path.rsplit(".", 1)[0].replace("/", ".")
        classes.append(f'<class name="{class_name}" filename="{path}"><lines>{line_xml}</lines></class>')
    return (
        '<?xml version="1.0"?><coverage line-rate="0.5"><packages><package name="p"><classes>'
        + "".join(classes)
        + "</classes></package></packages></coverage>"
    )


def source_text(lines: int) -> str:
    """Java-like source with the given number of lines."""
    return "".join(f"// line {i}\n" for i in range(1, lines + 1))


@pytest.fixture
def write_file() -> Callable[[Path, str], Path]:
    """Write text to a path, creating parent directories."""

    def _write(path: Path, content: str) -> Path:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")
        return path

    return _write


@pytest.fixture
def make_module_dir(write_file) -> Callable[..., Path]:
    """Create a module directory with sources and an optional JaCoCo report.

    Returns a factory ``(base, sources, coverage=None) -> base`` where
    ``sources`` maps relative source names to line counts and ``coverage``
    maps the same names to {line: covered instructions}.
    """

    def _make(
        base: Path,
        sources: Dict[str, int],
        coverage: Optional[Dict[str, Dict[int, int]]] = None,
    ) -> Path:
        for name, lines in sources.items():
            write_file(base / "src" / "main" / "java" / name, source_text(lines))
        if coverage is not None:
            write_file(base / "target" / "site" / "jacoco" / "jacoco.xml", jacoco_xml(coverage, base.name))
        return base

    return _make


@pytest.fixture
def render_jacoco() -> Callable[..., str]:
    """The jacoco_xml renderer."""
    return jacoco_xml


@pytest.fixture
def render_cobertura() -> Callable[[Dict[str, Dict[int, int]]], str]:
    """The cobertura_xml renderer."""
    return cobertura_xml


@pytest.fixture
def render_source() -> Callable[[int], str]:
    """The source_text renderer."""
    return source_text
