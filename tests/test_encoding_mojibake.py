from __future__ import annotations

from pathlib import Path

import pytest

from compositor.mojibake import MOJIBAKE_TOKENS, check_text, scan_paths


def _iter_source_files() -> list[Path]:
    root = Path(__file__).resolve().parents[1]
    sources: set[Path] = set()
    patterns = ("*.py", "*.md", "*.yaml")
    for rel in ("compositor", "tests"):
        base = root / rel
        for pattern in patterns:
            sources.update(base.rglob(pattern))
    return sorted(sources)


@pytest.mark.parametrize("path", _iter_source_files())
def test_source_files_are_utf8_and_free_of_mojibake(path: Path):
    assert scan_paths([path]) == []


def test_check_text_detects_misdecoded_quotes():
    broken = "“你好”".encode("utf-8").decode("latin-1")
    problems = check_text(broken)
    assert problems == [f"mojibake {MOJIBAKE_TOKENS[0]!r}"]


def test_scan_paths_reports_non_utf8(tmp_path: Path):
    path = tmp_path / "gbk.txt"
    path.write_bytes("史记".encode("gbk"))
    errors = scan_paths([path])
    assert len(errors) == 1
    assert errors[0].startswith("Arquivo nao e UTF-8")


def test_scan_paths_reports_missing_file_and_continues(tmp_path):
    ok = tmp_path / "ok.txt"
    ok.write_text("\ufeffT\n", encoding="utf-8")
    errors = scan_paths([tmp_path / "nao_existe.txt", ok])
    assert len(errors) == 2
    assert errors[0].startswith("Falha ao ler")
    assert errors[1].endswith("BOM no início do arquivo")
