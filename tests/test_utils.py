from pathlib import Path

import pytest

from compositor.utils import numbered, partial_output, read_lines


def test_read_lines_numbers_and_strips(tmp_path: Path):
    path = tmp_path / "a.txt"
    path.write_text("  史记 \n\n　司马迁　\n", encoding="utf-8")
    assert list(read_lines(path)) == [(1, "史记"), (2, ""), (3, "司马迁")]


def test_read_lines_fails_on_open(tmp_path: Path):
    with pytest.raises(FileNotFoundError):
        read_lines(tmp_path / "nao_existe.txt")


def test_numbered_accepts_strings_and_pairs():
    assert list(numbered(["a", "b"])) == [(1, "a"), (2, "b")]
    assert list(numbered([(7, "a")])) == [(7, "a")]


def test_partial_output_renames_on_success(tmp_path: Path):
    out = tmp_path / "sub" / "livro.tex"
    with partial_output(out) as handle:
        handle.write("ok\n")
    assert out.read_text(encoding="utf-8") == "ok\n"
    assert not (tmp_path / "sub" / "livro.tex.partial").exists()


def test_partial_output_keeps_partial_on_error(tmp_path: Path):
    out = tmp_path / "livro.tex"
    with pytest.raises(ValueError):
        with partial_output(out) as handle:
            handle.write("metade\n")
            raise ValueError("quebrou")
    assert not out.exists()
    assert (tmp_path / "livro.tex.partial").read_text(encoding="utf-8") == "metade\n"
