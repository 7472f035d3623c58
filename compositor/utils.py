"""
Funções utilitárias compartilhadas.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from pathlib import Path
from typing import Iterable, Iterator, TextIO, Tuple, Union


PARTIAL_SUFFIX = ".partial"
LineInput = Union[str, Tuple[int, str]]


def setup_logging(level: int = logging.INFO) -> logging.Logger:
    """Configura logging simples para console."""
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )
    return logging.getLogger("compositor")


def ensure_dir(path: Path) -> None:
    """Cria diretório se não existir."""
    path.mkdir(parents=True, exist_ok=True)


def iter_numbered(lines: Iterable[str]) -> Iterator[Tuple[int, str]]:
    """Numera linhas (a partir de 1) e remove espaços das pontas."""
    for number, raw in enumerate(lines, start=1):
        yield number, raw.strip()


def numbered(lines: Iterable[LineInput]) -> Iterator[Tuple[int, str]]:
    """Aceita strings ou pares (número, linha) já numerados por `read_lines`."""
    for idx, item in enumerate(lines, start=1):
        if isinstance(item, tuple):
            yield item
        else:
            yield idx, item


def read_lines(path: Path, encoding: str = "utf-8") -> Iterator[Tuple[int, str]]:
    """
    Lê um arquivo UTF-8 linha a linha, devolvendo (número, linha sem espaços nas pontas).

    O arquivo é aberto na chamada (OSError sai daqui); a leitura em si é preguiçosa.
    """
    handle = path.open("r", encoding=encoding)
    return _lines_then_close(handle)


def _lines_then_close(handle: TextIO) -> Iterator[Tuple[int, str]]:
    with handle:
        yield from iter_numbered(handle)


@contextmanager
def partial_output(path: Path, encoding: str = "utf-8") -> Iterator[TextIO]:
    """
    Abre `<path>.partial` para escrita e só renomeia para `path` se o bloco terminar sem erro.

    Em caso de exceção, o arquivo parcial fica em disco para diagnóstico e uma
    saída anterior em `path` é removida, para não ser confundida com a atual.
    """
    ensure_dir(path.parent)
    tmp = path.with_name(path.name + PARTIAL_SUFFIX)
    try:
        with tmp.open("w", encoding=encoding, newline="\n") as handle:
            yield handle
    except BaseException:
        path.unlink(missing_ok=True)
        raise
    tmp.replace(path)
