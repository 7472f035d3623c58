"""
Normalização de manuscritos em texto puro antes da compilação TeX.

Regras aplicadas em uma única passada:
- remove linhas vazias;
- troca qualquer espaço Unicode por espaço simples e colapsa sequências;
- corrige aspas ambíguas alternando “ e ”;
- une parágrafos quebrados até encontrar pontuação final fora de aspas.

Título, autor, marcadores de seção (`+`) e linhas de tabela passam intactos.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Iterable, Iterator, List, Tuple

from .errors import DanglingParagraphError, UnterminatedQuoteError
from .utils import LineInput, numbered

TABLE_FENCE = "---"
SECTION_PREFIX = "+"
OPEN_QUOTE = "“"
CLOSE_QUOTE = "”"
QUOTE_GLYPHS = frozenset((OPEN_QUOTE, CLOSE_QUOTE))
TERMINAL_PUNCTUATION = frozenset("。”？！）》")

log = logging.getLogger(__name__)


@dataclass
class NormalizerState:
    """Estado carregado entre linhas de um mesmo arquivo."""

    title: str | None = None
    author: str | None = None
    in_table: bool = False
    in_quote: bool = False
    is_space: bool = False
    could_end: bool = False
    buffer: List[str] = field(default_factory=list)
    last_line_number: int = 0

    @property
    def pending(self) -> bool:
        return bool(self.buffer) or self.in_quote


class Normalizer:
    """Máquina de estados do normalizador; alimentada linha a linha."""

    def __init__(self, logger: logging.Logger | None = None) -> None:
        self.state = NormalizerState()
        self.logger = logger or log

    def feed(self, line_number: int, line: str) -> List[str]:
        """Processa uma linha bruta e devolve as linhas canônicas liberadas por ela."""
        state = self.state
        line = line.strip()
        state.last_line_number = line_number
        if not line:
            return []

        if state.title is None:
            state.title = line
            self.logger.debug("Título: %s", line)
            return [line]
        if state.author is None:
            state.author = line
            self.logger.debug("Autor: %s", line)
            return [line]

        if line == TABLE_FENCE:
            state.in_table = not state.in_table
            self._check_not_pending(line_number, line)
            return [line]
        if state.in_table or line.startswith(SECTION_PREFIX):
            self._check_not_pending(line_number, line)
            return [line]

        self._scan(line)
        if state.could_end and not state.in_quote:
            return [self._flush()]
        return []

    def finish(self) -> List[str]:
        """Fecha o fluxo; falha se sobrar parágrafo aberto ou aspas sem fechamento."""
        state = self.state
        if not state.pending:
            return []
        if state.in_quote:
            raise UnterminatedQuoteError(state.last_line_number, self.partial())
        raise DanglingParagraphError(state.last_line_number, self.partial())

    def _scan(self, line: str) -> None:
        state = self.state
        for ch in line:
            if ch.isspace():
                if state.is_space:
                    state.could_end = False
                    continue
                ch = " "
                state.is_space = True
            else:
                state.is_space = False
            if ch in QUOTE_GLYPHS:
                ch = CLOSE_QUOTE if state.in_quote else OPEN_QUOTE
                state.in_quote = not state.in_quote
            state.buffer.append(ch)
            state.could_end = ch in TERMINAL_PUNCTUATION

    def _flush(self) -> str:
        state = self.state
        text = "".join(state.buffer)
        state.buffer.clear()
        state.is_space = False
        state.could_end = False
        return text

    def partial(self) -> str:
        return "".join(self.state.buffer)

    def _check_not_pending(self, line_number: int, line: str) -> None:
        state = self.state
        if not state.pending:
            return
        partial = self.partial()
        detail = "tabela ou seção interrompe parágrafo não terminado"
        if state.in_quote:
            detail = "tabela ou seção interrompe aspas abertas"
        raise DanglingParagraphError(line_number, line, detail=f"{detail} (pendente: {partial!r})")


def iter_normalized_numbered(
    lines: Iterable[LineInput],
    logger: logging.Logger | None = None,
) -> Iterator[Tuple[int, str]]:
    """
    Gera pares (linha de origem, linha canônica) em streaming.

    O número é o da última linha bruta que compõe a linha canônica. Em erro
    fatal, o conteúdo parcial do buffer é emitido antes da exceção, para que o
    arquivo de saída parcial sirva de diagnóstico.
    """
    normalizer = Normalizer(logger=logger)
    for line_number, line in numbered(lines):
        try:
            out = normalizer.feed(line_number, line)
        except DanglingParagraphError:
            partial = normalizer.partial()
            if partial:
                yield line_number, partial
            raise
        for text in out:
            yield line_number, text
    last = normalizer.state.last_line_number
    try:
        for text in normalizer.finish():
            yield last, text
    except (DanglingParagraphError, UnterminatedQuoteError):
        partial = normalizer.partial()
        if partial:
            yield last, partial
        raise


def iter_normalized(lines: Iterable[LineInput], logger: logging.Logger | None = None) -> Iterator[str]:
    """Gera as linhas canônicas em streaming (sem os números de origem)."""
    for _, text in iter_normalized_numbered(lines, logger=logger):
        yield text


def normalize_lines(lines: Iterable[LineInput], logger: logging.Logger | None = None) -> List[str]:
    """Normaliza uma sequência de linhas brutas e devolve as linhas canônicas."""
    return list(iter_normalized(lines, logger=logger))


def normalize_text(text: str, logger: logging.Logger | None = None) -> str:
    """Atalho para texto completo; devolve linhas canônicas unidas por quebra de linha."""
    return "\n".join(normalize_lines(text.splitlines(), logger=logger))
