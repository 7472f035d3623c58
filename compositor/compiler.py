"""
Compila texto canônico (título, autor, seções `+`, tabelas `---`, comentários （…）) em TeX.

A emissão acontece durante o parsing: `TexCompiler.iter_tex` é um gerador de
trechos TeX e preenche `TexCompiler.document` no mesmo passo. Use xelatex
(com xeCJK) para gerar o PDF; rode-o mais de uma vez para resolver o sumário.
"""

from __future__ import annotations

import logging
import re
from typing import Iterable, Iterator, List, Tuple

from .config import AppConfig
from .document import COMMENT_CLOSE, COMMENT_OPEN, Document, Paragraph, Section, Table
from .errors import (
    MissingHeaderError,
    TableShapeError,
    UnknownHeadingError,
    UnterminatedCommentError,
    UnterminatedTableError,
)
from .normalizer import SECTION_PREFIX, TABLE_FENCE
from .utils import LineInput, numbered

COLUMN_SEPARATOR = "|"
MAX_LEVELS = 8
# Nível 0 é o mais externo; \minisec (KOMA) cobre o oitavo nível.
LEVEL_COMMANDS = (
    "part",
    "chapter",
    "section",
    "subsection",
    "subsubsection",
    "paragraph",
    "subparagraph",
    "minisec",
)
PAGE_BREAK_LEVEL = 1

TEX_SPECIALS = {
    "\\": r"\textbackslash{}",
    "{": r"\{",
    "}": r"\}",
    "#": r"\#",
    "$": r"\$",
    "%": r"\%",
    "&": r"\&",
    "_": r"\_",
    "^": r"\textasciicircum{}",
    "~": r"\textasciitilde{}",
}
TEX_SPECIALS_RE = re.compile("|".join(re.escape(ch) for ch in TEX_SPECIALS))

log = logging.getLogger(__name__)


def escape_tex(text: str) -> str:
    """Escapa caracteres especiais do TeX."""
    return TEX_SPECIALS_RE.sub(lambda m: TEX_SPECIALS[m.group(0)], text)


def render_inline(text: str, line_number: int | None = None) -> str:
    """
    Escapa o texto e troca comentários （…） por `{\\footnotesize …}`.

    Um （ sem ） até o fim da linha é erro fatal; um ） solto fica literal.
    """
    parts: List[str] = []
    pos = 0
    while True:
        start = text.find(COMMENT_OPEN, pos)
        if start == -1:
            parts.append(escape_tex(text[pos:]))
            break
        end = text.find(COMMENT_CLOSE, start + 1)
        if end == -1:
            raise UnterminatedCommentError(line_number, text)
        parts.append(escape_tex(text[pos:start]))
        parts.append(r"{\footnotesize " + escape_tex(text[start + 1 : end]) + "}")
        pos = end + 1
    return "".join(parts)


def strip_comments(text: str) -> str:
    """Remove comentários （…） fechados (usado no sumário)."""
    return re.sub(f"{COMMENT_OPEN}[^{COMMENT_CLOSE}]*{COMMENT_CLOSE}", "", text).strip()


def parse_heading(line: str, line_number: int | None = None) -> Tuple[int, str]:
    """Devolve (nível 0-7, título) de uma linha iniciada por `+`."""
    count = len(line) - len(line.lstrip(SECTION_PREFIX))
    if count == 0 or count > MAX_LEVELS:
        raise UnknownHeadingError(line_number, line, detail=f"nível de título desconhecido ({count} marcadores)")
    title = line[count:].strip()
    if not title:
        raise UnknownHeadingError(line_number, line, detail="título de seção vazio")
    return count - 1, title


def split_row(line: str) -> List[str]:
    return [cell.strip() for cell in line.split(COLUMN_SEPARATOR)]


def render_preamble(cfg: AppConfig) -> str:
    """Cabeçalho do documento: classe, pacotes, fontes e regras de quebra de linha."""
    xecjk = "\\usepackage[AutoFallBack=true]{xeCJK}" if cfg.fallback_font_name else "\\usepackage{xeCJK}"
    lines = [
        f"\\documentclass[fontsize={cfg.font_size}pt]{{scrbook}}",
        r"\usepackage{hyperref}",
        r"\usepackage{indentfirst}",
        r"\usepackage{longtable}",
        xecjk,
        r"\CJKspace",
        f"\\setCJKmainfont{{{cfg.font_name}}}",
    ]
    if cfg.fallback_font_name:
        lines.append(f"\\setCJKfallbackfamilyfont{{rm}}{{{cfg.fallback_font_name}}}")
    lines += [
        f"\\setCJKfamilyfont{{title}}{{{cfg.title_font_name}}}",
        r'\XeTeXlinebreaklocale "zh"',
        r"\XeTeXlinebreakskip 0pt plus 1pt",
        r"\setcounter{secnumdepth}{-1}",
        f"\\setcounter{{tocdepth}}{{{cfg.toc_depth}}}",
        f"\\linespread{{{cfg.line_spread}}}",
        r"\setlength{\parindent}{3em}",
        r"\sloppy",
        r"\begin{document}",
    ]
    return "\n".join(lines)


def render_title_page(title: str, author: str, line_number: int | None = None) -> str:
    title_tex = render_inline(title, line_number)
    author_tex = render_inline(author, line_number)
    return "\n".join(
        [
            r"\begin{titlepage}",
            r"\begin{center}",
            r"\vspace*{\fill}",
            r"\CJKfamily{title}",
            r"\textsc{\textbf{\huge " + title_tex + r"}}\\[0.5cm]",
            r"\CJKfamily{}",
            r"\textsc{\large " + author_tex + r"}\\[1.5cm]",
            r"{\today}",
            r"\vspace*{\fill}",
            r"\end{center}",
            r"\end{titlepage}",
        ]
    )


def render_heading(level: int, title: str, line_number: int | None = None) -> str:
    command = LEVEL_COMMANDS[level]
    body = render_inline(title, line_number)
    short = ""
    plain = strip_comments(title) if COMMENT_OPEN in title else ""
    if plain and command != "minisec":
        short = f"[{{{escape_tex(plain)}}}]"
    heading = f"\\{command}{short}{{{body}}}"
    if level == PAGE_BREAK_LEVEL:
        return "\\cleardoublepage\n\\phantomsection\n" + heading
    return heading


def render_paragraph(text: str, line_number: int | None = None) -> str:
    return "\\par\n" + render_inline(text, line_number)


def render_table(table: Table) -> str:
    width = round(0.9 / table.columns, 3)
    colspec = "|" + "|".join(f"p{{{width}\\linewidth}}" for _ in range(table.columns)) + "|"
    lines = [f"\\begin{{longtable}}{{{colspec}}}", r"\hline"]
    for row in table.rows:
        cells = [render_inline(cell, table.line_number) for cell in row]
        lines.append(" & ".join(cells) + r" \\")
        lines.append(r"\hline")
    lines.append(r"\end{longtable}")
    return "\n".join(lines)


class TexCompiler:
    """Compilador em passada única de texto canônico para TeX."""

    def __init__(self, cfg: AppConfig | None = None, logger: logging.Logger | None = None) -> None:
        self.cfg = cfg or AppConfig()
        self.logger = logger or log
        self.document = Document()
        self.counters = [0] * MAX_LEVELS
        self.titles: List[str | None] = [None] * MAX_LEVELS
        self._table: Table | None = None
        self._has_title = False
        self._has_author = False

    def iter_tex(self, lines: Iterable[LineInput]) -> Iterator[str]:
        """Gera trechos TeX conforme as linhas são lidas."""
        yield render_preamble(self.cfg)
        last_line = 0
        for line_number, line in numbered(lines):
            last_line = line_number
            line = line.strip()
            if not line:
                continue
            chunk = self._feed(line_number, line)
            if chunk is not None:
                yield chunk
        if self._table is not None:
            raise UnterminatedTableError(self._table.line_number, TABLE_FENCE)
        if not self._has_author:
            raise MissingHeaderError(None, detail=f"título ou autor ausente (linhas lidas: {last_line})")
        yield r"\end{document}"

    def _feed(self, line_number: int, line: str) -> str | None:
        doc = self.document
        if not self._has_title:
            doc.title = line
            self._has_title = True
            self.logger.info("Título: %s", line)
            return None
        if not self._has_author:
            doc.author = line
            self._has_author = True
            self.logger.info("Autor: %s", line)
            return render_title_page(doc.title, doc.author, line_number) + "\n\\tableofcontents{}"

        if line == TABLE_FENCE:
            return self._toggle_table(line_number)
        if self._table is not None:
            self._add_row(line_number, line)
            return None
        if line.startswith(SECTION_PREFIX):
            return self._open_section(line_number, line)

        tex = render_paragraph(line, line_number)
        doc.blocks.append(Paragraph(text=line, line_number=line_number))
        return tex

    def _toggle_table(self, line_number: int) -> str | None:
        if self._table is None:
            self._table = Table(line_number=line_number)
            return None
        table, self._table = self._table, None
        if not table.rows:
            self.logger.warning("Tabela vazia ignorada (linha %d).", table.line_number)
            return None
        self.document.blocks.append(table)
        self.logger.debug("Tabela %dx%d (linha %d).", len(table.rows), table.columns, table.line_number)
        return render_table(table)

    def _add_row(self, line_number: int, line: str) -> None:
        table = self._table
        row = split_row(line)
        if table.rows and len(row) != table.columns:
            raise TableShapeError(
                line_number,
                line,
                detail=f"tabela com {len(row)} colunas, esperado {table.columns}",
            )
        for cell in row:
            render_inline(cell, line_number)
        table.rows.append(row)

    def _open_section(self, line_number: int, line: str) -> str | None:
        level, title = parse_heading(line, line_number)
        if self.titles[level] == title:
            self.logger.debug("Título repetido ignorado (linha %d): %s", line_number, title)
            return None
        tex = render_heading(level, title, line_number)
        self.counters[level] += 1
        self.titles[level] = title
        for deeper in range(level + 1, MAX_LEVELS):
            self.counters[deeper] = 0
            self.titles[deeper] = None
        section = Section(level=level, title=title, ordinal=self.counters[level], line_number=line_number)
        self.document.blocks.append(section)
        if level <= PAGE_BREAK_LEVEL:
            self.logger.info("%s %d: %s", LEVEL_COMMANDS[level].capitalize(), section.ordinal, title)
        return tex


def compile_document(
    lines: Iterable[LineInput],
    cfg: AppConfig | None = None,
    logger: logging.Logger | None = None,
) -> Tuple[Document, str]:
    """Compila tudo em memória e devolve (documento, TeX)."""
    compiler = TexCompiler(cfg, logger=logger)
    tex = "\n".join(compiler.iter_tex(lines)) + "\n"
    return compiler.document, tex
