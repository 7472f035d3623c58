"""
Modelo do documento montado pelo compilador (título, autor e blocos).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Union

COMMENT_OPEN = "（"
COMMENT_CLOSE = "）"


def find_comments(text: str) -> List[str]:
    """Lista os comentários （…） de uma linha, sem os delimitadores."""
    comments: List[str] = []
    start = text.find(COMMENT_OPEN)
    while start != -1:
        end = text.find(COMMENT_CLOSE, start + 1)
        if end == -1:
            break
        comments.append(text[start + 1 : end])
        start = text.find(COMMENT_OPEN, end + 1)
    return comments


@dataclass
class Section:
    level: int
    title: str
    ordinal: int
    line_number: int = 0

    @property
    def comments(self) -> List[str]:
        return find_comments(self.title)


@dataclass
class Paragraph:
    text: str
    line_number: int = 0

    @property
    def comments(self) -> List[str]:
        return find_comments(self.text)


@dataclass
class Table:
    rows: List[List[str]] = field(default_factory=list)
    line_number: int = 0

    @property
    def columns(self) -> int:
        return len(self.rows[0]) if self.rows else 0


Block = Union[Section, Paragraph, Table]


@dataclass
class Document:
    title: str = ""
    author: str = ""
    blocks: List[Block] = field(default_factory=list)

    def sections(self, level: int | None = None) -> List[Section]:
        """Seções do documento, opcionalmente filtradas por nível."""
        return [
            b for b in self.blocks if isinstance(b, Section) and (level is None or b.level == level)
        ]
