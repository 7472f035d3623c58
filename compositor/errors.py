"""
Erros estruturais do pipeline (normalização e compilação TeX).

Um erro estrutural interrompe apenas o arquivo atual; o driver em lote
registra a mensagem e segue para o próximo arquivo.
"""

from __future__ import annotations


class StructuralError(Exception):
    """Violação estrutural fatal para o arquivo em processamento."""

    reason = "erro estrutural"

    def __init__(self, line_number: int | None, line: str = "", detail: str | None = None) -> None:
        self.line_number = line_number
        self.line = line
        self.detail = detail or self.reason
        super().__init__(self._format())

    def _format(self) -> str:
        where = f"linha {self.line_number}" if self.line_number is not None else "fim do arquivo"
        if self.line:
            return f"{self.detail} @ {where}: {self.line}"
        return f"{self.detail} @ {where}"


class NormalizeError(StructuralError):
    reason = "erro de normalização"


class UnterminatedQuoteError(NormalizeError):
    reason = "aspas não fechadas"


class DanglingParagraphError(NormalizeError):
    reason = "parágrafo sem pontuação final"


class CompileError(StructuralError):
    reason = "erro de compilação"


class MissingHeaderError(CompileError):
    reason = "título ou autor ausente"


class UnknownHeadingError(CompileError):
    reason = "nível de título desconhecido"


class TableShapeError(CompileError):
    reason = "número de colunas diferente da primeira linha da tabela"


class UnterminatedTableError(CompileError):
    reason = "tabela sem marcador de fechamento"


class UnterminatedCommentError(CompileError):
    reason = "comentário （ sem ） correspondente"
