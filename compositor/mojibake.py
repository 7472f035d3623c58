"""
Verificação de encoding dos manuscritos: UTF-8 válido, sem BOM e sem mojibake.
"""

from __future__ import annotations

from pathlib import Path
from typing import Iterable, Sequence

# Sequências em codepoints para evitar mojibake literal no código.
MOJIBAKE_CODEPOINTS: list[tuple[int, ...]] = [
    (0xE2, 0x80, 0x9C),       # “ em UTF-8 lido como latin-1
    (0xE2, 0x80, 0x9D),       # ”
    (0xE3, 0x80, 0x82),       # 。
    (0xEF, 0xBC, 0x8C),       # ，
    (0xC3, 0xA2, 0x20AC),     # prefixo comum de UTF-8 lido como cp1252
    (0xFFFD,),                # caractere de substituição
]

MOJIBAKE_TOKENS: list[str] = ["".join(chr(c) for c in seq) for seq in MOJIBAKE_CODEPOINTS]
BOM = "\ufeff"


def check_text(content: str, tokens: Sequence[str] | None = None) -> list[str]:
    """Problemas encontrados em um texto já decodificado."""
    tokens = list(tokens) if tokens is not None else MOJIBAKE_TOKENS
    problems: list[str] = []
    if content.startswith(BOM):
        problems.append("BOM no início do arquivo")
    for token in tokens:
        if token and token in content:
            problems.append(f"mojibake {token!r}")
            break
    return problems


def scan_paths(paths: Iterable[Path], tokens: Sequence[str] | None = None) -> list[str]:
    """Retorna lista de mensagens de erro encontradas ao varrer os arquivos."""
    errors: list[str] = []
    for path in paths:
        try:
            content = path.read_text(encoding="utf-8")
        except UnicodeDecodeError as exc:
            errors.append(f"Arquivo nao e UTF-8: {path} ({exc})")
            continue
        except OSError as exc:
            errors.append(f"Falha ao ler {path}: {exc}")
            continue
        for problem in check_text(content, tokens):
            errors.append(f"{path}: {problem}")
    return errors
