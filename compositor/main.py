"""
CLI principal para normalização e compilação TeX.

Uso:
    python -m compositor.main formata livro.txt      # gera livro.new.txt
    python -m compositor.main compila livro.txt      # gera livro.tex
    xelatex livro.tex                                # 2-3 vezes para o sumário
"""

from __future__ import annotations

import argparse
import logging
from pathlib import Path
from typing import Iterable, Sequence

from .compiler import TexCompiler
from .config import AppConfig, load_config, with_overrides
from .document import Document
from .errors import StructuralError
from .mojibake import scan_paths
from .normalizer import iter_normalized, iter_normalized_numbered
from .utils import PARTIAL_SUFFIX, partial_output, read_lines, setup_logging

INPUT_SUFFIX = ".txt"


def build_parser(cfg: AppConfig) -> argparse.ArgumentParser:
    """Constroi o parser de argumentos com subcomandos formata/compila/verifica."""
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument(
        "--debug",
        action="store_true",
        help="Ativa logs detalhados.",
    )  # permite --debug antes ou depois do subcomando
    common.add_argument("--config", type=str, help="Arquivo YAML de configuração (padrão: config.yaml).")
    parser = argparse.ArgumentParser(
        description="Normaliza manuscritos em texto puro e compila para TeX (xelatex).",
        parents=[common],
    )
    sub = parser.add_subparsers(dest="command", required=True)

    # Subcomando: formatar
    f = sub.add_parser(
        "formata",
        parents=[common],
        help="Normaliza ARQ.txt em ARQ.new.txt (espaços, aspas, parágrafos quebrados).",
    )
    f.add_argument("inputs", nargs="+", help="Arquivos .txt de entrada.")

    # Subcomando: compilar
    c = sub.add_parser(
        "compila",
        parents=[common],
        help="Converte ARQ.txt (texto canônico) em ARQ.tex.",
    )
    c.add_argument("inputs", nargs="+", help="Arquivos .txt de entrada.")
    c.add_argument("--font-name", type=str, help=f"Fonte principal (padrão: {cfg.font_name}).")
    c.add_argument("--fallback-font-name", type=str, help="Fonte reserva para glifos ausentes.")
    c.add_argument("--title-font-name", type=str, help=f"Fonte dos títulos (padrão: {cfg.title_font_name}).")
    c.add_argument("--font-size", type=int, help=f"Tamanho da fonte em pt (padrão: {cfg.font_size}).")
    c.add_argument(
        "--formata",
        action="store_true",
        help="Normaliza a entrada antes de compilar (sem gravar o .new.txt).",
    )

    # Subcomando: verificar encoding
    v = sub.add_parser(
        "verifica",
        parents=[common],
        help="Verifica se os arquivos são UTF-8 sem BOM e sem mojibake.",
    )
    v.add_argument("inputs", nargs="+", help="Arquivos a verificar.")

    return parser


def find_inputs(inputs: Iterable[str], logger: logging.Logger) -> list[Path]:
    """Filtra as entradas .txt; as demais são ignoradas com aviso."""
    paths: list[Path] = []
    for raw in inputs:
        path = Path(raw)
        if path.suffix != INPUT_SUFFIX:
            logger.warning("Não sei converter %s. Ignorando.", path)
            continue
        paths.append(path)
    return paths


def output_path(path: Path, suffix: str) -> Path:
    """livro.txt -> livro<suffix> no mesmo diretório."""
    return path.with_name(path.name[: -len(INPUT_SUFFIX)] + suffix)


def format_file(input_path: Path, output: Path, logger: logging.Logger) -> bool:
    """Normaliza um arquivo; devolve False em erro (já registrado no log)."""
    logger.info("Formatando %s para %s ...", input_path, output)
    try:
        lines = read_lines(input_path)
        with partial_output(output) as handle:
            for line in iter_normalized(lines, logger=logger):
                handle.write(line + "\n")
    except StructuralError as exc:
        logger.error("Erro em %s: %s (saída parcial em %s%s)", input_path, exc, output, PARTIAL_SUFFIX)
        return False
    except (OSError, UnicodeDecodeError) as exc:
        logger.warning("Falha ao processar %s: %s. Ignorando.", input_path, exc)
        return False
    return True


def compile_file(
    input_path: Path,
    output: Path,
    cfg: AppConfig,
    logger: logging.Logger,
    normalize_first: bool = False,
) -> Document | None:
    """Compila um arquivo para TeX; devolve o documento ou None em erro."""
    logger.info("Convertendo %s para %s ...", input_path, output)
    compiler = TexCompiler(cfg, logger=logger)
    try:
        lines = read_lines(input_path)
        if normalize_first:
            lines = iter_normalized_numbered(lines, logger=logger)
        with partial_output(output) as handle:
            for chunk in compiler.iter_tex(lines):
                handle.write(chunk + "\n")
    except StructuralError as exc:
        logger.error("Erro em %s: %s (saída parcial em %s%s)", input_path, exc, output, PARTIAL_SUFFIX)
        return None
    except (OSError, UnicodeDecodeError) as exc:
        logger.warning("Falha ao processar %s: %s. Ignorando.", input_path, exc)
        return None
    doc = compiler.document
    logger.info("%s: %d blocos, %d capítulos.", output.name, len(doc.blocks), len(doc.sections(level=1)))
    return doc


def run_format(args, cfg: AppConfig, logger: logging.Logger) -> int:
    """Executa a normalização em lote; devolve o número de falhas."""
    failures = 0
    for path in find_inputs(args.inputs, logger):
        if not format_file(path, output_path(path, cfg.normalized_suffix), logger):
            failures += 1
    return failures


def run_compile(args, cfg: AppConfig, logger: logging.Logger) -> int:
    """Executa a compilação em lote; devolve o número de falhas."""
    cfg = with_overrides(
        cfg,
        font_name=args.font_name,
        fallback_font_name=args.fallback_font_name,
        title_font_name=args.title_font_name,
        font_size=args.font_size,
    )
    failures = 0
    for path in find_inputs(args.inputs, logger):
        doc = compile_file(
            path,
            output_path(path, cfg.tex_suffix),
            cfg,
            logger,
            normalize_first=getattr(args, "formata", False),
        )
        if doc is None:
            failures += 1
    return failures


def run_check(args, logger: logging.Logger) -> int:
    errors = scan_paths(Path(p) for p in args.inputs)
    for err in errors:
        logger.error(err)
    if not errors:
        logger.info("Nenhum problema de encoding encontrado.")
    return len(errors)


def main(argv: Sequence[str] | None = None) -> int:
    pre = argparse.ArgumentParser(add_help=False)
    pre.add_argument("--config", type=str)
    known, _ = pre.parse_known_args(argv)
    cfg = load_config(known.config)

    parser = build_parser(cfg)
    args = parser.parse_args(argv)
    logger = setup_logging(logging.DEBUG if args.debug else logging.INFO)

    if args.command == "formata":
        failures = run_format(args, cfg, logger)
    elif args.command == "compila":
        failures = run_compile(args, cfg, logger)
    elif args.command == "verifica":
        failures = run_check(args, logger)
    else:
        parser.error("Comando inválido.")
    return 1 if failures else 0


if __name__ == "__main__":
    raise SystemExit(main())
