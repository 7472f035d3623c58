"""
Configurações centrais do compositor (fontes, tamanho, sufixos de saída).

Mantém valores padrão em um único lugar; nenhum valor aqui altera o parsing,
apenas o preâmbulo TeX e os nomes de arquivos gerados.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Any

import yaml


DEFAULT_CONFIG_PATHS = (Path("config.yaml"), Path("config.yml"))
log = logging.getLogger(__name__)


@dataclass(frozen=True)
class AppConfig:
    """Valores padrão para todo o pipeline."""

    # Fontes (use fc-list para ver as instaladas)
    font_name: str = "SimSun"
    fallback_font_name: str | None = None
    title_font_name: str = "KaiTi"

    # Tamanho padrão pensado para leitores de 9 polegadas
    font_size: int = 16

    # Layout
    toc_depth: int = 0
    line_spread: float = 1.2

    # Sufixos de saída
    normalized_suffix: str = ".new.txt"
    tex_suffix: str = ".tex"


def with_overrides(cfg: AppConfig, **overrides: Any) -> AppConfig:
    """Aplica overrides não nulos (ex.: flags da CLI) sobre a config."""
    valid = {f.name for f in fields(AppConfig)}
    changes = {k: v for k, v in overrides.items() if k in valid and v is not None}
    return replace(cfg, **changes) if changes else cfg


def load_config(config_path: str | Path | None = None) -> AppConfig:
    """
    Carrega configurações a partir de YAML, com fallback para valores padrão.
    """
    base = AppConfig()

    path: Path | None = None
    if config_path:
        candidate = Path(config_path)
        if candidate.exists():
            path = candidate
        else:
            log.warning("Config %s não encontrada; usando defaults.", candidate)
    else:
        for candidate in DEFAULT_CONFIG_PATHS:
            if candidate.exists():
                path = candidate
                break

    if path is None:
        return base

    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except FileNotFoundError:
        return base
    except (OSError, UnicodeDecodeError, yaml.YAMLError) as exc:
        log.warning("Falha ao ler config %s; usando defaults. Erro: %s", path, exc)
        return base

    if not isinstance(data, dict):
        log.warning("Config %s tem formato inesperado; usando defaults.", path)
        return base

    overrides = {}
    for key, value in data.items():
        if key not in base.__dict__:
            log.debug("Chave de config ignorada: %s", key)
            continue
        default = base.__dict__[key]
        if isinstance(default, bool) or default is None or isinstance(value, type(default)):
            overrides[key] = value
        elif isinstance(default, float) and isinstance(value, int):
            overrides[key] = float(value)
        else:
            log.warning(
                "Config %s: valor inválido para %s (%r); mantendo %r.",
                path,
                key,
                value,
                default,
            )

    merged = {**base.__dict__, **overrides}
    return AppConfig(**merged)
