"""Configuração centralizada de logging para o Delivery Coordinator."""

import logging
import os
from pathlib import Path
from typing import Optional, Union


DEFAULT_LOG_FILE = 'app.log'

# Bibliotecas que registam cada pedido HTTP (Sheets, links curtos)
NOISY_LOGGERS = ('urllib3', 'google.auth', 'werkzeug')


def resolve_level(level: Union[int, str, None]) -> int:
    """Aceita 10, "debug" ou "DEBUG"; valores desconhecidos caem em INFO."""
    if isinstance(level, int):
        return level
    if not level:
        return logging.INFO
    resolved = logging.getLevelName(str(level).strip().upper())
    return resolved if isinstance(resolved, int) else logging.INFO


def configure_logging(level: Union[int, str, None] = None, log_file: Optional[str] = None) -> None:
    """
    Configura o logging apenas uma vez, evitando handlers duplicados.

    Nível e ficheiro vêm dos argumentos ou de LOG_LEVEL / LOG_FILE.
    As bibliotecas HTTP ficam em WARNING para não repetirem cada pedido
    feito à planilha.
    """
    root_logger = logging.getLogger()
    if root_logger.handlers:
        return

    nivel = resolve_level(level if level is not None else os.getenv('LOG_LEVEL'))
    ficheiro = Path(log_file or os.getenv('LOG_FILE', DEFAULT_LOG_FILE))
    ficheiro.parent.mkdir(parents=True, exist_ok=True)

    logging.basicConfig(
        level=nivel,
        format='%(asctime)s - %(levelname)s - %(name)s - %(message)s',
        handlers=[
            logging.StreamHandler(),
            logging.FileHandler(ficheiro, encoding='utf-8')
        ]
    )

    if nivel > logging.DEBUG:
        for nome in NOISY_LOGGERS:
            logging.getLogger(nome).setLevel(logging.WARNING)


__all__ = ["configure_logging", "resolve_level"]
