"""
Módulo de Logging Centralizado.

Todos os módulos do SIGA obtêm seu logger por aqui, para que as mensagens
saiam com o mesmo formato no stdout (padrão para containers).
"""

import logging
import os
import sys

FORMATO_LOG = '[%(asctime)s] %(levelname)s in %(module)s: %(message)s'


def _nivel_configurado() -> int:
    nome = os.environ.get('LOG_LEVEL', 'INFO').upper()
    return getattr(logging, nome, logging.INFO)


def get_logger(name: str) -> logging.Logger:
    """
    Configura e retorna uma instância de logger com formatação padronizada.

    Args:
        name (str): O nome do módulo que está chamando o log (geralmente __name__).

    Returns:
        logging.Logger: Instância configurada do logger.
    """
    logger = logging.getLogger(name)

    # Evita adicionar múltiplos handlers se o logger já estiver configurado
    if not logger.handlers:
        logger.setLevel(_nivel_configurado())

        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(logging.Formatter(FORMATO_LOG))
        logger.addHandler(handler)

    return logger


def configurar_nivel(nivel: str) -> None:
    """Aplica o LOG_LEVEL da configuração Flask aos loggers do pacote 'siga'."""
    valor = getattr(logging, (nivel or 'INFO').upper(), logging.INFO)
    for nome, logger in logging.root.manager.loggerDict.items():
        if nome.startswith('siga') and isinstance(logger, logging.Logger):
            logger.setLevel(valor)
