"""
Módulo de Conexão com o Banco de Dados (Core)

Encapsula o cliente do Supabase usado pelos "Service Layers" da aplicação.
O cliente é criado explicitamente pela Application Factory, guardado em
app.extensions e encerrado com fechar(); não existe instância global.
"""

from typing import Optional

import httpx
from flask import current_app
from postgrest.exceptions import APIError
from supabase import Client, create_client

from siga.core.errors import ErroGravacao
from siga.core.logger import get_logger

logger = get_logger(__name__)

EXTENSAO = 'supabase'


class BancoDados:
    """
    Dono do ciclo de vida do cliente Supabase (construção e encerramento).
    """

    def __init__(self, app=None, client: Optional[Client] = None):
        self._client = client
        if app is not None:
            self.init_app(app)

    def init_app(self, app) -> None:
        if self._client is None:
            self._client = create_client(app.config['SUPABASE_URL'], app.config['SUPABASE_KEY'])
            logger.info("Cliente Supabase criado com sucesso.")
        app.extensions[EXTENSAO] = self

    @property
    def client(self) -> Client:
        if self._client is None:
            logger.critical("Tentativa de acesso ao Supabase falhou: cliente já encerrado.")
            raise ConnectionError("Não foi possível conectar ao Supabase.")
        return self._client

    @property
    def aberto(self) -> bool:
        return self._client is not None

    def fechar(self) -> None:
        """Encerra a sessão de autenticação do cliente e descarta a referência."""
        if self._client is None:
            return
        try:
            self._client.auth.sign_out()
        except Exception as e:
            logger.warning(f"Falha ao encerrar sessão do Supabase: {e}")
        self._client = None
        logger.info("Cliente Supabase encerrado.")


def get_banco() -> BancoDados:
    return current_app.extensions[EXTENSAO]


def get_db() -> Client:
    """Cliente Supabase da aplicação corrente (usado pelas rotas)."""
    return get_banco().client


def executar(consulta, descricao: str):
    """
    Executa uma consulta do postgrest e converte falhas do backend em ErroGravacao,
    preservando a mensagem original.
    """
    try:
        return consulta.execute()
    except APIError as e:
        mensagem = getattr(e, 'message', None) or str(e)
        logger.error(f"Erro do Supabase ao {descricao}: {mensagem}", exc_info=True)
        raise ErroGravacao(f"Erro ao {descricao}: {mensagem}") from e
    except httpx.HTTPError as e:
        logger.error(f"Falha de conexão com o Supabase ao {descricao}: {e}", exc_info=True)
        raise ErroGravacao(f"Erro ao {descricao}: falha de conexão ({e})") from e
