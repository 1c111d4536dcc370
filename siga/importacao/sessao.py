"""
Sessão de Importação (Máquina de Estados)

IDLE -> ARQUIVO_CARREGADO -> TIPO_DETECTADO -> (TIPO_FORCADO) -> PRONTO
     -> GRAVANDO -> CONCLUIDO | FALHOU

FALHOU volta para PRONTO (nova tentativa) ou IDLE (cancelamento).
Nada é persistido entre sessões: cada upload começa do zero.
"""

import threading
import time
import uuid
from enum import Enum
from typing import Any, Dict, List, Optional

from siga.core.constants import TIPO_ALUNOS, TIPO_NOTAS, VALIDADE_SESSAO_IMPORTACAO
from siga.core.errors import (
    ErroGravacao,
    ErroLeituraArquivo,
    ErroTransicao,
    NenhumRegistroValido,
    TipoNaoReconhecido,
)
from siga.core.logger import get_logger
from . import detector, normalizador, parser, reconciliacao

logger = get_logger(__name__)


class Estado(Enum):
    IDLE = 'idle'
    ARQUIVO_CARREGADO = 'arquivo_carregado'
    TIPO_DETECTADO = 'tipo_detectado'
    TIPO_FORCADO = 'tipo_forcado'
    PRONTO = 'pronto'
    GRAVANDO = 'gravando'
    CONCLUIDO = 'concluido'
    FALHOU = 'falhou'


class SessaoImportacao:

    def __init__(self, professor_id: str):
        self.id = uuid.uuid4().hex
        self.professor_id = professor_id
        self.ultimo_acesso = time.monotonic()
        self._limpar()

    def _limpar(self) -> None:
        self.estado = Estado.IDLE
        self.nome_arquivo: Optional[str] = None
        self.linhas: List[Dict[str, Any]] = []
        self.deteccao: Optional[detector.Deteccao] = None
        self.tipo: Optional[str] = None
        self.detalhes = ''
        self.resumo: Optional[reconciliacao.ResumoImportacao] = None
        self.erro: Optional[str] = None

    def _exigir(self, *estados: Estado) -> None:
        if self.estado not in estados:
            raise ErroTransicao(f"Operação inválida no estado '{self.estado.value}'. Envie a planilha novamente.")

    @property
    def colunas(self) -> List[str]:
        return self.deteccao.colunas if self.deteccao else []

    def carregar(self, conteudo: bytes, nome_arquivo: str) -> detector.Deteccao:
        """Lê a planilha e detecta o tipo. Qualquer upload reinicia a sessão."""
        self._limpar()
        try:
            self.linhas = parser.ler_planilha(conteudo, nome_arquivo)
        except ErroLeituraArquivo:
            self._limpar()
            raise
        self.nome_arquivo = nome_arquivo
        self.estado = Estado.ARQUIVO_CARREGADO

        self.deteccao = detector.detectar_tipo(self.linhas)
        self.detalhes = self.deteccao.detalhes
        self.tipo = self.deteccao.tipo if self.deteccao.reconhecido else None
        self.estado = Estado.TIPO_DETECTADO
        logger.info(f"Planilha '{nome_arquivo}': {len(self.linhas)} linhas, tipo {self.deteccao.tipo}")
        return self.deteccao

    def forcar_tipo(self, tipo: str) -> None:
        self._exigir(Estado.TIPO_DETECTADO, Estado.TIPO_FORCADO, Estado.PRONTO, Estado.FALHOU)
        if tipo not in (TIPO_ALUNOS, TIPO_NOTAS):
            raise ErroTransicao(f"Tipo de dados inválido: {tipo}")
        self.tipo = tipo
        self.detalhes = detector.descrever_tipo_forcado(tipo, self.colunas)
        self.estado = Estado.TIPO_FORCADO

    def preparar(self) -> None:
        self._exigir(Estado.TIPO_DETECTADO, Estado.TIPO_FORCADO, Estado.PRONTO, Estado.FALHOU)
        if self.tipo is None:
            raise TipoNaoReconhecido(
                "Formato não reconhecido automaticamente. Verifique as colunas ou force o tipo de dados.",
                colunas=self.colunas,
            )
        self.estado = Estado.PRONTO

    def gravar(self, db, criar_cursos: bool = False) -> reconciliacao.ResumoImportacao:
        """
        Normaliza e grava os registros. Em caso de planilha sem registros válidos
        a sessão continua PRONTO; em falha do backend vai para FALHOU.
        """
        self.preparar()
        self.erro = None

        try:
            normalizacao = normalizador.normalizar(self.linhas, self.tipo)
        except NenhumRegistroValido as e:
            self.erro = e.mensagem
            raise

        self.estado = Estado.GRAVANDO
        try:
            if self.tipo == TIPO_ALUNOS:
                resumo = reconciliacao.reconciliar_alunos(
                    db, normalizacao.registros,
                    criar_cursos=criar_cursos,
                    descartados=normalizacao.descartados,
                )
            else:
                resumo = reconciliacao.reconciliar_notas(
                    db, normalizacao.registros, self.professor_id,
                    descartados=normalizacao.descartados,
                )
        except ErroGravacao as e:
            self.estado = Estado.FALHOU
            self.erro = e.mensagem
            raise

        self.resumo = resumo
        self.estado = Estado.CONCLUIDO
        logger.info(
            f"Importação '{self.nome_arquivo}' concluída: {resumo.inseridos} inseridos, "
            f"{resumo.atualizados} atualizados, {len(resumo.avisos)} avisos"
        )
        return resumo

    def cancelar(self) -> None:
        self._limpar()


class RepositorioSessoes:
    """
    Guarda as sessões de importação em memória, uma por professor logado.

    Uma nova sessão substitui as anteriores do mesmo professor, e sessões
    sem acesso há mais de `validade` segundos são descartadas a cada `nova()`.
    """

    def __init__(self, validade: float = VALIDADE_SESSAO_IMPORTACAO):
        self.validade = validade
        self._sessoes: Dict[str, SessaoImportacao] = {}
        self._lock = threading.Lock()

    def _varrer(self, professor_id: str) -> None:
        limite = time.monotonic() - self.validade
        removidas = [
            sessao_id for sessao_id, sessao in self._sessoes.items()
            if sessao.professor_id == professor_id or sessao.ultimo_acesso < limite
        ]
        for sessao_id in removidas:
            del self._sessoes[sessao_id]
        if removidas:
            logger.info(f"{len(removidas)} sessão(ões) de importação descartada(s)")

    def nova(self, professor_id: str) -> SessaoImportacao:
        sessao = SessaoImportacao(professor_id)
        with self._lock:
            self._varrer(professor_id)
            self._sessoes[sessao.id] = sessao
        return sessao

    def obter(self, sessao_id: Optional[str], professor_id: str) -> Optional[SessaoImportacao]:
        if not sessao_id:
            return None
        with self._lock:
            sessao = self._sessoes.get(sessao_id)
        if sessao is None or sessao.professor_id != professor_id:
            return None
        sessao.ultimo_acesso = time.monotonic()
        return sessao

    def descartar(self, sessao_id: Optional[str]) -> None:
        if not sessao_id:
            return
        with self._lock:
            self._sessoes.pop(sessao_id, None)

    def __len__(self) -> int:
        return len(self._sessoes)
