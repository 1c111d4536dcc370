"""
Detecção do Tipo de Planilha

Classifica a planilha como ALUNOS, NOTAS ou não reconhecida olhando apenas os
cabeçalhos da primeira linha. Os valores das células nunca são inspecionados.
"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional

from siga.core.constants import (
    SINONIMOS_DETECCAO,
    TIPO_ALUNOS,
    TIPO_NAO_RECONHECIDO,
    TIPO_NOTAS,
)


@dataclass
class Deteccao:
    tipo: str
    colunas: List[str] = field(default_factory=list)
    detalhes: str = ''

    @property
    def reconhecido(self) -> bool:
        return self.tipo != TIPO_NAO_RECONHECIDO


def _possui(chaves: set, campo: str) -> bool:
    return bool(chaves & SINONIMOS_DETECCAO[campo])


def detectar_tipo(linhas: List[Dict[str, str]]) -> Deteccao:
    if not linhas:
        return Deteccao(TIPO_NAO_RECONHECIDO, [], 'Nenhuma linha para analisar.')

    colunas = [str(c) for c in linhas[0].keys()]
    chaves = {c.lower().strip() for c in colunas}
    lista = ', '.join(colunas)

    tem_nome = _possui(chaves, 'nome')
    tem_matricula = _possui(chaves, 'matricula')
    tem_nota = _possui(chaves, 'nota')
    tem_disciplina = _possui(chaves, 'disciplina')
    tem_tipo_avaliacao = _possui(chaves, 'tipo_avaliacao')

    # A ordem das regras importa
    if (tem_nome or tem_matricula) and not tem_nota:
        detalhes = f"Detectado como ALUNOS. Colunas encontradas: {lista}."
        if tem_nome and tem_matricula:
            detalhes += " ✓ Nome e matrícula encontrados"
        elif tem_nome:
            detalhes += " ✓ Nome encontrado (sem matrícula as linhas serão descartadas)"
        else:
            detalhes += " ✓ Matrícula encontrada (sem nome as linhas serão descartadas)"
        return Deteccao(TIPO_ALUNOS, colunas, detalhes)

    if tem_nota and tem_matricula and tem_disciplina:
        detalhes = f"Detectado como NOTAS. Colunas encontradas: {lista}."
        detalhes += " ✓ Nota, matrícula e disciplina encontradas"
        if tem_tipo_avaliacao:
            detalhes += " ✓ Tipo de avaliação encontrado"
        return Deteccao(TIPO_NOTAS, colunas, detalhes)

    detalhes = (
        f"Formato não reconhecido automaticamente. Colunas encontradas: {lista}. "
        'Para ALUNOS: precisa de "nome" ou "matricula" (sem coluna de nota). '
        'Para NOTAS: precisa de "nota", "matricula" e "disciplina".'
    )
    return Deteccao(TIPO_NAO_RECONHECIDO, colunas, detalhes)


def descrever_tipo_forcado(tipo: str, colunas: Optional[List[str]]) -> str:
    rotulo = 'ALUNOS' if tipo == TIPO_ALUNOS else 'NOTAS'
    return f"Tipo forçado para {rotulo}. Colunas: {', '.join(colunas or [])}"
