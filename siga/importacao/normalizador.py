"""
Normalização das Linhas da Planilha

Converte as linhas cruas (cabeçalhos em português/inglês, números com vírgula)
no formato canônico de cada tipo de registro e descarta as linhas sem os
campos obrigatórios.
"""

import math
import re
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any, Dict, List, Optional

from siga.core.constants import (
    CAMPOS_ALUNO,
    CAMPOS_NOTA,
    NOME_AVALIACAO_PADRAO,
    NOTA_MAXIMA_PADRAO,
    OBRIGATORIOS,
    TIPO_ALUNOS,
    TIPO_AVALIACAO_PADRAO,
    TIPO_NOTAS,
)
from siga.core.errors import ErroSiga, NenhumRegistroValido
from siga.core.logger import get_logger

logger = get_logger(__name__)

_DATA_BR = re.compile(r'^(\d{1,2})/(\d{1,2})/(\d{4})$')
_DATA_ISO = re.compile(r'^(\d{4})-(\d{2})-(\d{2})')


@dataclass
class Normalizacao:
    tipo: str
    registros: List[Dict[str, Any]] = field(default_factory=list)
    descartados: int = 0

    @property
    def total(self) -> int:
        return len(self.registros) + self.descartados


def _texto(valor: Any) -> str:
    if valor is None:
        return ''
    if isinstance(valor, float) and math.isnan(valor):
        return ''
    return str(valor).strip()


def obter_campo(linha: Dict[str, Any], sinonimos: List[str]) -> str:
    """
    Devolve o primeiro valor não vazio entre os sinônimos (ordem de prioridade).
    A comparação dos cabeçalhos ignora maiúsculas e espaços nas bordas.
    """
    indice = {}
    for chave, valor in linha.items():
        indice.setdefault(str(chave).strip().lower(), valor)

    for sinonimo in sinonimos:
        valor = _texto(indice.get(sinonimo))
        if valor:
            return valor
    return ''


def converter_decimal(valor: Any, padrao: Optional[float] = 0.0) -> Optional[float]:
    """
    Converte texto numérico aceitando vírgula ou ponto como separador decimal.
    "7,5" -> 7.5 | "7.5" -> 7.5 | "1.234,5" -> 1234.5
    """
    texto = _texto(valor).replace(' ', '')
    if not texto:
        return padrao

    if ',' in texto and '.' in texto:
        if texto.rfind(',') > texto.rfind('.'):
            texto = texto.replace('.', '').replace(',', '.')
        else:
            texto = texto.replace(',', '')
    elif ',' in texto:
        texto = texto.replace(',', '.')

    try:
        numero = float(texto)
    except ValueError:
        return padrao

    if math.isnan(numero) or math.isinf(numero):
        return padrao
    return numero


def converter_data(valor: Any, padrao: date) -> str:
    """Aceita AAAA-MM-DD (inclusive com horário) e DD/MM/AAAA; devolve ISO."""
    texto = _texto(valor)
    if texto:
        iso = _DATA_ISO.match(texto)
        br = _DATA_BR.match(texto)
        try:
            if iso:
                return date(int(iso.group(1)), int(iso.group(2)), int(iso.group(3))).isoformat()
            if br:
                return date(int(br.group(3)), int(br.group(2)), int(br.group(1))).isoformat()
        except ValueError:
            logger.warning(f"Data inválida na planilha: {texto!r}. Usando data da importação.")
    return padrao.isoformat()


def _normalizar_aluno(linha: Dict[str, Any]) -> Optional[Dict[str, Any]]:
    registro = {
        'name': obter_campo(linha, CAMPOS_ALUNO['name']),
        'student_id': obter_campo(linha, CAMPOS_ALUNO['student_id']),
        'email': obter_campo(linha, CAMPOS_ALUNO['email']) or None,
        'course': obter_campo(linha, CAMPOS_ALUNO['course']),
        'sexo': obter_campo(linha, CAMPOS_ALUNO['sexo']) or None,
        'renda_media': converter_decimal(obter_campo(linha, CAMPOS_ALUNO['renda_media']), None),
        'raca': obter_campo(linha, CAMPOS_ALUNO['raca']) or None,
    }
    if not registro['name'] or not registro['student_id']:
        return None
    return registro


def _normalizar_nota(linha: Dict[str, Any], hoje: date) -> Optional[Dict[str, Any]]:
    nota_bruta = obter_campo(linha, CAMPOS_NOTA['grade'])
    registro = {
        'student_id': obter_campo(linha, CAMPOS_NOTA['student_id']),
        'subject': obter_campo(linha, CAMPOS_NOTA['subject']),
        'grade': converter_decimal(nota_bruta, 0.0),
        'max_grade': converter_decimal(obter_campo(linha, CAMPOS_NOTA['max_grade']), NOTA_MAXIMA_PADRAO),
        'assessment_type': obter_campo(linha, CAMPOS_NOTA['assessment_type']) or TIPO_AVALIACAO_PADRAO,
        'assessment_name': obter_campo(linha, CAMPOS_NOTA['assessment_name']) or NOME_AVALIACAO_PADRAO,
        'date_assigned': converter_data(obter_campo(linha, CAMPOS_NOTA['date_assigned']), hoje),
    }
    if not registro['student_id'] or not registro['subject'] or not nota_bruta:
        return None
    return registro


def normalizar(linhas: List[Dict[str, Any]], tipo: str, hoje: Optional[date] = None) -> Normalizacao:
    """
    Mapeia as linhas para o formato canônico do tipo informado.

    Raises:
        NenhumRegistroValido: nenhuma linha possui os campos obrigatórios.
    """
    if tipo not in (TIPO_ALUNOS, TIPO_NOTAS):
        raise ErroSiga(f"Tipo de dados inválido: {tipo}")

    hoje = hoje or datetime.now().date()
    resultado = Normalizacao(tipo=tipo)

    for linha in linhas:
        if tipo == TIPO_ALUNOS:
            registro = _normalizar_aluno(linha)
        else:
            registro = _normalizar_nota(linha, hoje)

        if registro is None:
            resultado.descartados += 1
        else:
            resultado.registros.append(registro)

    if not resultado.registros:
        colunas = ' e '.join(OBRIGATORIOS[tipo])
        rotulo = 'aluno' if tipo == TIPO_ALUNOS else 'nota'
        raise NenhumRegistroValido(
            f"Nenhum registro de {rotulo} válido encontrado. "
            f"Verifique se as colunas {colunas} estão preenchidas.",
            descartados=resultado.descartados,
        )

    if resultado.descartados:
        logger.warning(f"{resultado.descartados} linha(s) descartada(s) por falta de campos obrigatórios")

    return resultado
