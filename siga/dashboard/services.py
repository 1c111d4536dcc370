"""
Camada de Serviço (Service Layer) do Dashboard

A busca no Supabase fica em carregar_dashboard; o cálculo das estatísticas é
uma função pura sobre as notas já carregadas.
"""

from collections import defaultdict
from typing import Any, Dict, List, Optional

from siga.core.constants import FAIXAS_NOTAS, TABELA_ALUNOS, TABELA_NOTAS
from siga.core.database import executar
from siga.core.logger import get_logger
from siga.disciplinas.services import listar_disciplinas

logger = get_logger(__name__)

SEM_TIPO = 'Sem tipo'


def _media(valores: List[float]) -> float:
    return round(sum(valores) / len(valores), 2) if valores else 0.0


def _faixa(nota: float) -> Optional[str]:
    for rotulo, minimo, maximo in FAIXAS_NOTAS:
        if minimo <= nota < maximo:
            return rotulo
    # Nota máxima entra na última faixa
    ultimo_rotulo, _, ultimo_maximo = FAIXAS_NOTAS[-1]
    if nota == ultimo_maximo:
        return ultimo_rotulo
    return None


def calcular_estatisticas(notas: List[Dict[str, Any]], disciplinas: List[Dict[str, Any]]) -> Dict[str, Any]:
    """
    Média geral, distribuição por faixas, média por disciplina (com número de
    alunos distintos) e média por tipo de avaliação.
    """
    valores = [float(n['grade']) for n in notas if n.get('grade') is not None]

    distribuicao = {rotulo: 0 for rotulo, _, _ in FAIXAS_NOTAS}
    for valor in valores:
        rotulo = _faixa(valor)
        if rotulo:
            distribuicao[rotulo] += 1

    por_disciplina = defaultdict(list)
    alunos_por_disciplina = defaultdict(set)
    por_tipo = defaultdict(list)
    for nota in notas:
        if nota.get('grade') is None:
            continue
        valor = float(nota['grade'])
        por_disciplina[nota.get('subject_id')].append(valor)
        alunos_por_disciplina[nota.get('subject_id')].add(nota.get('student_id'))
        por_tipo[(nota.get('assessment_type') or '').strip() or SEM_TIPO].append(valor)

    medias_disciplinas = []
    for disciplina in disciplinas:
        notas_disciplina = por_disciplina.get(disciplina['id'])
        if not notas_disciplina:
            continue
        medias_disciplinas.append({
            'id': disciplina['id'],
            'nome': disciplina.get('name'),
            'codigo': disciplina.get('code'),
            'media': _media(notas_disciplina),
            'alunos': len(alunos_por_disciplina[disciplina['id']]),
        })

    return {
        'total_notas': len(valores),
        'media_geral': _media(valores),
        'distribuicao': [{'faixa': rotulo, 'quantidade': distribuicao[rotulo]} for rotulo, _, _ in FAIXAS_NOTAS],
        'por_disciplina': medias_disciplinas,
        'por_tipo': [{'tipo': tipo, 'media': _media(v)} for tipo, v in sorted(por_tipo.items())],
    }


def carregar_dashboard(db, professor_id: str, disciplina_id: Optional[str] = None) -> Dict[str, Any]:
    todas = listar_disciplinas(db, professor_id)
    if disciplina_id:
        disciplinas = [d for d in todas if d['id'] == disciplina_id]
    else:
        disciplinas = todas

    ids = [d['id'] for d in disciplinas]
    notas = []
    total_alunos = 0
    if ids:
        notas = executar(
            db.table(TABELA_NOTAS).select('*').in_('subject_id', ids),
            'carregar notas'
        ).data or []

        cursos = sorted({d['course_id'] for d in disciplinas if d.get('course_id')})
        if cursos:
            resposta = executar(
                db.table(TABELA_ALUNOS).select('id', count='exact').in_('course_id', cursos),
                'contar alunos'
            )
            total_alunos = resposta.count if resposta.count is not None else len(resposta.data or [])

    estatisticas = calcular_estatisticas(notas, disciplinas)
    logger.info(f"Dashboard calculado: {estatisticas['total_notas']} nota(s) em {len(disciplinas)} disciplina(s)")
    return {
        'disciplinas': todas,
        'disciplina_id': disciplina_id,
        'total_alunos': total_alunos,
        'total_disciplinas': len(disciplinas),
        **estatisticas,
    }
