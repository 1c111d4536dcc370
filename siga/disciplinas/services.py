"""
Camada de Serviço (Service Layer) das Disciplinas

Todas as disciplinas pertencem ao professor logado (professor_id = id do
usuário no Supabase Auth); escritas são sempre filtradas por ele.
"""

from typing import Any, Dict, List, Optional

from siga.core.constants import TABELA_ALUNOS, TABELA_DISCIPLINAS, TABELA_PROFESSORES
from siga.core.database import executar
from siga.core.logger import get_logger

logger = get_logger(__name__)


def listar_disciplinas(db, professor_id: str) -> List[Dict[str, Any]]:
    consulta = (
        db.table(TABELA_DISCIPLINAS)
        .select('*, course:courses(id, name, code)')
        .eq('professor_id', professor_id)
        .order('year', desc=True)
        .order('semester', desc=True)
    )
    return executar(consulta, 'carregar disciplinas').data or []


def obter_disciplina(db, disciplina_id: str, professor_id: str) -> Optional[Dict[str, Any]]:
    consulta = (
        db.table(TABELA_DISCIPLINAS)
        .select('*, course:courses(id, name, code)')
        .eq('id', disciplina_id)
        .eq('professor_id', professor_id)
    )
    dados = executar(consulta, 'carregar disciplina').data or []
    return dados[0] if dados else None


def listar_professores(db) -> List[Dict[str, Any]]:
    return executar(db.table(TABELA_PROFESSORES).select('id, name, email').order('name'),
                    'carregar professores').data or []


def _registro(dados: Dict[str, Any], professor_id: str) -> Dict[str, Any]:
    registro = {
        'name': dados['name'].strip(),
        'code': dados['code'].strip(),
        'year': int(dados['year']),
        'semester': int(dados['semester']),
        'professor_id': professor_id,
    }
    if 'course_id' in dados:
        registro['course_id'] = dados.get('course_id') or None
    if dados.get('professor_db_id'):
        registro['professor_db_id'] = dados['professor_db_id']
    return registro


def criar_disciplina(db, dados: Dict[str, Any], professor_id: str) -> None:
    registro = _registro(dados, professor_id)
    executar(db.table(TABELA_DISCIPLINAS).insert(registro), 'criar disciplina')
    logger.info(f"Disciplina criada: {registro['code']} - {registro['name']}")


def atualizar_disciplina(db, disciplina_id: str, dados: Dict[str, Any], professor_id: str) -> None:
    consulta = (
        db.table(TABELA_DISCIPLINAS)
        .update(_registro(dados, professor_id))
        .eq('id', disciplina_id)
        .eq('professor_id', professor_id)
    )
    executar(consulta, 'atualizar disciplina')
    logger.info(f"Disciplina atualizada: {disciplina_id}")


def excluir_disciplina(db, disciplina_id: str, professor_id: str) -> None:
    consulta = db.table(TABELA_DISCIPLINAS).delete().eq('id', disciplina_id).eq('professor_id', professor_id)
    executar(consulta, 'excluir disciplina')
    logger.info(f"Disciplina excluída: {disciplina_id}")


def alunos_da_disciplina(db, disciplina: Dict[str, Any]) -> List[Dict[str, Any]]:
    """Alunos do curso ao qual a disciplina está vinculada."""
    if not disciplina.get('course_id'):
        return []
    consulta = db.table(TABELA_ALUNOS).select('*').eq('course_id', disciplina['course_id']).order('name')
    return executar(consulta, 'carregar alunos').data or []
