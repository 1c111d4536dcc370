"""
Camada de Serviço (Service Layer) dos Alunos e Notas
"""

from typing import Any, Dict, List, Optional

from siga.core.constants import NOTA_MAXIMA_PADRAO, TABELA_ALUNOS, TABELA_NOTAS
from siga.core.database import executar
from siga.core.logger import get_logger

logger = get_logger(__name__)


# === ALUNOS ===

def listar_alunos(db) -> List[Dict[str, Any]]:
    consulta = db.table(TABELA_ALUNOS).select('*, course:courses(id, name, code)').order('name')
    return executar(consulta, 'carregar alunos').data or []


def obter_aluno(db, aluno_id: str) -> Optional[Dict[str, Any]]:
    consulta = db.table(TABELA_ALUNOS).select('*, course:courses(id, name, code)').eq('id', aluno_id)
    dados = executar(consulta, 'carregar aluno').data or []
    return dados[0] if dados else None


def _registro_aluno(dados: Dict[str, Any]) -> Dict[str, Any]:
    def opcional(campo):
        valor = dados.get(campo)
        if isinstance(valor, str):
            valor = valor.strip()
        return valor if valor not in ('', None) else None

    return {
        'name': dados['name'].strip(),
        'student_id': dados['student_id'].strip(),
        'course_id': dados['course_id'],
        'email': opcional('email'),
        'sexo': opcional('sexo'),
        'renda_media': opcional('renda_media'),
        'raca': opcional('raca'),
    }


def salvar_aluno(db, dados: Dict[str, Any], aluno_id: Optional[str] = None) -> None:
    registro = _registro_aluno(dados)
    if aluno_id:
        executar(db.table(TABELA_ALUNOS).update(registro).eq('id', aluno_id), 'atualizar aluno')
        logger.info(f"Aluno atualizado: {registro['student_id']}")
    else:
        executar(db.table(TABELA_ALUNOS).insert([registro]), 'cadastrar aluno')
        logger.info(f"Aluno cadastrado: {registro['student_id']}")


def excluir_aluno(db, aluno_id: str) -> None:
    executar(db.table(TABELA_ALUNOS).delete().eq('id', aluno_id), 'excluir aluno')
    logger.info(f"Aluno excluído: {aluno_id}")


# === NOTAS ===

def listar_notas(db, aluno_id: str) -> List[Dict[str, Any]]:
    consulta = (
        db.table(TABELA_NOTAS)
        .select('*, subject:subjects(id, name, code)')
        .eq('student_id', aluno_id)
        .order('date_assigned', desc=True)
    )
    return executar(consulta, 'carregar notas').data or []


def obter_nota(db, nota_id: str, aluno_id: str) -> Optional[Dict[str, Any]]:
    consulta = db.table(TABELA_NOTAS).select('*').eq('id', nota_id).eq('student_id', aluno_id)
    dados = executar(consulta, 'carregar nota').data or []
    return dados[0] if dados else None


def salvar_nota(db, dados: Dict[str, Any], aluno_id: str, nota_id: Optional[str] = None) -> None:
    registro = {
        'subject_id': dados['subject_id'],
        'assessment_type': dados['assessment_type'].strip(),
        'assessment_name': dados['assessment_name'].strip(),
        'grade': float(dados['grade']),
        'max_grade': float(dados.get('max_grade') or NOTA_MAXIMA_PADRAO),
        'date_assigned': dados['date_assigned'].isoformat() if dados.get('date_assigned') else None,
    }
    if nota_id:
        consulta = db.table(TABELA_NOTAS).update(registro).eq('id', nota_id).eq('student_id', aluno_id)
        executar(consulta, 'atualizar nota')
        logger.info(f"Nota atualizada: {nota_id}")
    else:
        executar(db.table(TABELA_NOTAS).insert([dict(registro, student_id=aluno_id)]), 'lançar nota')
        logger.info(f"Nota lançada para o aluno {aluno_id}")


def excluir_nota(db, nota_id: str, aluno_id: str) -> None:
    executar(db.table(TABELA_NOTAS).delete().eq('id', nota_id).eq('student_id', aluno_id), 'excluir nota')
    logger.info(f"Nota excluída: {nota_id}")
