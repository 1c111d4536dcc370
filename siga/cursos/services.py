"""
Camada de Serviço (Service Layer) dos Cursos

Cada função recebe o cliente Supabase explicitamente e executa uma única
operação de leitura ou escrita; as páginas recarregam os dados após gravar.
"""

from datetime import date, datetime
from typing import Any, Dict, List, Optional, Tuple

from siga.core.constants import (
    CAMPOS_CURSO,
    MESES_POR_SEMESTRE,
    SEMESTRES_PADRAO,
    TABELA_ALUNOS,
    TABELA_CURSOS,
    TABELA_DISCIPLINAS,
)
from siga.core.database import executar
from siga.core.errors import NenhumRegistroValido
from siga.core.logger import get_logger
from siga.importacao.normalizador import obter_campo
from siga.importacao.reconciliacao import ResumoImportacao

logger = get_logger(__name__)


def _contagem(relacao: Any) -> int:
    # O PostgREST devolve contagens embutidas como [{'count': n}]
    if isinstance(relacao, list) and relacao:
        return relacao[0].get('count', 0) or 0
    return 0


def listar_cursos(db) -> List[Dict[str, Any]]:
    consulta = db.table(TABELA_CURSOS).select('*, students(count), subjects(count)').order('name')
    cursos = executar(consulta, 'carregar cursos').data or []
    for curso in cursos:
        curso['total_alunos'] = _contagem(curso.pop('students', None))
        curso['total_disciplinas'] = _contagem(curso.pop('subjects', None))
    return cursos


def listar_opcoes_cursos(db) -> List[Tuple[str, str]]:
    """Pares (id, rótulo) para os SelectField dos formulários."""
    cursos = executar(db.table(TABELA_CURSOS).select('id, name, code').order('name'), 'carregar cursos').data or []
    return [(c['id'], f"{c['code']} - {c['name']}" if c.get('code') else c['name']) for c in cursos]


def obter_curso(db, curso_id: str) -> Optional[Dict[str, Any]]:
    dados = executar(db.table(TABELA_CURSOS).select('*').eq('id', curso_id), 'carregar curso').data or []
    return dados[0] if dados else None


def salvar_curso(db, dados: Dict[str, Any], curso_id: Optional[str] = None) -> None:
    registro = {
        'name': dados['name'].strip(),
        'code': (dados.get('code') or '').strip() or None,
        'total_semesters': dados.get('total_semesters') or SEMESTRES_PADRAO,
        'start_date': dados['start_date'].isoformat() if dados.get('start_date') else None,
    }
    if curso_id:
        executar(db.table(TABELA_CURSOS).update(registro).eq('id', curso_id), 'atualizar curso')
        logger.info(f"Curso atualizado: {curso_id}")
    else:
        executar(db.table(TABELA_CURSOS).insert(registro), 'criar curso')
        logger.info(f"Curso criado: {registro['name']}")


def excluir_curso(db, curso_id: str) -> None:
    executar(db.table(TABELA_CURSOS).delete().eq('id', curso_id), 'excluir curso')
    logger.info(f"Curso excluído: {curso_id}")


def importar_cursos(db, linhas: List[Dict[str, Any]]) -> ResumoImportacao:
    """
    Importa cursos de uma planilha (colunas Nome/Name e Codigo/Code).
    Cursos cujo nome já existe são ignorados com aviso.
    """
    candidatos = []
    for linha in linhas:
        nome = obter_campo(linha, CAMPOS_CURSO['name'])
        if nome:
            candidatos.append({'name': nome, 'code': obter_campo(linha, CAMPOS_CURSO['code']) or None})

    resumo = ResumoImportacao(total=len(linhas), descartados=len(linhas) - len(candidatos))
    if not candidatos:
        raise NenhumRegistroValido(
            "Nenhum curso válido encontrado. Verifique se a coluna Nome está preenchida.",
            descartados=resumo.descartados,
        )

    existentes = executar(db.table(TABELA_CURSOS).select('name'), 'carregar cursos').data or []
    nomes = {str(c['name']).strip().lower() for c in existentes}

    novos = []
    for curso in candidatos:
        chave = curso['name'].lower()
        if chave in nomes:
            resumo.avisar(f"Curso '{curso['name']}' já existe e foi ignorado.")
            continue
        nomes.add(chave)
        novos.append(curso)

    if novos:
        executar(db.table(TABELA_CURSOS).insert(novos), 'importar cursos')
    resumo.inseridos = len(novos)
    logger.info(f"{len(novos)} curso(s) importado(s)")
    return resumo


# === DETALHES / GRADE CURRICULAR ===

def para_data(valor: Any) -> Optional[date]:
    if not valor:
        return None
    if isinstance(valor, date):
        return valor
    return datetime.fromisoformat(str(valor)[:10]).date()


def calcular_semestre_atual(data_inicio: Any, total_semestres: int, hoje: Optional[date] = None) -> int:
    """
    Semestre corrente do curso: cada semestre dura seis meses a partir da data de
    início, limitado ao total de semestres.
    """
    data_inicio = para_data(data_inicio)
    if data_inicio is None:
        return 1
    hoje = hoje or date.today()

    meses = (hoje.year - data_inicio.year) * 12 + (hoje.month - data_inicio.month)
    semestre = meses // MESES_POR_SEMESTRE + 1
    return max(1, min(semestre, total_semestres))


def agrupar_por_semestre(disciplinas: List[Dict[str, Any]], total_semestres: int) -> List[Tuple[int, List[Dict]]]:
    return [
        (semestre, [d for d in disciplinas if d.get('semester') == semestre])
        for semestre in range(1, total_semestres + 1)
    ]


def carregar_detalhes(db, curso_id: str, professor_id: str) -> Optional[Dict[str, Any]]:
    curso = obter_curso(db, curso_id)
    if curso is None:
        return None

    alunos = executar(
        db.table(TABELA_ALUNOS).select('*').eq('course_id', curso_id).order('name'),
        'carregar alunos do curso'
    ).data or []

    disciplinas = executar(
        db.table(TABELA_DISCIPLINAS).select('*').eq('course_id', curso_id)
        .order('year').order('semester'),
        'carregar disciplinas do curso'
    ).data or []

    todas = executar(
        db.table(TABELA_DISCIPLINAS).select('*').eq('professor_id', professor_id).order('name'),
        'carregar disciplinas do professor'
    ).data or []

    total = curso.get('total_semesters') or SEMESTRES_PADRAO
    return {
        'curso': curso,
        'alunos': alunos,
        'disciplinas': disciplinas,
        'disponiveis': [d for d in todas if d.get('course_id') != curso_id],
        'semestres': agrupar_por_semestre(disciplinas, total),
        'semestre_atual': calcular_semestre_atual(curso.get('start_date'), total),
    }


def vincular_disciplina(db, disciplina_id: str, curso_id: Optional[str], professor_id: str) -> None:
    """Vincula (ou desvincula, com curso_id=None) uma disciplina do professor a um curso."""
    consulta = (
        db.table(TABELA_DISCIPLINAS)
        .update({'course_id': curso_id})
        .eq('id', disciplina_id)
        .eq('professor_id', professor_id)
    )
    executar(consulta, 'vincular disciplina' if curso_id else 'desvincular disciplina')
