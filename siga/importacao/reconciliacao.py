"""
Reconciliação e Gravação da Importação

Para cada registro normalizado:
1. Resolve as referências (curso, disciplina, aluno) por nome ou código,
   sem diferenciar maiúsculas, a partir de uma leitura em lote de cada tabela.
2. Separa os registros novos dos já existentes pela chave natural
   (matrícula do aluno; aluno+disciplina+avaliação+tipo+data para notas).
3. Insere os novos em um único lote e atualiza apenas os existentes que mudaram.

Referências não encontradas viram avisos e o registro é ignorado.
Não há rollback: se uma fase falhar, o que já foi gravado permanece.
"""

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterable, List, Tuple

from siga.core.constants import (
    TABELA_ALUNOS,
    TABELA_CURSOS,
    TABELA_DISCIPLINAS,
    TABELA_NOTAS,
)
from siga.core.database import executar
from siga.core.logger import get_logger

logger = get_logger(__name__)

CAMPOS_MUTAVEIS_ALUNO = ('name', 'email', 'sexo', 'renda_media', 'raca', 'course_id')
CAMPOS_OPCIONAIS_ALUNO = ('email', 'sexo', 'renda_media', 'raca')
CAMPOS_MUTAVEIS_NOTA = ('grade', 'max_grade')


@dataclass
class ResumoImportacao:
    inseridos: int = 0
    atualizados: int = 0
    avisos: List[str] = field(default_factory=list)
    total: int = 0
    descartados: int = 0
    cursos_criados: int = 0

    def avisar(self, mensagem: str) -> None:
        logger.warning(mensagem)
        self.avisos.append(mensagem)

    def como_dict(self) -> Dict[str, Any]:
        return {
            'insertedCount': self.inseridos,
            'updatedCount': self.atualizados,
            'warnings': list(self.avisos),
            'total': self.total,
        }


# === FUNÇÕES AUXILIARES ===

def _chave(texto: Any) -> str:
    return str(texto or '').strip().lower()


def mapa_por_nome_e_codigo(linhas: Iterable[Dict[str, Any]]) -> Dict[str, Any]:
    """Índice {nome/código em minúsculas: id}. O nome tem prioridade sobre o código."""
    mapa: Dict[str, Any] = {}
    linhas = list(linhas)
    for linha in linhas:
        if linha.get('name'):
            mapa.setdefault(_chave(linha['name']), linha['id'])
    for linha in linhas:
        if linha.get('code'):
            mapa.setdefault(_chave(linha['code']), linha['id'])
    return mapa


def _mudou(atual: Any, novo: Any) -> bool:
    if atual in (None, '') and novo in (None, ''):
        return False
    if isinstance(novo, (int, float)) and not isinstance(novo, bool):
        try:
            return abs(float(atual) - float(novo)) > 1e-9
        except (TypeError, ValueError):
            return True
    return str(atual if atual is not None else '') != str(novo if novo is not None else '')


def _deduplicar(registros: List[Dict[str, Any]], chave: Callable, resumo: ResumoImportacao,
                aviso: Callable[[Dict[str, Any]], str]) -> List[Dict[str, Any]]:
    """Mantém a última ocorrência de cada chave, preservando a ordem da primeira."""
    unicos: Dict[Any, Dict[str, Any]] = {}
    for registro in registros:
        k = chave(registro)
        if k in unicos:
            resumo.avisar(aviso(registro))
        unicos[k] = registro
    return list(unicos.values())


def _inserir_lote(db, tabela: str, linhas: List[Dict[str, Any]], descricao: str) -> List[Dict[str, Any]]:
    if not linhas:
        return []
    resposta = executar(db.table(tabela).insert(linhas), descricao)
    logger.info(f"{len(linhas)} registro(s) inserido(s) em '{tabela}'")
    return resposta.data or []


def _atualizar(db, tabela: str, atualizacoes: List[Tuple[Any, Dict[str, Any]]], descricao: str) -> int:
    for registro_id, campos in atualizacoes:
        executar(db.table(tabela).update(campos).eq('id', registro_id), descricao)
    if atualizacoes:
        logger.info(f"{len(atualizacoes)} registro(s) atualizado(s) em '{tabela}'")
    return len(atualizacoes)


def carregar_cursos(db) -> Dict[str, Any]:
    resposta = executar(db.table(TABELA_CURSOS).select('id, name, code'), 'carregar cursos')
    return mapa_por_nome_e_codigo(resposta.data or [])


def carregar_disciplinas(db, professor_id: str) -> Dict[str, Any]:
    consulta = db.table(TABELA_DISCIPLINAS).select('id, name, code').eq('professor_id', professor_id)
    resposta = executar(consulta, 'carregar disciplinas')
    return mapa_por_nome_e_codigo(resposta.data or [])


def criar_cursos_ausentes(db, registros: List[Dict[str, Any]], cursos: Dict[str, Any]) -> int:
    """Cria, em um único lote, os cursos citados na planilha que ainda não existem."""
    ausentes: Dict[str, str] = {}
    for registro in registros:
        nome = registro.get('course')
        if nome and _chave(nome) not in cursos:
            ausentes.setdefault(_chave(nome), nome)

    criados = _inserir_lote(db, TABELA_CURSOS, [{'name': nome} for nome in ausentes.values()], 'criar cursos')
    for curso in criados:
        cursos.setdefault(_chave(curso.get('name')), curso.get('id'))
    return len(ausentes)


# === ALUNOS ===

def reconciliar_alunos(db, registros: List[Dict[str, Any]], criar_cursos: bool = False,
                       descartados: int = 0) -> ResumoImportacao:
    resumo = ResumoImportacao(total=len(registros) + descartados, descartados=descartados)

    unicos = _deduplicar(
        registros,
        lambda r: r['student_id'],
        resumo,
        lambda r: f"Matrícula {r['student_id']} repetida na planilha; usando a última ocorrência.",
    )

    cursos = carregar_cursos(db)
    if criar_cursos:
        resumo.cursos_criados = criar_cursos_ausentes(db, unicos, cursos)

    matriculas = [r['student_id'] for r in unicos]
    consulta = db.table(TABELA_ALUNOS).select('id, student_id, ' + ', '.join(CAMPOS_MUTAVEIS_ALUNO))
    resposta = executar(consulta.in_('student_id', matriculas), 'carregar alunos')
    existentes = {a['student_id']: a for a in (resposta.data or [])}

    novos: List[Dict[str, Any]] = []
    atualizacoes: List[Tuple[Any, Dict[str, Any]]] = []

    for registro in unicos:
        matricula = registro['student_id']
        if not registro.get('course'):
            resumo.avisar(f"Aluno {matricula} ignorado: curso não informado.")
            continue

        course_id = cursos.get(_chave(registro['course']))
        if course_id is None:
            resumo.avisar(f"Aluno {matricula} ignorado: curso '{registro['course']}' não encontrado.")
            continue

        dados = {
            'name': registro['name'],
            'student_id': matricula,
            'email': registro.get('email'),
            'sexo': registro.get('sexo'),
            'renda_media': registro.get('renda_media'),
            'raca': registro.get('raca'),
            'course_id': course_id,
        }

        atual = existentes.get(matricula)
        if atual is None:
            novos.append(dados)
            continue

        # Campos opcionais ausentes na planilha não apagam o que já existe
        mudancas = {
            campo: dados[campo]
            for campo in CAMPOS_MUTAVEIS_ALUNO
            if not (campo in CAMPOS_OPCIONAIS_ALUNO and dados[campo] is None)
            and _mudou(atual.get(campo), dados[campo])
        }
        if mudancas:
            atualizacoes.append((atual['id'], mudancas))

    _inserir_lote(db, TABELA_ALUNOS, novos, 'inserir alunos')
    resumo.inseridos = len(novos)
    resumo.atualizados = _atualizar(db, TABELA_ALUNOS, atualizacoes, 'atualizar aluno')

    return resumo


# === NOTAS ===

def chave_nota(nota: Dict[str, Any]) -> Tuple[str, str, str, str, str]:
    return (
        str(nota.get('student_id')),
        str(nota.get('subject_id')),
        str(nota.get('assessment_name') or ''),
        str(nota.get('assessment_type') or ''),
        str(nota.get('date_assigned') or '')[:10],
    )


def reconciliar_notas(db, registros: List[Dict[str, Any]], professor_id: str,
                      descartados: int = 0) -> ResumoImportacao:
    resumo = ResumoImportacao(total=len(registros) + descartados, descartados=descartados)

    disciplinas = carregar_disciplinas(db, professor_id)

    matriculas = sorted({r['student_id'] for r in registros})
    consulta = db.table(TABELA_ALUNOS).select('id, student_id').in_('student_id', matriculas)
    alunos = {a['student_id']: a['id'] for a in (executar(consulta, 'carregar alunos').data or [])}

    resolvidos: List[Dict[str, Any]] = []
    for registro in registros:
        matricula = registro['student_id']
        aluno_id = alunos.get(matricula)
        if aluno_id is None:
            resumo.avisar(f"Nota ignorada: matrícula {matricula} não encontrada.")
            continue

        disciplina_id = disciplinas.get(_chave(registro['subject']))
        if disciplina_id is None:
            resumo.avisar(
                f"Nota da matrícula {matricula} ignorada: disciplina '{registro['subject']}' não encontrada."
            )
            continue

        resolvidos.append({
            'student_id': aluno_id,
            'subject_id': disciplina_id,
            'assessment_type': registro['assessment_type'],
            'assessment_name': registro['assessment_name'],
            'grade': registro['grade'],
            'max_grade': registro['max_grade'],
            'date_assigned': registro['date_assigned'],
        })

    resolvidos = _deduplicar(
        resolvidos,
        chave_nota,
        resumo,
        lambda n: f"Avaliação '{n['assessment_name']}' repetida para o mesmo aluno; usando a última ocorrência.",
    )

    existentes: Dict[Tuple, Dict[str, Any]] = {}
    if resolvidos:
        consulta = (
            db.table(TABELA_NOTAS)
            .select('id, student_id, subject_id, assessment_type, assessment_name, grade, max_grade, date_assigned')
            .in_('student_id', sorted({n['student_id'] for n in resolvidos}))
            .in_('subject_id', sorted({n['subject_id'] for n in resolvidos}))
        )
        existentes = {chave_nota(n): n for n in (executar(consulta, 'carregar notas').data or [])}

    novas: List[Dict[str, Any]] = []
    atualizacoes: List[Tuple[Any, Dict[str, Any]]] = []
    for nota in resolvidos:
        atual = existentes.get(chave_nota(nota))
        if atual is None:
            novas.append(nota)
            continue
        mudancas = {c: nota[c] for c in CAMPOS_MUTAVEIS_NOTA if _mudou(atual.get(c), nota[c])}
        if mudancas:
            atualizacoes.append((atual['id'], mudancas))

    _inserir_lote(db, TABELA_NOTAS, novas, 'inserir notas')
    resumo.inseridos = len(novas)
    resumo.atualizados = _atualizar(db, TABELA_NOTAS, atualizacoes, 'atualizar nota')

    return resumo
