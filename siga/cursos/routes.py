"""
Rotas do Módulo de Cursos

Listagem com contagens, cadastro, detalhes (grade por semestre) e importação
de cursos por planilha.
"""

from flask import abort, flash, redirect, render_template, url_for

from . import cursos_bp
from . import services as cursos_services
from .forms import CursoForm, ImportarCursosForm, NovaDisciplinaCursoForm, VincularDisciplinaForm
from siga.auth.services import exigir_login, professor_atual
from siga.core.database import get_db
from siga.core.errors import ErroSiga
from siga.core.logger import get_logger
from siga.disciplinas.services import criar_disciplina, listar_professores
from siga.importacao.parser import ler_planilha

logger = get_logger(__name__)


@cursos_bp.before_request
def restringir_acesso():
    return exigir_login()


@cursos_bp.route('/')
def lista():
    try:
        cursos = cursos_services.listar_cursos(get_db())
    except ErroSiga as e:
        flash("Não foi possível carregar a lista de cursos", 'error')
        logger.error(f"Erro ao carregar cursos: {e.mensagem}")
        cursos = []
    return render_template('cursos/lista.html', cursos=cursos, form_importar=ImportarCursosForm())


@cursos_bp.route('/novo', methods=['GET', 'POST'])
def novo():
    form = CursoForm()
    if form.validate_on_submit():
        try:
            cursos_services.salvar_curso(get_db(), form.data)
            flash("Novo curso foi criado com sucesso", 'success')
            return redirect(url_for('cursos_bp.lista'))
        except ErroSiga as e:
            flash(e.mensagem, 'error')
    return render_template('cursos/form.html', form=form, curso=None)


@cursos_bp.route('/<curso_id>/editar', methods=['GET', 'POST'])
def editar(curso_id):
    db = get_db()
    curso = cursos_services.obter_curso(db, curso_id)
    if curso is None:
        abort(404)

    form = CursoForm(data=dict(curso, start_date=cursos_services.para_data(curso.get('start_date'))))

    if form.validate_on_submit():
        try:
            cursos_services.salvar_curso(db, form.data, curso_id)
            flash("Curso foi atualizado com sucesso", 'success')
            return redirect(url_for('cursos_bp.lista'))
        except ErroSiga as e:
            flash(e.mensagem, 'error')
    return render_template('cursos/form.html', form=form, curso=curso)


@cursos_bp.route('/<curso_id>/excluir', methods=['POST'])
def excluir(curso_id):
    try:
        cursos_services.excluir_curso(get_db(), curso_id)
        flash("Curso foi excluído com sucesso", 'success')
    except ErroSiga as e:
        flash(f"Não foi possível excluir o curso: {e.mensagem}", 'error')
    return redirect(url_for('cursos_bp.lista'))


@cursos_bp.route('/importar', methods=['POST'])
def importar():
    form = ImportarCursosForm()
    if not form.validate_on_submit():
        for erros in form.errors.values():
            for erro in erros:
                flash(erro, 'error')
        return redirect(url_for('cursos_bp.lista'))

    arquivo = form.arquivo.data
    try:
        linhas = ler_planilha(arquivo.read(), arquivo.filename)
        resumo = cursos_services.importar_cursos(get_db(), linhas)
    except ErroSiga as e:
        flash(f"Erro ao importar cursos: {e.mensagem}", 'error')
        return redirect(url_for('cursos_bp.lista'))

    flash(f"{resumo.inseridos} cursos foram adicionados", 'success')
    for aviso in resumo.avisos:
        flash(aviso, 'warning')
    return redirect(url_for('cursos_bp.lista'))


# === DETALHES ===

@cursos_bp.route('/<curso_id>')
def detalhes(curso_id):
    try:
        contexto = cursos_services.carregar_detalhes(get_db(), curso_id, professor_atual())
    except ErroSiga as e:
        flash(e.mensagem, 'error')
        return redirect(url_for('cursos_bp.lista'))
    if contexto is None:
        abort(404)

    form_vincular = VincularDisciplinaForm()
    form_vincular.subject_id.choices = [(d['id'], f"{d['code']} - {d['name']}") for d in contexto['disponiveis']]

    try:
        professores = listar_professores(get_db())
    except ErroSiga as e:
        flash(e.mensagem, 'error')
        professores = []

    form_nova = NovaDisciplinaCursoForm()
    form_nova.professor_db_id.choices = [('', 'Nenhum')] + [(p['id'], p['name']) for p in professores]

    return render_template('cursos/detalhes.html', form_vincular=form_vincular, form_nova=form_nova, **contexto)


@cursos_bp.route('/<curso_id>/vincular', methods=['POST'])
def vincular(curso_id):
    form = VincularDisciplinaForm()
    # As opções válidas dependem do professor; a escrita já é filtrada por ele
    form.subject_id.choices = [(form.subject_id.data, '')] if form.subject_id.data else []
    if form.validate_on_submit():
        try:
            cursos_services.vincular_disciplina(get_db(), form.subject_id.data, curso_id, professor_atual())
            flash("Disciplina vinculada ao curso", 'success')
        except ErroSiga as e:
            flash(f"Não foi possível vincular a disciplina: {e.mensagem}", 'error')
    else:
        flash("Selecione uma disciplina", 'error')
    return redirect(url_for('cursos_bp.detalhes', curso_id=curso_id))


@cursos_bp.route('/<curso_id>/desvincular/<disciplina_id>', methods=['POST'])
def desvincular(curso_id, disciplina_id):
    try:
        cursos_services.vincular_disciplina(get_db(), disciplina_id, None, professor_atual())
        flash("Disciplina desvinculada do curso", 'success')
    except ErroSiga as e:
        flash(f"Não foi possível desvincular a disciplina: {e.mensagem}", 'error')
    return redirect(url_for('cursos_bp.detalhes', curso_id=curso_id))


@cursos_bp.route('/<curso_id>/disciplinas', methods=['POST'])
def nova_disciplina(curso_id):
    form = NovaDisciplinaCursoForm()
    form.professor_db_id.choices = [('', 'Nenhum'), (form.professor_db_id.data, '')]
    if form.validate_on_submit():
        dados = dict(form.data, course_id=curso_id)
        try:
            criar_disciplina(get_db(), dados, professor_atual())
            flash("Disciplina criada e vinculada ao curso", 'success')
        except ErroSiga as e:
            flash(f"Não foi possível criar a disciplina: {e.mensagem}", 'error')
    else:
        flash("Preencha todos os campos obrigatórios", 'error')
    return redirect(url_for('cursos_bp.detalhes', curso_id=curso_id))
