"""
Rotas do Módulo de Disciplinas
"""

from flask import abort, flash, redirect, render_template, url_for

from . import disciplinas_bp
from . import services as disciplinas_services
from .forms import DisciplinaForm
from siga.auth.services import exigir_login, professor_atual
from siga.core.database import get_db
from siga.core.errors import ErroSiga
from siga.cursos.services import listar_opcoes_cursos


@disciplinas_bp.before_request
def restringir_acesso():
    return exigir_login()


def _preparar_form(form: DisciplinaForm) -> DisciplinaForm:
    form.course_id.choices = [('', 'Sem curso')] + listar_opcoes_cursos(get_db())
    return form


@disciplinas_bp.route('/')
def lista():
    try:
        disciplinas = disciplinas_services.listar_disciplinas(get_db(), professor_atual())
    except ErroSiga as e:
        flash(e.mensagem, 'error')
        disciplinas = []
    return render_template('disciplinas/lista.html', disciplinas=disciplinas)


@disciplinas_bp.route('/nova', methods=['GET', 'POST'])
def nova():
    form = _preparar_form(DisciplinaForm())
    if form.validate_on_submit():
        try:
            disciplinas_services.criar_disciplina(get_db(), form.data, professor_atual())
            flash("Disciplina criada com sucesso", 'success')
            return redirect(url_for('disciplinas_bp.lista'))
        except ErroSiga as e:
            flash(e.mensagem, 'error')
    return render_template('disciplinas/form.html', form=form, disciplina=None)


@disciplinas_bp.route('/<disciplina_id>/editar', methods=['GET', 'POST'])
def editar(disciplina_id):
    db = get_db()
    disciplina = disciplinas_services.obter_disciplina(db, disciplina_id, professor_atual())
    if disciplina is None:
        abort(404)

    form = _preparar_form(DisciplinaForm(data=disciplina))
    if form.validate_on_submit():
        try:
            disciplinas_services.atualizar_disciplina(db, disciplina_id, form.data, professor_atual())
            flash("Disciplina atualizada com sucesso", 'success')
            return redirect(url_for('disciplinas_bp.lista'))
        except ErroSiga as e:
            flash(e.mensagem, 'error')
    return render_template('disciplinas/form.html', form=form, disciplina=disciplina)


@disciplinas_bp.route('/<disciplina_id>/excluir', methods=['POST'])
def excluir(disciplina_id):
    try:
        disciplinas_services.excluir_disciplina(get_db(), disciplina_id, professor_atual())
        flash("Disciplina excluída com sucesso", 'success')
    except ErroSiga as e:
        flash(e.mensagem, 'error')
    return redirect(url_for('disciplinas_bp.lista'))


@disciplinas_bp.route('/<disciplina_id>/alunos')
def alunos(disciplina_id):
    db = get_db()
    disciplina = disciplinas_services.obter_disciplina(db, disciplina_id, professor_atual())
    if disciplina is None:
        abort(404)
    try:
        alunos_curso = disciplinas_services.alunos_da_disciplina(db, disciplina)
    except ErroSiga as e:
        flash(e.mensagem, 'error')
        alunos_curso = []
    return render_template('disciplinas/alunos.html', disciplina=disciplina, alunos=alunos_curso)
