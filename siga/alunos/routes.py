"""
Rotas do Módulo de Alunos

Cadastro de alunos e lançamento de notas por aluno.
"""

from flask import abort, flash, redirect, render_template, url_for

from . import alunos_bp
from . import services as alunos_services
from .forms import AlunoForm, NotaForm
from siga.auth.services import exigir_login, professor_atual
from siga.core.database import get_db
from siga.core.errors import ErroSiga
from siga.cursos.services import listar_opcoes_cursos, para_data
from siga.disciplinas.services import listar_disciplinas


@alunos_bp.before_request
def restringir_acesso():
    return exigir_login()


def _form_aluno(**kwargs) -> AlunoForm:
    form = AlunoForm(**kwargs)
    form.course_id.choices = [('', 'Selecione')] + listar_opcoes_cursos(get_db())
    return form


def _form_nota(**kwargs) -> NotaForm:
    form = NotaForm(**kwargs)
    disciplinas = listar_disciplinas(get_db(), professor_atual())
    form.subject_id.choices = [('', 'Selecione')] + [(d['id'], f"{d['code']} - {d['name']}") for d in disciplinas]
    return form


def _carregar_aluno(aluno_id):
    aluno = alunos_services.obter_aluno(get_db(), aluno_id)
    if aluno is None:
        abort(404)
    return aluno


@alunos_bp.route('/')
def lista():
    try:
        alunos = alunos_services.listar_alunos(get_db())
    except ErroSiga:
        flash("Erro ao carregar dados", 'error')
        alunos = []
    return render_template('alunos/lista.html', alunos=alunos)


@alunos_bp.route('/novo', methods=['GET', 'POST'])
def novo():
    form = _form_aluno()
    if form.validate_on_submit():
        try:
            alunos_services.salvar_aluno(get_db(), form.data)
            flash("Aluno cadastrado com sucesso", 'success')
            return redirect(url_for('alunos_bp.lista'))
        except ErroSiga as e:
            flash(f"Erro ao salvar aluno: {e.mensagem}", 'error')
    return render_template('alunos/form.html', form=form, aluno=None)


@alunos_bp.route('/<aluno_id>/editar', methods=['GET', 'POST'])
def editar(aluno_id):
    aluno = _carregar_aluno(aluno_id)
    form = _form_aluno(data=aluno)
    if form.validate_on_submit():
        try:
            alunos_services.salvar_aluno(get_db(), form.data, aluno_id)
            flash("Aluno atualizado com sucesso", 'success')
            return redirect(url_for('alunos_bp.lista'))
        except ErroSiga as e:
            flash(f"Erro ao salvar aluno: {e.mensagem}", 'error')
    return render_template('alunos/form.html', form=form, aluno=aluno)


@alunos_bp.route('/<aluno_id>/excluir', methods=['POST'])
def excluir(aluno_id):
    try:
        alunos_services.excluir_aluno(get_db(), aluno_id)
        flash("Aluno excluído com sucesso", 'success')
    except ErroSiga as e:
        flash(f"Erro ao excluir aluno: {e.mensagem}", 'error')
    return redirect(url_for('alunos_bp.lista'))


# === NOTAS DO ALUNO ===

@alunos_bp.route('/<aluno_id>/notas', methods=['GET', 'POST'])
def notas(aluno_id):
    aluno = _carregar_aluno(aluno_id)
    form = _form_nota()
    if form.validate_on_submit():
        try:
            alunos_services.salvar_nota(get_db(), form.data, aluno_id)
            flash("Nota lançada com sucesso", 'success')
            return redirect(url_for('alunos_bp.notas', aluno_id=aluno_id))
        except ErroSiga as e:
            flash(f"Erro ao lançar nota: {e.mensagem}", 'error')

    try:
        lista_notas = alunos_services.listar_notas(get_db(), aluno_id)
    except ErroSiga:
        flash("Erro ao carregar notas", 'error')
        lista_notas = []
    return render_template('alunos/notas.html', aluno=aluno, notas=lista_notas, form=form)


@alunos_bp.route('/<aluno_id>/notas/<nota_id>/editar', methods=['GET', 'POST'])
def editar_nota(aluno_id, nota_id):
    aluno = _carregar_aluno(aluno_id)
    nota = alunos_services.obter_nota(get_db(), nota_id, aluno_id)
    if nota is None:
        abort(404)

    form = _form_nota(data=dict(nota, date_assigned=para_data(nota.get('date_assigned'))))
    if form.validate_on_submit():
        try:
            alunos_services.salvar_nota(get_db(), form.data, aluno_id, nota_id)
            flash("Nota atualizada com sucesso", 'success')
            return redirect(url_for('alunos_bp.notas', aluno_id=aluno_id))
        except ErroSiga as e:
            flash(f"Erro ao atualizar nota: {e.mensagem}", 'error')
    return render_template('alunos/nota_form.html', aluno=aluno, nota=nota, form=form)


@alunos_bp.route('/<aluno_id>/notas/<nota_id>/excluir', methods=['POST'])
def excluir_nota(aluno_id, nota_id):
    try:
        alunos_services.excluir_nota(get_db(), nota_id, aluno_id)
        flash("Nota excluída com sucesso", 'success')
    except ErroSiga as e:
        flash(f"Erro ao excluir nota: {e.mensagem}", 'error')
    return redirect(url_for('alunos_bp.notas', aluno_id=aluno_id))
