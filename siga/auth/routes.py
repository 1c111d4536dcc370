"""
Rotas do Módulo de Autenticação

Gerencia as rotas de /login, /logout e redefinição de senha.
"""

from flask import (
    current_app,
    flash,
    redirect,
    render_template,
    request,
    session,
    url_for,
)

from . import auth_bp
from . import services as auth_services
from .forms import EsqueciSenhaForm, LoginForm, RedefinirSenhaForm
from siga.core.database import get_db
from siga.core.extensions import limiter
from siga.core.logger import get_logger

logger = get_logger(__name__)


@auth_bp.route('/login', methods=['GET', 'POST'])
@limiter.limit("10 per minute", methods=['POST'])
def login():
    """ Exibe a página de login e autentica no Supabase. """
    if auth_services.usuario_logado():
        return redirect(url_for('main_bp.index'))

    form = LoginForm()
    if form.validate_on_submit():
        try:
            perfil = auth_services.autenticar(get_db(), form.email.data.strip(), form.senha.data)
        except auth_services.ErroAutenticacao as e:
            flash(e.mensagem, 'error')
            return render_template('login.html', form=form), 401

        session[auth_services.SESSAO_USUARIO] = perfil
        return redirect(url_for('main_bp.index'))

    return render_template('login.html', form=form)


@auth_bp.route('/logout')
def logout():
    session.pop(auth_services.SESSAO_USUARIO, None)
    # Libera a planilha em memória junto com o login
    current_app.extensions['importacao_sessoes'].descartar(session.pop('importacao_id', None))
    return redirect(url_for('auth_bp.login'))


@auth_bp.route('/esqueci-senha', methods=['GET', 'POST'])
@limiter.limit("5 per minute", methods=['POST'])
def esqueci_senha():
    form = EsqueciSenhaForm()
    if form.validate_on_submit():
        url_retorno = url_for('auth_bp.redefinir_senha', _external=True)
        try:
            auth_services.solicitar_redefinicao(get_db(), form.email.data.strip(), url_retorno)
        except auth_services.ErroAutenticacao as e:
            flash(e.mensagem, 'error')
            return render_template('esqueci_senha.html', form=form)

        flash("Se o e-mail estiver cadastrado, você receberá um link para redefinir a senha.", 'success')
        return redirect(url_for('auth_bp.login'))

    return render_template('esqueci_senha.html', form=form)


@auth_bp.route('/redefinir-senha', methods=['GET', 'POST'])
def redefinir_senha():
    form = RedefinirSenhaForm()

    if request.method == 'GET':
        form.token_hash.data = request.args.get('token_hash', '')
        if not form.token_hash.data:
            flash("Link inválido ou expirado. Por favor, solicite um novo link de redefinição de senha.", 'error')
            return redirect(url_for('auth_bp.esqueci_senha'))

    if form.validate_on_submit():
        try:
            auth_services.redefinir_senha(get_db(), form.token_hash.data, form.senha.data)
        except auth_services.ErroAutenticacao as e:
            flash(e.mensagem, 'error')
            return redirect(url_for('auth_bp.esqueci_senha'))

        flash("Senha redefinida com sucesso! Você já pode fazer login com sua nova senha.", 'success')
        return redirect(url_for('auth_bp.login'))

    return render_template('redefinir_senha.html', form=form)
