"""
Camada de Serviço (Service Layer) da Autenticação

A autenticação é delegada ao Supabase Auth. Aqui ficam apenas a chamada ao
serviço, a montagem do perfil guardado na sessão Flask e as regras de senha.
"""

import re
from typing import List, Optional

from flask import redirect, session, url_for
from supabase import AuthError

from siga.core.errors import ErroSiga
from siga.core.logger import get_logger

# Inicializa o logger para este módulo
logger = get_logger(__name__)

SESSAO_USUARIO = 'user_profile'
TAMANHO_MINIMO_SENHA = 8


class ErroAutenticacao(ErroSiga):
    """Credenciais inválidas ou link de recuperação expirado."""


# === SESSÃO ===

def usuario_logado() -> Optional[dict]:
    return session.get(SESSAO_USUARIO)


def professor_atual() -> str:
    return session[SESSAO_USUARIO]['id']


def exigir_login():
    """Usado nos before_request dos blueprints protegidos."""
    if SESSAO_USUARIO not in session:
        return redirect(url_for('auth_bp.login'))
    return None


def _montar_perfil(user) -> dict:
    metadados = getattr(user, 'user_metadata', None) or {}
    return {
        'id': user.id,
        'email': user.email,
        'nome': metadados.get('name') or metadados.get('full_name') or user.email,
    }


# === SUPABASE AUTH ===

def autenticar(db, email: str, senha: str) -> dict:
    """
    Valida as credenciais no Supabase Auth e devolve o perfil para a sessão.
    O cliente do servidor não mantém a sessão do usuário depois do login.
    """
    try:
        resposta = db.auth.sign_in_with_password({'email': email, 'password': senha})
    except AuthError as e:
        logger.warning(f"Falha de login para {email}: {e}")
        raise ErroAutenticacao("E-mail ou senha inválidos.") from e

    if not resposta or not resposta.user:
        raise ErroAutenticacao("E-mail ou senha inválidos.")

    perfil = _montar_perfil(resposta.user)
    db.auth.sign_out()
    logger.info(f"Login efetuado: {email}")
    return perfil


def solicitar_redefinicao(db, email: str, url_retorno: str) -> None:
    try:
        db.auth.reset_password_for_email(email, {'redirect_to': url_retorno})
    except AuthError as e:
        logger.error(f"Erro ao solicitar redefinição de senha para {email}: {e}", exc_info=True)
        raise ErroAutenticacao("Não foi possível enviar o e-mail de redefinição.") from e
    logger.info(f"Link de redefinição de senha enviado para {email}")


def redefinir_senha(db, token_hash: str, nova_senha: str) -> None:
    """Troca a senha usando o token do link de recuperação enviado por e-mail."""
    try:
        resposta = db.auth.verify_otp({'token_hash': token_hash, 'type': 'recovery'})
        if not resposta or not resposta.user:
            raise ErroAutenticacao("Link inválido ou expirado. Solicite um novo link de redefinição de senha.")
        db.auth.update_user({'password': nova_senha})
    except AuthError as e:
        logger.warning(f"Falha ao redefinir senha: {e}")
        raise ErroAutenticacao(
            "Link inválido ou expirado. Solicite um novo link de redefinição de senha."
        ) from e
    finally:
        db.auth.sign_out()

    logger.info(f"Senha redefinida para {resposta.user.email}")


def validar_senha(senha: str) -> List[str]:
    """Devolve a lista de regras não atendidas (vazia = senha válida)."""
    erros = []
    if len(senha or '') < TAMANHO_MINIMO_SENHA:
        erros.append(f"A senha deve ter pelo menos {TAMANHO_MINIMO_SENHA} caracteres")
    if not re.search(r'[A-Z]', senha or ''):
        erros.append("A senha deve conter pelo menos uma letra maiúscula")
    if not re.search(r'[a-z]', senha or ''):
        erros.append("A senha deve conter pelo menos uma letra minúscula")
    if not re.search(r'\d', senha or ''):
        erros.append("A senha deve conter pelo menos um número")
    return erros
