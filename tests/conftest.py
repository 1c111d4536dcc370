import os

import pytest

# Config é "fail fast": as variáveis precisam existir antes do import
os.environ.setdefault('SECRET_KEY', 'chave-de-teste')
os.environ.setdefault('SUPABASE_URL', 'https://teste.supabase.co')
os.environ.setdefault('SUPABASE_KEY', 'chave-supabase-teste')

from config import Config  # noqa: E402
from siga import create_app  # noqa: E402
from siga.auth.services import SESSAO_USUARIO  # noqa: E402
from supabase_falso import SupabaseFalso  # noqa: E402

PROFESSOR_ID = 'prof-1'


class ConfigTeste(Config):
    TESTING = True
    WTF_CSRF_ENABLED = False
    RATELIMIT_ENABLED = False


@pytest.fixture
def config_teste():
    return ConfigTeste


@pytest.fixture
def fake_db():
    return SupabaseFalso()


@pytest.fixture
def app(fake_db):
    return create_app(ConfigTeste, supabase_client=fake_db)


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def logged_client(client):
    with client.session_transaction() as sessao:
        sessao[SESSAO_USUARIO] = {'id': PROFESSOR_ID, 'email': 'prof@escola.edu', 'nome': 'Prof. Teste'}
    return client
