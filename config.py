"""
Módulo de Configuração (Blindado)

Define a classe de configuração principal do SIGA. Implementa o padrão
'Fail Fast': se uma variável crítica estiver faltando, a aplicação nem inicia.
"""

import os
from dotenv import load_dotenv

# Carrega variáveis do arquivo .env
load_dotenv()


class Config:
    """
    Classe de configuração base da aplicação.
    """

    # === SEGURANÇA CRÍTICA (Fail Fast) ===
    SECRET_KEY = os.environ.get('SECRET_KEY')
    if not SECRET_KEY:
        raise ValueError("ERRO CRÍTICO: 'SECRET_KEY' não encontrada no .env. A aplicação não pode iniciar insegura.")

    # === SUPABASE (Banco + Auth) ===
    SUPABASE_URL = os.environ.get('SUPABASE_URL')
    SUPABASE_KEY = os.environ.get('SUPABASE_KEY')

    if not SUPABASE_URL or not SUPABASE_KEY:
        raise ValueError("ERRO CRÍTICO: Credenciais do Supabase (SUPABASE_URL/SUPABASE_KEY) ausentes.")

    # === FLASK ===
    DEBUG = os.environ.get('FLASK_DEBUG', 'False').lower() in ('true', '1')
    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO').upper()

    # Limite de upload das planilhas (padrão 10 MB)
    MAX_CONTENT_LENGTH = int(os.environ.get('MAX_CONTENT_LENGTH', 10 * 1024 * 1024))

    # === RATE LIMITING ===
    # Em produção, idealmente usar Redis. Para dev/demo, memória é ok.
    RATELIMIT_STORAGE_URI = os.environ.get('RATELIMIT_STORAGE_URI', 'memory://')
