"""
Módulo de Importação de Planilhas (Blueprint)

Upload de planilhas de alunos ou notas, detecção do tipo, pré-visualização
e gravação no Supabase.
"""

from flask import Blueprint

importacao_bp = Blueprint(
    'importacao_bp',
    __name__,
    template_folder='templates',
    url_prefix='/importar'
)

from . import routes
