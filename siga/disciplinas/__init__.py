"""
Módulo de Disciplinas (Blueprint)

Cadastro das disciplinas do professor e consulta dos alunos de cada uma.
"""

from flask import Blueprint

disciplinas_bp = Blueprint(
    'disciplinas_bp',
    __name__,
    template_folder='templates',
    url_prefix='/disciplinas'
)

from . import routes
