"""
Módulo de Alunos (Blueprint)

Cadastro de alunos e das notas de cada aluno.
"""

from flask import Blueprint

alunos_bp = Blueprint(
    'alunos_bp',
    __name__,
    template_folder='templates',
    url_prefix='/alunos'
)

from . import routes
