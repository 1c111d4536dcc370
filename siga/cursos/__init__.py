"""
Módulo de Cursos (Blueprint)

Cadastro de cursos, grade curricular por semestre e importação de cursos.
"""

from flask import Blueprint

cursos_bp = Blueprint(
    'cursos_bp',
    __name__,
    template_folder='templates',
    url_prefix='/cursos'
)

from . import routes
