"""
Módulo Principal (Blueprint)

Página inicial com os atalhos para as áreas do sistema.
"""

from flask import Blueprint

main_bp = Blueprint('main_bp', __name__, template_folder='templates')

from . import routes
