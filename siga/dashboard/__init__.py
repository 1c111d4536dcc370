"""
Módulo do Dashboard (Blueprint)

Estatísticas das notas das disciplinas do professor logado.
"""

from flask import Blueprint

dashboard_bp = Blueprint(
    'dashboard_bp',
    __name__,
    template_folder='templates',
    url_prefix='/dashboard'
)

from . import routes
