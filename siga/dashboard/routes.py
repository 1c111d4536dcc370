from flask import flash, render_template, request

from . import dashboard_bp
from .services import carregar_dashboard
from siga.auth.services import exigir_login, professor_atual
from siga.core.database import get_db
from siga.core.errors import ErroSiga


@dashboard_bp.before_request
def restringir_acesso():
    return exigir_login()


@dashboard_bp.route('/')
def painel():
    disciplina_id = request.args.get('disciplina') or None
    try:
        contexto = carregar_dashboard(get_db(), professor_atual(), disciplina_id)
    except ErroSiga as e:
        flash(f"Erro ao carregar dashboard: {e.mensagem}", 'error')
        contexto = {
            'disciplinas': [], 'disciplina_id': disciplina_id, 'total_alunos': 0,
            'total_disciplinas': 0, 'total_notas': 0, 'media_geral': 0.0,
            'distribuicao': [], 'por_disciplina': [], 'por_tipo': [],
        }
    return render_template('dashboard/painel.html', **contexto)
