"""
Módulo Principal da Aplicação (Application Factory)
"""

import atexit

from flask import Flask, render_template
from werkzeug.middleware.proxy_fix import ProxyFix # Necessário atrás de proxy reverso
from config import Config

from .auth.services import usuario_logado
from .core.constants import MENU_PRINCIPAL
from .core.database import BancoDados
from .core.extensions import csrf, limiter
from .core.logger import configurar_nivel, get_logger
from .importacao.sessao import RepositorioSessoes

logger = get_logger(__name__)


def create_app(config_class=Config, supabase_client=None):
    """
    Cria e configura uma instância da aplicação Flask.

    Args:
        config_class: Classe de configuração (os testes passam uma subclasse).
        supabase_client: Cliente Supabase já construído. Se None, a factory cria
            um a partir de SUPABASE_URL/SUPABASE_KEY.
    """

    app = Flask(__name__,
                instance_relative_config=True,
                static_folder='static',
                template_folder='templates')

    # === HTTPS atrás de proxy ===
    # Garante que url_for(_external=True) gere 'https://' no link de redefinição de senha
    app.wsgi_app = ProxyFix(app.wsgi_app, x_for=1, x_proto=1, x_host=1, x_prefix=1)

    # 1. Carrega a configuração
    app.config.from_object(config_class)
    configurar_nivel(app.config.get('LOG_LEVEL'))

    # 2. Extensões
    csrf.init_app(app)
    limiter.init_app(app)

    # 3. Cliente Supabase (um por aplicação, encerrado no desligamento)
    banco = BancoDados(client=supabase_client)
    banco.init_app(app)
    if supabase_client is None:
        atexit.register(banco.fechar)

    # Sessões de importação em andamento (em memória, por processo)
    app.extensions['importacao_sessoes'] = RepositorioSessoes()

    # === Context Processor ===
    # Injeta o menu e o professor logado em todos os templates HTML.
    @app.context_processor
    def inject_menu():
        return dict(MENU_PRINCIPAL=MENU_PRINCIPAL, usuario=usuario_logado())

    # 4. Configura os Blueprints (Módulos)
    from .auth import auth_bp
    app.register_blueprint(auth_bp)

    from .main import main_bp
    app.register_blueprint(main_bp)

    from .cursos import cursos_bp
    app.register_blueprint(cursos_bp)

    from .disciplinas import disciplinas_bp
    app.register_blueprint(disciplinas_bp)

    from .alunos import alunos_bp
    app.register_blueprint(alunos_bp)

    from .importacao import importacao_bp
    app.register_blueprint(importacao_bp)

    from .dashboard import dashboard_bp
    app.register_blueprint(dashboard_bp)

    # 5. Rota de Health Check
    @app.route("/health")
    @limiter.exempt
    def health_check():
        return "Servidor SIGA no ar!", 200

    # 6. Páginas de erro
    @app.errorhandler(404)
    def pagina_nao_encontrada(e):
        return render_template('404.html'), 404

    @app.errorhandler(413)
    def arquivo_grande_demais(e):
        limite = app.config.get('MAX_CONTENT_LENGTH') or 0
        mensagem = f"Arquivo maior que o limite de {limite // (1024 * 1024)} MB."
        return render_template('erro.html', mensagem=mensagem), 413

    logger.info("Aplicação SIGA inicializada.")
    return app
