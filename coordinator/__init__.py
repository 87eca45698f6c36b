from flask import Flask
from flask_session import Session
from cachelib.file import FileSystemCache
from werkzeug.middleware.proxy_fix import ProxyFix
from .routes import main_routes
from .logging_config import configure_logging
import logging
import os
import time

logger = logging.getLogger(__name__)


def create_app(config_overrides=None):
    """Factory function para criar e configurar a aplicação Flask"""

    # Inicializa o app Flask com configurações de templates e arquivos estáticos
    app = Flask(
        __name__,
        template_folder='templates',
        static_folder='static',
        static_url_path=''
    )

    # Carrega configurações com verificação
    try:
        app.config.from_object('config.Config')
        if config_overrides:
            app.config.update(config_overrides)
        configure_logging(app.config.get('LOG_LEVEL'), app.config.get('LOG_FILE'))
        app.logger.info("🚀 Inicializando aplicação Delivery Coordinator...")
        app.logger.info(f"⚙️ Ambiente: {app.config.get('FLASK_ENV', 'production').upper()}")
    except Exception as e:
        app.logger.error(f"❌ Erro ao carregar configurações: {str(e)}")
        raise

    # Verificação das configurações essenciais
    required_configs = {
        'SECRET_KEY': 'Chave secreta para segurança',
        'SESSION_COOKIE_NAME': 'Nome do cookie de sessão'
    }

    missing = [key for key in required_configs if not app.config.get(key)]
    if missing:
        error_msg = "Configurações obrigatórias faltando:\n" + \
                   "\n".join(f"- {key}: {required_configs[key]}" for key in missing)
        app.logger.error(error_msg)
        raise ValueError("Configurações essenciais faltando no arquivo config.py ou variáveis de ambiente")

    # Planilha e códigos de acesso em falta só dão erro nos pedidos
    if not app.config.get('GOOGLE_SHEET_ID'):
        app.logger.warning("⚠️ GOOGLE_SHEET_ID não definido! A lista de destinatários devolverá erro.")

    if not (app.config.get('ACCESS_CODES') or app.config.get('ADMIN_ACCESS_CODE')):
        app.logger.warning("⚠️ ACCESS_CODES/ADMIN_ACCESS_CODE não definidos! Nenhum motorista conseguirá entrar.")

    if app.config.get('BEHIND_PROXY'):
        app.wsgi_app = ProxyFix(app.wsgi_app, x_for=1, x_proto=1)
        app.logger.info("🌐 ProxyFix ativo (X-Forwarded-For)")

    # Configuração de sessão com tratamento robusto
    try:
        if app.config['SESSION_TYPE'] == 'cachelib' and not app.config.get('SESSION_CACHELIB'):
            session_dir = app.config['SESSION_DIR']
            os.makedirs(session_dir, exist_ok=True)
            app.logger.info(f"📂 Sessões serão armazenadas em: {session_dir}")

            if app.config.get('CLEAN_OLD_SESSIONS', True):
                clean_old_sessions(session_dir, app.config['PERMANENT_SESSION_LIFETIME'].total_seconds())

            app.config['SESSION_CACHELIB'] = FileSystemCache(
                cache_dir=session_dir,
                threshold=app.config.get('SESSION_FILE_THRESHOLD', 500)
            )

        Session().init_app(app)
        app.logger.info("🔒 Sessão configurada com sucesso")
    except Exception as e:
        app.logger.error(f"❌ Falha crítica na configuração de sessão: {str(e)}")
        raise

    app.register_blueprint(main_routes)
    return app


def clean_old_sessions(session_dir, max_age_seconds):
    """Remove ficheiros de sessão mais antigos que o tempo de vida da sessão."""
    limite = time.time() - max_age_seconds
    removidos = 0
    for nome in os.listdir(session_dir):
        if nome.startswith('__'):
            continue  # contador interno do FileSystemCache
        caminho = os.path.join(session_dir, nome)
        try:
            if os.path.isfile(caminho) and os.path.getmtime(caminho) < limite:
                os.remove(caminho)
                removidos += 1
        except OSError:
            continue
    if removidos:
        logger.info(f"🧹 {removidos} sessões antigas removidas")
