import os
from datetime import timedelta

class Config:
    # Configurações essenciais
    SECRET_KEY = os.getenv('SECRET_KEY', os.urandom(24).hex())
    FLASK_ENV = os.getenv('FLASK_ENV', 'production')
    DEBUG = FLASK_ENV.lower() == 'development'

    # Planilha Google (fonte dos destinatários)
    GOOGLE_SHEET_ID = os.getenv('GOOGLE_SHEET_ID')
    GOOGLE_SHEET_NAME = os.getenv('GOOGLE_SHEET_NAME', 'Sheet1')
    GOOGLE_SERVICE_ACCOUNT_EMAIL = os.getenv('GOOGLE_SERVICE_ACCOUNT_EMAIL')
    GOOGLE_PRIVATE_KEY = os.getenv('GOOGLE_PRIVATE_KEY')
    GOOGLE_SERVICE_ACCOUNT_FILE = os.getenv('GOOGLE_SERVICE_ACCOUNT_FILE')

    # Códigos de acesso dos motoristas (lista separada por vírgulas + código legado)
    ACCESS_CODES = os.getenv('ACCESS_CODES', '')
    ADMIN_ACCESS_CODE = os.getenv('ADMIN_ACCESS_CODE')

    # Logging
    LOG_LEVEL = os.getenv('LOG_LEVEL', 'INFO')
    LOG_FILE = os.getenv('LOG_FILE', 'app.log')

    # Bloqueio de login
    LOGIN_MAX_ATTEMPTS = int(os.getenv('LOGIN_MAX_ATTEMPTS', 5))
    LOGIN_LOCKOUT_SECONDS = int(os.getenv('LOGIN_LOCKOUT_SECONDS', 900))

    # Links do Google Maps
    RESOLVE_SHORT_LINKS = os.getenv('RESOLVE_SHORT_LINKS', 'True') == 'True'
    HTTP_TIMEOUT = (3, 7)

    # Atrás de proxy (Render, nginx): usa X-Forwarded-For para o IP do cliente
    BEHIND_PROXY = os.getenv('BEHIND_PROXY', 'False') == 'True'

    # Configurações de sessão
    # cachelib: ficheiros em SESSION_DIR (FileSystemCache criado em create_app)
    SESSION_TYPE = os.getenv('SESSION_TYPE', 'cachelib')
    SESSION_DIR = os.getenv('SESSION_DIR', os.path.join(os.getcwd(), 'flask_session'))
    SESSION_FILE_THRESHOLD = 500
    SESSION_PERMANENT = True
    SESSION_KEY_PREFIX = 'session:'
    PERMANENT_SESSION_LIFETIME = timedelta(days=1)
    CLEAN_OLD_SESSIONS = True

    # Configurações de cookie
    SESSION_COOKIE_NAME = os.getenv('SESSION_COOKIE_NAME', 'coordinator_session')
    SESSION_COOKIE_SECURE = os.getenv('SESSION_COOKIE_SECURE', 'True') == 'True'
    SESSION_COOKIE_HTTPONLY = True
    SESSION_COOKIE_SAMESITE = 'Lax'

    # Configuração para Redis (se necessário)
    if SESSION_TYPE == 'redis':
        import redis
        REDIS_URL = os.getenv('REDIS_URL')
        if REDIS_URL:
            SESSION_REDIS = redis.from_url(REDIS_URL)
