#!/usr/bin/env python3
from coordinator import create_app
from coordinator.logging_config import configure_logging
import os
import logging
from dotenv import load_dotenv

def verify_config(app):
    """Verificação completa das configurações com tratamento de erros"""
    required_configs = {
        'SECRET_KEY': 'Chave secreta para segurança da aplicação',
        'GOOGLE_SHEET_ID': 'ID da planilha Google com os destinatários',
        'SESSION_TYPE': 'Tipo de armazenamento de sessão (filesystem/redis)',
        'SESSION_COOKIE_NAME': 'Nome do cookie de sessão'
    }
    try:
        missing = [key for key in required_configs if not app.config.get(key)]
        if missing:
            error_details = "\n".join([f"- {key}: {required_configs[key]}" for key in missing])
            error_msg = f"Configurações obrigatórias faltando:\n{error_details}"
            logging.error(error_msg)
            raise ValueError("Configurações essenciais não encontradas")
        if not (app.config.get('GOOGLE_SERVICE_ACCOUNT_FILE') or
                (app.config.get('GOOGLE_SERVICE_ACCOUNT_EMAIL') and app.config.get('GOOGLE_PRIVATE_KEY'))):
            logging.warning("AVISO: credenciais da conta de serviço Google não configuradas!")
        if not (app.config.get('ACCESS_CODES') or app.config.get('ADMIN_ACCESS_CODE')):
            logging.warning("AVISO: nenhum código de acesso configurado (ACCESS_CODES)!")
        logging.info("✅ Configurações verificadas com sucesso")
        return True
    except Exception as e:
        logging.error(f"❌ Falha na verificação de configurações: {str(e)}")
        raise

def start_server(app):
    """Inicia o servidor Flask para desenvolvimento local"""
    try:
        host = os.getenv('HOST', '127.0.0.1')
        port = int(os.getenv('PORT', 5000))
        debug_mode = app.config.get('DEBUG', True)

        logging.info(f"🚀 Iniciando servidor de DESENVOLVIMENTO em http://{host}:{port}")
        app.run(
            host=host,
            port=port,
            debug=debug_mode
        )
    except Exception as e:
        logging.error(f"❌ Falha ao iniciar servidor: {str(e)}")
        raise

# --- INICIALIZAÇÃO GLOBAL ---
# Executado tanto pelo Gunicorn (app:app) quanto localmente.

# Carrega variáveis de ambiente do arquivo .env antes de importar config.Config
load_dotenv()

configure_logging()

app = create_app()

# -----------------------------


if __name__ == '__main__':
    try:
        verify_config(app)
        start_server(app)
    except Exception as e:
        logging.critical(f"⛔ Falha crítica na inicialização local: {str(e)}")
        raise
