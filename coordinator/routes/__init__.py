# coordinator/routes/__init__.py

from flask import Blueprint
from .pages import pages_bp
from .api import api_routes

# Cria um blueprint principal para rotas
main_routes = Blueprint('main', __name__)

# Registra os sub-blueprints de rotas específicas
main_routes.register_blueprint(pages_bp)
main_routes.register_blueprint(api_routes)
