# coordinator/routes/api.py

from flask import Blueprint, request, jsonify, session, send_file
from coordinator.exceptions import SheetsConfigError
from coordinator.models import DeliveryStatus
from coordinator.services.auth import get_access_codes, get_rate_limiter, is_valid_code, require_access_code
from coordinator.services.sheets import get_sheets_client
from coordinator.utils.helpers import cor_por_status
from flask import current_app
from datetime import datetime
import csv
import io
import logging

api_routes = Blueprint('api', __name__)
logger = logging.getLogger(__name__)

CSV_FIELDNAMES = [
    "order number", "name", "address", "latitude", "longitude",
    "phone", "contact", "notes", "color", "Group", "status"
]


def _erro_configuracao(e: Exception):
    logger.error(f"Configuração da planilha em falta: {e}")
    return jsonify({"success": False, "msg": "Erro de configuração do servidor."}), 500


@api_routes.route('/api/login', methods=['POST'])
def login():
    """Valida o código de acesso de um motorista."""
    try:
        data = request.get_json(silent=True) or {}
        codigo = data.get('code')
        if not codigo:
            return jsonify({"success": False, "msg": "Código de acesso obrigatório."}), 400

        endereco = request.remote_addr or 'desconhecido'
        limiter = get_rate_limiter()
        permitido, retry_in = limiter.check(endereco)
        if not permitido:
            return jsonify({
                "success": False,
                "msg": "Demasiadas tentativas falhadas. Tente mais tarde.",
                "retry_in": retry_in
            }), 429

        codigos = get_access_codes(current_app.config)
        if not codigos:
            logger.error("ACCESS_CODES/ADMIN_ACCESS_CODE não configurados")
            return jsonify({"success": False, "msg": "Erro de configuração do servidor."}), 500

        if is_valid_code(codigo, codigos):
            limiter.register_success(endereco)
            session['authenticated'] = True
            session.modified = True
            logger.info(f"✅ Login com sucesso a partir de {endereco}")
            return jsonify({"success": True})

        restantes = limiter.register_failure(endereco)
        logger.warning(f"Código de acesso inválido a partir de {endereco} ({restantes} tentativas restantes)")
        return jsonify({
            "success": False,
            "msg": "Código de acesso inválido.",
            "attempts_left": restantes
        }), 401
    except Exception as e:
        logger.error(f"Erro no login: {str(e)}", exc_info=True)
        return jsonify({"success": False, "msg": "Falha no login."}), 500


@api_routes.route('/api/logout', methods=['POST'])
def logout():
    """Termina a sessão do motorista."""
    session.clear()
    return jsonify({"success": True})


@api_routes.route('/api/recipients', methods=['GET'])
@require_access_code
def listar_destinatarios():
    """Devolve todos os destinatários da planilha."""
    try:
        destinatarios = get_sheets_client().get_recipients()
        return jsonify({"success": True, "recipients": [d.to_dict() for d in destinatarios]})
    except SheetsConfigError as e:
        return _erro_configuracao(e)
    except Exception as e:
        logger.error(f"Erro ao obter destinatários: {str(e)}", exc_info=True)
        return jsonify({"success": False, "msg": "Falha ao obter destinatários."}), 500


@api_routes.route('/api/recipients', methods=['PATCH'])
@require_access_code
def atualizar_estado():
    """Atualiza o estado da entrega de um destinatário pelo ID."""
    try:
        data = request.get_json(silent=True) or {}
        id_destinatario = data.get('id')
        status = data.get('status')

        if not id_destinatario or not isinstance(id_destinatario, str):
            return jsonify({"success": False, "msg": "ID em falta ou inválido (deve ser texto)."}), 400
        if not status or not isinstance(status, str):
            return jsonify({"success": False, "msg": "Estado em falta ou inválido."}), 400

        novo_estado = DeliveryStatus.from_input(status)
        if novo_estado is None:
            validos = ", ".join(s.value for s in DeliveryStatus)
            return jsonify({"success": False, "msg": f"Estado inválido. Valores aceites: {validos}."}), 400

        if not get_sheets_client().update_delivery_status(id_destinatario, novo_estado):
            return jsonify({"success": False, "msg": "Destinatário não encontrado."}), 404

        return jsonify({"success": True, "id": id_destinatario, "status": novo_estado.value})
    except SheetsConfigError as e:
        return _erro_configuracao(e)
    except Exception as e:
        logger.error(f"Erro ao atualizar estado: {str(e)}", exc_info=True)
        return jsonify({"success": False, "msg": "Falha ao atualizar o estado."}), 500


@api_routes.route('/api/recipients/export', methods=['GET'])
@require_access_code
def exportar_destinatarios():
    """Exporta os destinatários em CSV para planeadores de rotas."""
    try:
        destinatarios = get_sheets_client().get_recipients()
        csv_content = _gerar_csv_content(destinatarios)
        return send_file(
            io.BytesIO(csv_content.encode('utf-8-sig')),  # utf-8-sig para Excel
            mimetype='text/csv',
            as_attachment=True,
            download_name=f'destinatarios_{datetime.now().strftime("%Y%m%d_%H%M")}.csv'
        )
    except SheetsConfigError as e:
        return _erro_configuracao(e)
    except Exception as e:
        logger.error(f"Erro ao exportar destinatários: {str(e)}", exc_info=True)
        return jsonify({"success": False, "msg": "Falha ao exportar destinatários."}), 500


@api_routes.route('/health', methods=['GET'])
def health_check():
    return jsonify({"status": "healthy"})


def _gerar_csv_content(destinatarios):
    """
    Função auxiliar que cria a string do CSV a partir da lista de destinatários.
    Destinatários sem coordenadas ficam com latitude/longitude vazias.
    """
    output = io.StringIO()
    writer = csv.DictWriter(output, fieldnames=CSV_FIELDNAMES, extrasaction='ignore')
    writer.writeheader()

    for d in destinatarios:
        writer.writerow({
            'order number': d.id,
            'name': d.recipient_type,
            'address': d.map_link,
            'latitude': d.coordinates.lat if d.coordinates else "",
            'longitude': d.coordinates.lng if d.coordinates else "",
            'phone': d.phone,
            'contact': d.secondary_phone,
            'notes': f"{d.parcels} encomendas",
            'color': cor_por_status(d.status.value),
            'Group': d.faculty,
            'status': d.status.value
        })

    return output.getvalue()
