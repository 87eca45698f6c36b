# coordinator/routes/pages.py
from flask import Blueprint, render_template, session, redirect, url_for
from coordinator.utils.helpers import CORES_STATUS
from coordinator.models import DeliveryStatus

pages_bp = Blueprint('pages', __name__)


@pages_bp.route("/", methods=["GET"])
def home():
    """Página de login (sempre mostrada; o código fica no localStorage do browser)."""
    return render_template("index.html")


@pages_bp.route("/map", methods=["GET"])
def mapa():
    """Mapa dos destinatários (os dados são carregados pelo JavaScript)."""
    if not session.get('authenticated'):
        return redirect(url_for('main.pages.home'))
    return render_template(
        "map.html",
        CORES_STATUS=CORES_STATUS,
        ESTADOS=[s.value for s in DeliveryStatus]
    )
