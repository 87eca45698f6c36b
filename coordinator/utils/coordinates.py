# coordinator/utils/coordinates.py
"""
Extração de coordenadas a partir de links do Google Maps.

Formatos suportados (por ordem de prioridade):
    1. https://www.google.com/maps/place/.../@LAT,LNG,17z
    2. https://www.google.com/maps?q=LAT,LNG  /  https://maps.google.com/?q=LAT,LNG
    3. https://maps.google.com/?ll=LAT,LNG
    4. https://www.google.com/maps/LAT,LNG  (coordenadas no caminho)

Links curtos (goo.gl/maps, maps.app.goo.gl) não trazem coordenadas; nesse caso
o redirecionamento é seguido uma vez e os mesmos padrões são aplicados ao
URL final.
"""

import logging
import re
from typing import Optional, Tuple, Union
from urllib.parse import unquote, urlparse

import requests

from coordinator.models import Coordinates

logger = logging.getLogger(__name__)

PADROES_COORDENADAS = [
    re.compile(r'@(-?\d+\.?\d*),(-?\d+\.?\d*)'),
    re.compile(r'[?&]q=(-?\d+\.?\d*),(-?\d+\.?\d*)'),
    re.compile(r'[?&]ll=(-?\d+\.?\d*),(-?\d+\.?\d*)'),
    re.compile(r'/(-?\d+\.\d+),(-?\d+\.\d+)'),
]

SHORT_LINK_HOSTS = {
    "goo.gl": "/maps",
    "maps.app.goo.gl": "/",
    "g.co": "/kgs",
}

Timeout = Union[float, Tuple[float, float]]


def parse_coordinates(map_link: str) -> Optional[Coordinates]:
    """
    Procura coordenadas no link testando os padrões por ordem.

    Args:
        map_link (str): Link do Google Maps.

    Returns:
        Coordinates | None: Primeiro par encontrado, ou None se nenhum padrão bater.
    """
    if not map_link:
        return None

    for padrao in PADROES_COORDENADAS:
        match = padrao.search(map_link)
        if match:
            return Coordinates(lat=float(match.group(1)), lng=float(match.group(2)))
    return None


def is_short_link(map_link: str) -> bool:
    """Indica se o link é um link curto do Google Maps (sem coordenadas)."""
    if not map_link:
        return False
    parsed = urlparse(map_link.strip())
    host = (parsed.netloc or "").lower()
    if host.startswith("www."):
        host = host[4:]
    prefixo = SHORT_LINK_HOSTS.get(host)
    return prefixo is not None and parsed.path.startswith(prefixo)


def resolve_short_link(map_link: str, timeout: Timeout = (3, 7)) -> Optional[str]:
    """
    Segue o redirecionamento de um link curto e devolve o URL final.

    Returns:
        str | None: URL final, ou None em caso de erro de rede.
    """
    try:
        with requests.get(map_link, allow_redirects=True, timeout=timeout, stream=True) as response:
            final_url = response.url
    except requests.Timeout:
        logger.warning(f"Timeout ao resolver link curto: {map_link}")
        return None
    except requests.RequestException as e:
        logger.warning(f"Erro ao resolver link curto {map_link}: {e}")
        return None

    if final_url == map_link:
        logger.info(f"Link curto sem redirecionamento: {map_link}")
    return final_url


def extract_coordinates(map_link: str, resolve_short_links: bool = True,
                        timeout: Timeout = (3, 7)) -> Optional[Coordinates]:
    """
    Extrai coordenadas de um link, resolvendo links curtos quando necessário.
    """
    coordenadas = parse_coordinates(map_link)
    if coordenadas or not resolve_short_links or not is_short_link(map_link):
        return coordenadas

    final_url = resolve_short_link(map_link, timeout=timeout)
    if not final_url:
        return None

    # Páginas de consentimento do Google trazem o destino codificado em "continue="
    coordenadas = parse_coordinates(final_url) or parse_coordinates(unquote(final_url))
    if coordenadas:
        logger.info(f"Link curto resolvido: {map_link} -> {coordenadas.lat},{coordenadas.lng}")
    else:
        logger.warning(f"Sem coordenadas após resolver link curto: {map_link}")
    return coordenadas
