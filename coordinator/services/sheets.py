# coordinator/services/sheets.py
"""
Módulo de acesso à planilha Google (Google Sheets API v4).

Traduz as linhas da planilha em objetos Recipient e escreve de volta o estado
da entrega e as coordenadas calculadas a partir dos links.

Colunas: A=ID, B=Link Google Maps, C=Latitude, D=Longitude, E=Tipo,
F=Encomendas, G=Faculdade, H=Telefone, I=Telefone secundário, J=Estado
"""

import logging
import threading
from typing import Any, Dict, List, Optional, Tuple
from urllib.parse import quote

import requests
from flask import current_app
from google.auth.exceptions import GoogleAuthError
from google.auth.transport.requests import AuthorizedSession
from google.oauth2 import service_account

from coordinator.exceptions import SheetsConfigError, SheetsError
from coordinator.models import Coordinates, DeliveryStatus, Recipient
from coordinator.utils.coordinates import extract_coordinates
from coordinator.utils.helpers import celula, formatar_chave_privada, para_float, para_inteiro

logger = logging.getLogger(__name__)

SHEETS_API_URL = "https://sheets.googleapis.com/v4/spreadsheets"
SCOPES = ["https://www.googleapis.com/auth/spreadsheets"]
TOKEN_URI = "https://oauth2.googleapis.com/token"

# Índices das colunas (0 = coluna A)
COL_ID, COL_LINK, COL_LAT, COL_LNG, COL_TIPO = 0, 1, 2, 3, 4
COL_ENCOMENDAS, COL_FACULDADE, COL_TELEFONE, COL_TELEFONE2, COL_ESTADO = 5, 6, 7, 8, 9

MARCADOR_ERRO = "error"

# (linha da planilha, latitude, longitude) a escrever nas colunas C:D
CoordinateUpdate = Tuple[int, str, str]


def carregar_credenciais(email: Optional[str], private_key: Optional[str],
                         ficheiro: Optional[str] = None) -> service_account.Credentials:
    """
    Cria as credenciais da conta de serviço.

    Usa o ficheiro JSON se indicado; caso contrário, o e-mail e a chave privada
    das variáveis de ambiente.

    Raises:
        SheetsConfigError: Credenciais em falta ou inválidas.
    """
    try:
        if ficheiro:
            return service_account.Credentials.from_service_account_file(ficheiro, scopes=SCOPES)

        chave = formatar_chave_privada(private_key)
        if not email or not chave:
            raise SheetsConfigError("Credenciais da conta de serviço Google não configuradas")

        info = {
            "type": "service_account",
            "client_email": email,
            "private_key": chave,
            "token_uri": TOKEN_URI,
        }
        return service_account.Credentials.from_service_account_info(info, scopes=SCOPES)
    except (ValueError, OSError) as e:
        raise SheetsConfigError(f"Credenciais da conta de serviço inválidas: {e}") from e


class SheetsClient:
    """Cliente da planilha de destinatários."""

    def __init__(self, sheet_id: str, session: requests.Session, sheet_name: str = "Sheet1",
                 resolve_short_links: bool = True, timeout=(3, 7), run_in_background: bool = True):
        if not sheet_id:
            raise SheetsConfigError("GOOGLE_SHEET_ID não configurado")
        self.sheet_id = sheet_id
        self.sheet_name = sheet_name or "Sheet1"
        self.session = session
        self.resolve_short_links = resolve_short_links
        self.timeout = timeout
        self.run_in_background = run_in_background

    @classmethod
    def from_config(cls, config: Dict[str, Any]) -> "SheetsClient":
        """Cria o cliente a partir da configuração Flask."""
        sheet_id = config.get("GOOGLE_SHEET_ID")
        if not sheet_id:
            raise SheetsConfigError("GOOGLE_SHEET_ID não configurado")

        credenciais = carregar_credenciais(
            config.get("GOOGLE_SERVICE_ACCOUNT_EMAIL"),
            config.get("GOOGLE_PRIVATE_KEY"),
            config.get("GOOGLE_SERVICE_ACCOUNT_FILE"),
        )
        return cls(
            sheet_id,
            AuthorizedSession(credenciais),
            sheet_name=config.get("GOOGLE_SHEET_NAME", "Sheet1"),
            resolve_short_links=config.get("RESOLVE_SHORT_LINKS", True),
            timeout=config.get("HTTP_TIMEOUT", (3, 7)),
        )

    # --- Pedidos HTTP ---

    def _a1(self, intervalo: str) -> str:
        """Intervalo em notação A1 com o nome da folha (entre aspas se necessário)."""
        nome = self.sheet_name
        if not nome.replace("_", "").isalnum():
            nome = "'" + nome.replace("'", "''") + "'"
        return f"{nome}!{intervalo}"

    def _values_url(self, intervalo: str) -> str:
        return f"{SHEETS_API_URL}/{self.sheet_id}/values/{quote(self._a1(intervalo), safe='')}"

    def _request(self, method: str, url: str, **kwargs) -> Dict[str, Any]:
        try:
            response = self.session.request(method, url, timeout=self.timeout, **kwargs)
            response.raise_for_status()
            return response.json()
        except requests.Timeout as e:
            raise SheetsError("Tempo de resposta excedido na API Google Sheets") from e
        except (requests.RequestException, GoogleAuthError, ValueError) as e:
            raise SheetsError(f"Erro na API Google Sheets: {e}") from e

    # --- Leitura ---

    def get_recipients(self) -> List[Recipient]:
        """
        Lê todos os destinatários da planilha.

        Linhas sem ID são ignoradas. Coordenadas em falta são extraídas do link
        e gravadas de volta na planilha em segundo plano.

        Raises:
            SheetsError: Falha na leitura.
        """
        data = self._request("GET", self._values_url("A:J"))
        linhas = data.get("values", [])
        if not linhas:
            return []

        destinatarios = []
        atualizacoes: List[CoordinateUpdate] = []

        # Linha 1 é o cabeçalho; os dados começam na linha 2
        for numero_linha, linha in enumerate(linhas[1:], start=2):
            destinatario, atualizacao = self._ler_linha(linha, numero_linha)
            if destinatario is None:
                continue
            destinatarios.append(destinatario)
            if atualizacao:
                atualizacoes.append(atualizacao)

        if atualizacoes:
            self._agendar_atualizacao_coordenadas(atualizacoes)

        logger.info(f"{len(destinatarios)} destinatários lidos da planilha")
        return destinatarios

    def _ler_linha(self, linha: List[Any], numero_linha: int) -> Tuple[Optional[Recipient], Optional[CoordinateUpdate]]:
        id_destinatario = celula(linha, COL_ID)
        if not id_destinatario:
            return None, None

        link = celula(linha, COL_LINK)
        lat_planilha = celula(linha, COL_LAT)
        lng_planilha = celula(linha, COL_LNG)
        celulas_vazias = not lat_planilha and not lng_planilha
        marcado_erro = MARCADOR_ERRO in (lat_planilha.lower(), lng_planilha.lower())

        coordenadas = None
        atualizacao = None

        if lat_planilha and lng_planilha and not marcado_erro:
            lat, lng = para_float(lat_planilha), para_float(lng_planilha)
            if lat is not None and lng is not None:
                coordenadas = Coordinates(lat=lat, lng=lng)

        if coordenadas is None and link:
            coordenadas = extract_coordinates(link, self.resolve_short_links, self.timeout)
            if coordenadas and celulas_vazias:
                atualizacao = (numero_linha, str(coordenadas.lat), str(coordenadas.lng))
            elif coordenadas is None and celulas_vazias:
                logger.warning(f"Não foi possível extrair coordenadas do destinatário {id_destinatario}: {link}")
                atualizacao = (numero_linha, MARCADOR_ERRO, MARCADOR_ERRO)
                marcado_erro = True

        destinatario = Recipient(
            id=id_destinatario,
            map_link=link,
            coordinates=coordenadas,
            coordinates_error=marcado_erro and coordenadas is None,
            recipient_type=celula(linha, COL_TIPO),
            parcels=para_inteiro(celula(linha, COL_ENCOMENDAS)),
            faculty=celula(linha, COL_FACULDADE),
            phone=celula(linha, COL_TELEFONE),
            secondary_phone=celula(linha, COL_TELEFONE2),
            status=DeliveryStatus.from_sheet(celula(linha, COL_ESTADO)),
        )
        return destinatario, atualizacao

    # --- Escrita ---

    def _agendar_atualizacao_coordenadas(self, atualizacoes: List[CoordinateUpdate]) -> None:
        """Grava as coordenadas sem bloquear a resposta (fire-and-forget)."""
        if not self.run_in_background:
            self._atualizar_coordenadas_seguro(atualizacoes)
            return
        threading.Thread(
            target=self._atualizar_coordenadas_seguro,
            args=(atualizacoes,),
            name="coordinate-backfill",
            daemon=True,
        ).start()

    def _atualizar_coordenadas_seguro(self, atualizacoes: List[CoordinateUpdate]) -> None:
        try:
            self.update_coordinates(atualizacoes)
        except Exception as e:
            logger.error(f"Erro ao gravar coordenadas na planilha: {e}", exc_info=True)

    def update_coordinates(self, atualizacoes: List[CoordinateUpdate]) -> None:
        """Grava latitude/longitude (colunas C:D) de várias linhas num único pedido."""
        data = [
            {"range": self._a1(f"C{linha}:D{linha}"), "values": [[lat, lng]]}
            for linha, lat, lng in atualizacoes
        ]
        self._request(
            "POST",
            f"{SHEETS_API_URL}/{self.sheet_id}/values:batchUpdate",
            json={"valueInputOption": "USER_ENTERED", "data": data},
        )
        logger.info(f"Coordenadas gravadas para {len(atualizacoes)} linhas")

    def update_delivery_status(self, id_destinatario: str, status: DeliveryStatus) -> bool:
        """
        Atualiza o estado da entrega (coluna J) do destinatário com o ID indicado.

        Returns:
            bool: True se atualizado, False se o ID não existir na planilha.

        Raises:
            SheetsError: Falha na leitura ou escrita.
        """
        data = self._request("GET", self._values_url("A:A"))
        linhas = data.get("values", [])
        if len(linhas) < 2:
            return False

        linha_alvo = None
        for numero_linha, linha in enumerate(linhas[1:], start=2):
            if celula(linha, COL_ID) == id_destinatario:
                linha_alvo = numero_linha
                break

        if linha_alvo is None:
            logger.warning(f"Destinatário não encontrado com ID: {id_destinatario}")
            return False

        self._request(
            "PUT",
            self._values_url(f"J{linha_alvo}"),
            params={"valueInputOption": "USER_ENTERED"},
            json={"values": [[status.value]]},
        )
        logger.info(f"Estado do destinatário {id_destinatario} atualizado para '{status.value}'")
        return True


def get_sheets_client() -> SheetsClient:
    """Devolve o cliente da planilha da aplicação atual, criando-o na primeira chamada."""
    client = current_app.extensions.get("sheets_client")
    if client is None:
        client = SheetsClient.from_config(current_app.config)
        current_app.extensions["sheets_client"] = client
    return client
