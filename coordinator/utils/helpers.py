# coordinator/utils/helpers.py
"""
Módulo com funções auxiliares (helpers) utilizadas em toda a aplicação.
Inclui gestão de cores, leitura segura de células e formatação de credenciais.
"""
import math
from typing import Any, List, Optional

from coordinator.models import DeliveryStatus

# Paleta de cores por estado da entrega (usada nos marcadores e no CSV)
CORES_STATUS = {
    DeliveryStatus.PENDING.value: "#ef4444",     # Vermelho
    DeliveryStatus.ON_THE_WAY.value: "#eab308",  # Amarelo
    DeliveryStatus.DELIVERED.value: "#22c55e",   # Verde
}

def cor_por_status(status: str) -> str:
    """
    Retorna a cor hexadecimal associada ao estado da entrega.

    Args:
        status (str): Estado (Pending, On the way, Delivered).

    Returns:
        str: Cor hexadecimal (Pending como fallback).
    """
    return CORES_STATUS.get(status, CORES_STATUS[DeliveryStatus.PENDING.value])


def celula(linha: List[Any], indice: int) -> str:
    """Lê uma célula da linha; a API omite células vazias no fim da linha."""
    if indice < len(linha) and linha[indice] is not None:
        return str(linha[indice]).strip()
    return ""


def para_inteiro(valor: Any, padrao: int = 0) -> int:
    """
    Converte o número de encomendas para inteiro.

    Aceita "3", "3.0" e " 3 "; qualquer outro valor devolve o padrão.
    """
    try:
        return int(float(str(valor).strip()))
    except (TypeError, ValueError, OverflowError):
        return padrao


def para_float(valor: Any) -> Optional[float]:
    """Converte uma coordenada lida da planilha, aceitando vírgula decimal."""
    if valor is None:
        return None
    texto = str(valor).strip().replace(",", ".")
    if not texto:
        return None
    try:
        numero = float(texto)
    except ValueError:
        return None
    return numero if math.isfinite(numero) else None


def formatar_chave_privada(chave: Optional[str]) -> Optional[str]:
    """
    Normaliza a chave privada da conta de serviço.

    Chaves coladas em variáveis de ambiente costumam trazer "\\n" literal em
    vez de quebras de linha reais.
    """
    if not chave:
        return None
    chave = chave.strip().strip('"')
    return chave.replace("\\n", "\n")
