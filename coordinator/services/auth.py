# coordinator/services/auth.py
"""
Autenticação dos motoristas por código de acesso partilhado.

Os códigos válidos vêm da configuração (ACCESS_CODES, separados por vírgula,
e o código legado ADMIN_ACCESS_CODE). As falhas de login são contadas por
endereço IP; ao fim de LOGIN_MAX_ATTEMPTS falhas seguidas o endereço fica
bloqueado durante LOGIN_LOCKOUT_SECONDS. O estado fica só na memória do
processo.
"""

import hmac
import logging
import math
import threading
import time
from functools import wraps
from typing import Callable, Dict, List, Mapping, Optional, Tuple

from flask import current_app, jsonify, request

logger = logging.getLogger(__name__)


def get_access_codes(config: Mapping) -> List[str]:
    """
    Lista de códigos de acesso válidos.

    Args:
        config: Configuração Flask (ou dicionário equivalente).

    Returns:
        list: Códigos sem espaços nas pontas, sem vazios e sem repetidos.
    """
    codigos: List[str] = []
    lista = config.get("ACCESS_CODES") or ""
    for codigo in lista.split(","):
        codigo = codigo.strip()
        if codigo and codigo not in codigos:
            codigos.append(codigo)

    legado = (config.get("ADMIN_ACCESS_CODE") or "").strip()
    if legado and legado not in codigos:
        codigos.append(legado)
    return codigos


def is_valid_code(code: Optional[str], codes: List[str]) -> bool:
    """Compara o código com a lista em tempo constante."""
    if not code or not isinstance(code, str):
        return False
    recebido = code.encode("utf-8")
    return any(hmac.compare_digest(recebido, valido.encode("utf-8")) for valido in codes)


def extract_bearer_token(header: Optional[str]) -> str:
    """Extrai o código do cabeçalho Authorization ("Bearer <código>")."""
    if not header:
        return ""
    header = header.strip()
    if header[:7].lower() == "bearer ":
        return header[7:].strip()
    return header


class LoginRateLimiter:
    """
    Contador de falhas de login por endereço, com bloqueio temporário.

    Uma tentativa é recusada enquanto o bloqueio estiver ativo. O contador
    volta a zero com um login válido ou quando o bloqueio expira.
    """

    def __init__(self, max_attempts: int = 5, lockout_seconds: float = 900,
                 clock: Callable[[], float] = time.time):
        self.max_attempts = max_attempts
        self.lockout_seconds = lockout_seconds
        self._clock = clock
        self._lock = threading.Lock()
        # endereço -> (falhas seguidas, bloqueado até)
        self._falhas: Dict[str, Tuple[int, float]] = {}

    def check(self, address: str) -> Tuple[bool, int]:
        """
        Verifica se o endereço pode tentar o login.

        Returns:
            tuple: (permitido, segundos até o bloqueio expirar)
        """
        agora = self._clock()
        with self._lock:
            _, bloqueado_ate = self._falhas.get(address, (0, 0.0))
            if bloqueado_ate:
                if agora < bloqueado_ate:
                    return False, max(1, math.ceil(bloqueado_ate - agora))
                del self._falhas[address]
            return True, 0

    def register_failure(self, address: str) -> int:
        """
        Regista uma falha de login.

        Returns:
            int: Tentativas restantes antes do bloqueio (0 = bloqueado agora).
        """
        agora = self._clock()
        with self._lock:
            falhas, _ = self._falhas.get(address, (0, 0.0))
            falhas += 1
            if falhas >= self.max_attempts:
                self._falhas[address] = (falhas, agora + self.lockout_seconds)
                logger.warning(f"🔒 Endereço {address} bloqueado após {falhas} tentativas falhadas")
                return 0
            self._falhas[address] = (falhas, 0.0)
            return self.max_attempts - falhas

    def register_success(self, address: str) -> None:
        with self._lock:
            self._falhas.pop(address, None)

    def reset(self) -> None:
        with self._lock:
            self._falhas.clear()


def get_rate_limiter() -> LoginRateLimiter:
    """Limitador da aplicação atual (um por processo)."""
    limiter = current_app.extensions.get("login_rate_limiter")
    if limiter is None:
        limiter = LoginRateLimiter(
            max_attempts=current_app.config.get("LOGIN_MAX_ATTEMPTS", 5),
            lockout_seconds=current_app.config.get("LOGIN_LOCKOUT_SECONDS", 900),
        )
        current_app.extensions["login_rate_limiter"] = limiter
    return limiter


def require_access_code(view):
    """Decorator: exige 'Authorization: Bearer <código>' com um código válido."""
    @wraps(view)
    def wrapper(*args, **kwargs):
        codigos = get_access_codes(current_app.config)
        token = extract_bearer_token(request.headers.get("Authorization"))
        if not codigos or not is_valid_code(token, codigos):
            return jsonify({"success": False, "msg": "Não autorizado."}), 401
        return view(*args, **kwargs)
    return wrapper
