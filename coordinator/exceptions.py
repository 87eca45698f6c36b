# coordinator/exceptions.py
"""Exceções da aplicação."""


class CoordinatorError(Exception):
    """Exceção base do Delivery Coordinator."""
    pass


class SheetsConfigError(CoordinatorError):
    """Configuração da planilha Google em falta (ID ou credenciais)."""
    pass


class SheetsError(CoordinatorError):
    """Falha ao ler ou escrever na API do Google Sheets."""
    pass
