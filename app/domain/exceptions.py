from __future__ import annotations


class DomainError(Exception):
    """Base para erros de dominio."""


class CheckoutError(DomainError):
    """Erro do fluxo de checkout convertido em resposta JSON."""

    status_code = 500

    def __init__(self, message: str, *, status_code: int | None = None, **context):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code
        self.context = context


class ClientInputError(CheckoutError):
    """Entrada do chamador invalida (subjectId ou plan)."""

    status_code = 400


class ConfigurationError(CheckoutError):
    """Configuracao do operador ausente ou invalida."""

    status_code = 500


class ProviderError(CheckoutError):
    """Stripe respondeu com erro ou corpo ilegivel."""

    status_code = 500


class ProviderTimeoutError(ProviderError):
    """Chamada ao Stripe excedeu o tempo limite."""

    status_code = 504


class UnsupportedMethodError(CheckoutError):
    """Metodo HTTP nao aceito pelo endpoint."""

    status_code = 405
