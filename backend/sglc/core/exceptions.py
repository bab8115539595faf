"""
Exceções da aplicação

Cada exceção carrega o status HTTP e os campos do envelope de erro
({success: false, message, details, hint, code}). Os handlers registrados
em sglc.api.error_handlers fazem a conversão para resposta JSON.
"""
from typing import Any, Optional


class AppError(Exception):
    """Exceção base da aplicação"""

    status_code = 500
    default_message = "Erro interno do servidor"

    def __init__(
        self,
        message: Optional[str] = None,
        details: Any = None,
        hint: Optional[str] = None,
        code: Optional[str] = None,
    ):
        self.message = message or self.default_message
        self.details = details
        self.hint = hint
        self.code = code
        super().__init__(self.message)

    def to_dict(self) -> dict:
        """Converte para o envelope de erro da API"""
        body = {"success": False, "message": self.message}
        if self.details is not None:
            body["details"] = self.details
        if self.hint:
            body["hint"] = self.hint
        if self.code:
            body["code"] = self.code
        return body


class ValidationError(AppError):
    """Entrada ausente ou inválida, corrigível pelo usuário"""
    status_code = 400
    default_message = "Dados inválidos"

    def __init__(self, message: Optional[str] = None, errors: Optional[list] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.errors = errors or []

    def to_dict(self) -> dict:
        body = super().to_dict()
        if self.errors:
            body["errors"] = self.errors
        return body


class AuthError(AppError):
    status_code = 401
    default_message = "Não autenticado"


class ForbiddenError(AppError):
    status_code = 403
    default_message = "Acesso negado"


class TenantProvisioningError(ForbiddenError):
    """Nenhuma prefeitura ativa disponível para o usuário"""
    default_message = "Nenhuma prefeitura ativa encontrada no sistema"


class NotFoundError(AppError):
    status_code = 404
    default_message = "Registro não encontrado"


class BackendError(AppError):
    """O banco de dados rejeitou a operação"""
    status_code = 500
    default_message = "Erro ao acessar o banco de dados"


class AllocationError(BackendError):
    """Falha ao gerar número sequencial; a criação do registro é abortada"""
    default_message = "Erro ao gerar número sequencial"


class AuditWriteError(BackendError):
    """
    Falha ao gravar histórico.

    Nunca chega ao cliente: o serviço de histórico captura, registra no log
    e devolve um ResultadoHistorico com sucesso=False.
    """
    default_message = "Erro ao registrar histórico"
