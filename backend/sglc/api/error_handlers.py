"""
Handlers de exceção - convertem erros no envelope padrão da API

{ "success": false, "message": "...", "details": ..., "hint": "...", "code": "..." }
"""
import logging
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

from sglc.core.exceptions import AppError, BackendError, ValidationError
from sglc.core.resilience import coluna_inexistente, tabela_inexistente

logger = logging.getLogger(__name__)

HINT_SCHEMA = "O banco de dados precisa ser atualizado. Execute as migrações pendentes e tente novamente."


def _resposta(erro: AppError) -> JSONResponse:
    return JSONResponse(status_code=erro.status_code, content=erro.to_dict())


def erros_de_campo(exc: RequestValidationError) -> list:
    """Lista de erros por campo a partir da validação do FastAPI/pydantic"""
    erros = []
    for err in exc.errors():
        loc = [str(p) for p in err.get("loc", ()) if p not in ("body", "query", "path")]
        erros.append({
            "campo": ".".join(loc) or None,
            "mensagem": err.get("msg"),
            "tipo": err.get("type"),
        })
    return erros


def backend_error_de(exc: SQLAlchemyError) -> BackendError:
    """Traduz um erro do SQLAlchemy, com hint quando o schema está desatualizado"""
    detalhe = str(getattr(exc, "orig", None) or exc)
    if coluna_inexistente(exc) or tabela_inexistente(exc):
        return BackendError(
            "Erro ao acessar o banco de dados: estrutura desatualizada",
            details=detalhe,
            hint=HINT_SCHEMA,
            code="SCHEMA_DESATUALIZADO",
        )
    return BackendError(details=detalhe, code=getattr(getattr(exc, "orig", None), "pgcode", None))


async def app_error_handler(request: Request, exc: AppError):
    if exc.status_code >= 500:
        logger.error("%s %s: %s (%s)", request.method, request.url.path, exc.message, exc.details)
    return _resposta(exc)


async def validation_error_handler(request: Request, exc: RequestValidationError):
    erros = erros_de_campo(exc)
    campos = ", ".join(e["campo"] for e in erros if e["campo"])
    message = f"Dados inválidos: {campos}" if campos else "Dados inválidos"
    return _resposta(ValidationError(message, errors=erros))


async def sqlalchemy_error_handler(request: Request, exc: SQLAlchemyError):
    erro = backend_error_de(exc)
    logger.error("%s %s: erro de banco: %s", request.method, request.url.path, erro.details)
    return _resposta(erro)


async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    body = {"success": False, "message": exc.detail if isinstance(exc.detail, str) else "Erro"}
    return JSONResponse(status_code=exc.status_code, content=body, headers=getattr(exc, "headers", None))


def registrar_handlers(app: FastAPI) -> None:
    app.add_exception_handler(AppError, app_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(SQLAlchemyError, sqlalchemy_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
