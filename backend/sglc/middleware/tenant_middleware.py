import logging
from fastapi import Request
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware
from sglc.core.exceptions import AuthError
from sglc.core.security import decode_access_token, JWTError
from sglc.core.tenant_context import set_current_prefeitura_id, clear_current_prefeitura_id

logger = logging.getLogger(__name__)


class TenantMiddleware(BaseHTTPMiddleware):
    """
    Middleware que autentica as requisições da API e configura o contexto
    da prefeitura

    Fluxo:
    1. Extrai o token JWT do header Authorization
    2. Decodifica o token e obtém user_id, prefeitura_id e tipo
    3. Adiciona ao contexto da request (request.state)
    4. Configura prefeitura_id no ContextVar (usado no logging)

    O prefeitura_id do token pode ser nulo (usuário sem vínculo); a
    resolução definitiva fica com a dependency get_current_prefeitura_id.

    Erros de autenticação são respondidos aqui mesmo (401), no envelope
    padrão da API.
    """

    # Rotas públicas que NÃO precisam de autenticação
    PUBLIC_PATHS = [
        "/",
        "/health",
        "/docs",
        "/redoc",
        "/openapi.json",
        "/api/v1/openapi.json",
        "/api/v1/auth/login",
        "/api/v1/setup/status",
        "/api/v1/setup/init",
    ]

    @staticmethod
    def _nao_autorizado(message: str) -> JSONResponse:
        erro = AuthError(message)
        return JSONResponse(status_code=erro.status_code, content=erro.to_dict())

    async def dispatch(self, request: Request, call_next):
        """
        Processa cada requisição antes de chegar nas rotas
        """
        path = request.url.path

        # Permitir requisições OPTIONS (CORS preflight)
        if request.method == "OPTIONS":
            return await call_next(request)

        # Rotas públicas e tudo fora da API passam direto
        if path in self.PUBLIC_PATHS or not path.startswith("/api/"):
            clear_current_prefeitura_id()
            return await call_next(request)

        auth_header = request.headers.get("Authorization", "")
        if not auth_header.startswith("Bearer "):
            return self._nao_autorizado("Token de autenticação não fornecido")

        token = auth_header[len("Bearer "):]

        try:
            payload = decode_access_token(token)
        except JWTError as e:
            logger.info("Token rejeitado em %s: %s", path, e)
            return self._nao_autorizado("Token inválido ou expirado")

        user_id = payload.get("user_id")
        if not user_id:
            return self._nao_autorizado("Token inválido: usuário não identificado")

        # Adicionar ao contexto da request
        request.state.user_id = user_id
        request.state.prefeitura_id = payload.get("prefeitura_id")
        request.state.user_tipo = payload.get("tipo")

        set_current_prefeitura_id(request.state.prefeitura_id)
        try:
            return await call_next(request)
        finally:
            # Limpar contexto após requisição
            clear_current_prefeitura_id()
