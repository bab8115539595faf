from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
import logging
from sglc.config import settings
from sglc.core.logging_config import setup_logging
from sglc.middleware.tenant_middleware import TenantMiddleware
from sglc.api.error_handlers import registrar_handlers
from sglc.api.routes import (
    auth, setup, prefeituras, usuarios, processos, processo_recursos,
    licitacoes, contratos, dashboard
)

setup_logging()
logger = logging.getLogger(__name__)

app = FastAPI(
    title=settings.PROJECT_NAME,
    openapi_url=f"{settings.API_V1_STR}/openapi.json",
    docs_url="/docs",
    redoc_url="/redoc"
)

# Configurar CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.BACKEND_CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Middleware de Tenant (valida o token e identifica a prefeitura)
app.add_middleware(TenantMiddleware)

registrar_handlers(app)


# Rota de health check
@app.get("/health")
def health_check():
    """Health check para monitoramento"""
    return {"status": "healthy"}


@app.get("/")
def root():
    return {
        "message": "SGLC - Sistema de Gestão de Licitações e Contratos",
        "version": "1.0.0",
        "environment": settings.ENVIRONMENT
    }


# Incluir routers
app.include_router(auth.router, prefix=f"{settings.API_V1_STR}/auth", tags=["auth"])
app.include_router(setup.router, prefix=f"{settings.API_V1_STR}/setup", tags=["setup"])
app.include_router(prefeituras.router, prefix=f"{settings.API_V1_STR}/prefeituras", tags=["prefeituras"])
app.include_router(usuarios.router, prefix=f"{settings.API_V1_STR}/usuarios", tags=["usuarios"])
app.include_router(processos.router, prefix=f"{settings.API_V1_STR}/processos-administrativos", tags=["processos"])
app.include_router(processo_recursos.router, prefix=f"{settings.API_V1_STR}/processos-administrativos", tags=["processos"])
app.include_router(licitacoes.router, prefix=f"{settings.API_V1_STR}/licitacoes", tags=["licitacoes"])
app.include_router(contratos.router, prefix=f"{settings.API_V1_STR}/contratos", tags=["contratos"])
app.include_router(dashboard.router, prefix=f"{settings.API_V1_STR}/dashboard", tags=["dashboard"])


@app.on_event("startup")
def startup_event():
    print(f"[STARTUP] {settings.PROJECT_NAME} iniciado!")
    print(f"[STARTUP] Documentacao: http://localhost:8000/docs")
    print(f"[STARTUP] Ambiente: {settings.ENVIRONMENT}")

    # Criar tabelas do banco de dados automaticamente
    from sglc.database import engine, Base
    import sglc.models  # noqa: F401  registra todos os models no metadata
    Base.metadata.create_all(bind=engine)
    print("[STARTUP] Tabelas do banco de dados criadas/verificadas!")


@app.on_event("shutdown")
def shutdown_event():
    logger.info("Sistema encerrado")
    print("[SHUTDOWN] Sistema encerrado!")
