"""
Confeitaria - pedidos, sinais e conciliação financeira
API principal FastAPI
"""

import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import ValidationError as PydanticValidationError

from confeitaria.core.config import settings
from confeitaria.core.erros import PreconditionError, ValidationError
from confeitaria.db import init_db
from confeitaria.api.routes_cadastro import clientes_router, produtos_router
from confeitaria.api.routes_financeiro import financeiro_router, transacoes_router
from confeitaria.api.routes_notificacoes import router as notificacoes_router
from confeitaria.api.routes_pedidos import router as pedidos_router

logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(
    title="Confeitaria",
    description="Ciclo de vida de pedidos e conciliação financeira para confeitarias",
    version="1.0.0",
    redirect_slashes=False  # Evita redirect 307 de /pedidos para /pedidos/
)

# CORS - DEVE estar antes de include_router
cors_origins = [origin.strip() for origin in settings.cors_origins.split(",") if origin.strip()]
logger.info(f"CORS origins list: {cors_origins}")

app.add_middleware(
    CORSMiddleware,
    allow_origins=cors_origins,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    allow_headers=["*"],
)


@app.exception_handler(ValidationError)
async def validation_error_handler(request: Request, exc: ValidationError):
    logger.info(f"Requisição inválida em {request.url.path}: {exc}")
    return JSONResponse(status_code=422, content={"detail": str(exc)})


@app.exception_handler(PydanticValidationError)
async def record_validation_error_handler(request: Request, exc: PydanticValidationError):
    logger.info(f"Registro inválido em {request.url.path}: {exc.error_count()} erro(s)")
    return JSONResponse(
        status_code=422,
        content={"detail": exc.errors(include_url=False, include_context=False, include_input=False)},
    )


@app.exception_handler(PreconditionError)
async def precondition_error_handler(request: Request, exc: PreconditionError):
    return JSONResponse(status_code=400, content={"detail": str(exc)})


# Inicializa banco de dados na startup
@app.on_event("startup")
async def on_startup():
    """Inicializa banco de dados na startup"""
    init_db()


# Rotas
app.include_router(clientes_router)
app.include_router(produtos_router)
app.include_router(pedidos_router)
app.include_router(transacoes_router)
app.include_router(financeiro_router)
app.include_router(notificacoes_router)


@app.get("/health")
async def health_check():
    """Endpoint de saúde da API"""
    return {
        "status": "ok",
        "service": "Confeitaria",
        "version": "1.0.0"
    }
