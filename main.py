from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from uvicorn.middleware.proxy_headers import ProxyHeadersMiddleware
from dotenv import load_dotenv
import logging
import os

load_dotenv()
from core.config import settings
from routers.empresas_router import router as empresas_router
from routers.senha_router import router as senha_router
from routers.dados_fiscais_router import router as dados_fiscais_router
from routers.importacao_router import router as importacao_router
from routers.dashboard_router import router as dashboard_router

logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(
    title=f"{settings.APP_NAME} API",
    description="""
API do painel de dados fiscais.

Fluxo:
1. Cadastro de empresas (manual ou pela importação)
2. Importação / edição dos períodos fiscais (RBT12, entradas, saídas, impostos)
3. Consulta: lista com o último período, detalhes, evolução e dashboard
4. Senha opcional por empresa para ocultar os dados fiscais
""",
    version=settings.APP_VERSION,
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json"
)

app.add_middleware(ProxyHeadersMiddleware, trusted_hosts=["*"])

cors_origins = list(settings.ALLOWED_ORIGINS) + [
    value
    for key, value in os.environ.items()
    if key.startswith("CORS_ORIGIN") and value.strip()
]

app.add_middleware(
    CORSMiddleware,
    allow_origins=cors_origins,
    allow_origin_regex=r"http://(localhost|127\.0\.0\.1)(:\d+)?",
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Captura exceções não tratadas para que a resposta 500
    passe pelo CORSMiddleware e inclua os headers corretos."""
    logger.exception(f"Erro não tratado em {request.method} {request.url.path}")
    return JSONResponse(
        status_code=500,
        content={"detail": f"Erro interno do servidor: {str(exc)}"},
    )


app.include_router(empresas_router, prefix="/api")
app.include_router(senha_router, prefix="/api")
app.include_router(dados_fiscais_router, prefix="/api")
app.include_router(importacao_router, prefix="/api")
app.include_router(dashboard_router, prefix="/api")
