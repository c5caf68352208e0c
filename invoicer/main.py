# INVOICER/backend/invoicer/main.py

from contextlib import asynccontextmanager
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from invoicer.routes import auth, users, customers, products, invoices, business_profile
from invoicer.config import ALLOWED_ORIGINS, LOG_LEVEL, ENVIRONMENT, is_production
from invoicer.database import check_connection, create_tables
from invoicer.exceptions import DomainError, ErrorKind
import logging
import datetime

# Configuration du logging
logging.basicConfig(level=LOG_LEVEL)
logger = logging.getLogger(__name__)

@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("🚀 Démarrage de l'API Invoicer...")

    if check_connection():
        logger.info("✅ Connexion à la base de données établie")
        # Création des tables si elles n'existent pas
        create_tables()
    else:
        logger.error("❌ Impossible de se connecter à la base de données")

    yield

    logger.info("👋 Arrêt de l'API Invoicer")

app = FastAPI(
    title="Invoicer API",
    description="Facturation pour petites entreprises : clients, produits, factures",
    version="1.0.0",
    # Documentation interactive désactivée en production
    docs_url=None if is_production() else "/docs",
    redoc_url=None if is_production() else "/redoc",
    lifespan=lifespan,
    openapi_tags=[
        {"name": "auth", "description": "Connexion, inscription et installation initiale"},
        {"name": "users", "description": "Gestion des comptes (administrateurs)"},
        {"name": "customers", "description": "Clients"},
        {"name": "products", "description": "Catalogue de produits"},
        {"name": "invoices", "description": "Factures, numérotation et statuts"},
        {"name": "business-profile", "description": "Profil unique de l'entreprise"}
    ]
)

# Configuration CORS pour le client web (authentifié par cookie)
app.add_middleware(
    CORSMiddleware,
    allow_origins=ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization", "Cookie"],
)

# ============================================
# TRADUCTION DES ERREURS EN RÉPONSES HTTP
# ============================================
def error_response(status_code: int, message: str, headers: dict = None) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"message": message, "error": True},
        headers=headers
    )

@app.exception_handler(DomainError)
async def domain_error_handler(request: Request, exc: DomainError):
    if exc.kind in (ErrorKind.AUTH, ErrorKind.FORBIDDEN):
        logger.warning(f"{request.method} {request.url.path} refusé: {exc.message}")
    else:
        logger.info(f"{request.method} {request.url.path} -> {exc.status_code}: {exc.message}")
    headers = {"WWW-Authenticate": "Bearer"} if exc.kind == ErrorKind.AUTH else None
    return error_response(exc.status_code, exc.message, headers)

@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    if errors:
        first = errors[0]
        location = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
        message = f"{location}: {first.get('msg')}" if location else first.get("msg")
    else:
        message = "Données invalides"
    return error_response(400, message)

@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException):
    return error_response(exc.status_code, str(exc.detail), getattr(exc, "headers", None))

@app.exception_handler(Exception)
async def unexpected_error_handler(request: Request, exc: Exception):
    # Les détails restent dans les logs, jamais dans la réponse
    logger.error(f"Erreur inattendue sur {request.method} {request.url.path}: {exc}", exc_info=True)
    return error_response(500, "Une erreur interne est survenue, veuillez réessayer")

# Inclusion des routeurs
app.include_router(auth.router)
app.include_router(users.router)
app.include_router(customers.router)
app.include_router(products.router)
app.include_router(invoices.router)
app.include_router(business_profile.router)

@app.get("/")
def root():
    """
    Racine de l'API - Informations générales
    """
    return {
        "success": True,
        "message": "Invoicer backend opérationnel 🚀",
        "version": app.version,
        "environment": ENVIRONMENT,
        "documentation": {
            "swagger": app.docs_url,
            "redoc": app.redoc_url
        },
        "endpoints": {
            "auth": "/auth",
            "users": "/users",
            "customers": "/customers",
            "products": "/products",
            "invoices": "/invoices",
            "business_profile": "/business-profile"
        },
        "health_check": "/health"
    }

@app.get("/health")
def health_check():
    """
    Endpoint de santé pour le monitoring
    """
    db_status = check_connection()

    return {
        "status": "healthy" if db_status else "unhealthy",
        "database": "connected" if db_status else "disconnected",
        "version": app.version,
        "timestamp": datetime.datetime.now().isoformat()
    }
