# INVOICER/backend/invoicer/config.py

import os
import logging
from dotenv import load_dotenv
from pathlib import Path

logger = logging.getLogger(__name__)

# Trouve le chemin absolu du dossier contenant ce fichier (invoicer/)
BASE_DIR = Path(__file__).parent.absolute()
env_path = BASE_DIR / '.env'

# Charge les variables depuis le fichier .env (les variables déjà définies gagnent)
if env_path.exists():
    load_dotenv(dotenv_path=env_path)
    logger.info(f"✅ Fichier .env chargé depuis: {env_path}")
else:
    logger.debug(f"Fichier .env absent ({env_path}), utilisation de l'environnement")

# ============================================
# CONFIGURATION ENVIRONNEMENT
# ============================================
ENVIRONMENT = os.getenv("ENVIRONMENT", "development")
DEBUG = os.getenv("DEBUG", "false").lower() == "true"

# ============================================
# CONFIGURATION BASE DE DONNÉES
# ============================================
DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./invoicer.db")
if ENVIRONMENT == "production" and DATABASE_URL.startswith("sqlite"):
    logger.warning("⚠️  SQLite utilisé en production, préférez PostgreSQL")

# ============================================
# CONFIGURATION JWT / AUTH
# ============================================
SECRET_KEY = os.getenv("SECRET_KEY", "change_this_secret_key_in_production")
if SECRET_KEY == "change_this_secret_key_in_production" and ENVIRONMENT == "production":
    raise ValueError("SECRET_KEY must be changed in production")

ALGORITHM = os.getenv("ALGORITHM", "HS256")
ACCESS_TOKEN_EXPIRE_MINUTES = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", "1440"))  # 24 heures par défaut

# Cookie de session (le client web s'authentifie par cookie, les clients API par header)
COOKIE_NAME = os.getenv("COOKIE_NAME", "invoicer_token")
COOKIE_SECURE = os.getenv("COOKIE_SECURE", str(ENVIRONMENT == "production")).lower() == "true"
COOKIE_SAMESITE = os.getenv("COOKIE_SAMESITE", "lax")

# ============================================
# CONFIGURATION CORS (Frontend)
# ============================================
ALLOWED_ORIGINS = os.getenv("ALLOWED_ORIGINS", "http://localhost:5173,http://localhost:3000").split(",")

# ============================================
# PAGINATION
# ============================================
DEFAULT_PAGE_SIZE = int(os.getenv("DEFAULT_PAGE_SIZE", "10"))
MAX_PAGE_SIZE = int(os.getenv("MAX_PAGE_SIZE", "100"))

# ============================================
# FACTURATION
# ============================================
CURRENCY = os.getenv("CURRENCY", "IDR")
# Nombre de tentatives d'allocation d'un numéro de facture en cas de collision
INVOICE_NUMBER_MAX_RETRIES = int(os.getenv("INVOICE_NUMBER_MAX_RETRIES", "5"))

# ============================================
# LOGGING
# ============================================
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

# ============================================
# FONCTIONS UTILITAIRES
# ============================================
def is_production():
    """Vérifie si on est en production"""
    return ENVIRONMENT == "production"
