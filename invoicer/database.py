# INVOICER/backend/invoicer/database.py

import logging
import sqlite3

from sqlalchemy import create_engine, event, text
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base, sessionmaker

from invoicer.config import DATABASE_URL, DEBUG

logger = logging.getLogger(__name__)


# SQLite n'applique les clés étrangères que si on le demande à chaque connexion
@event.listens_for(Engine, "connect")
def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
    if isinstance(dbapi_connection, sqlite3.Connection):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


def build_engine(url: str):
    """Crée un moteur adapté au type de base (SQLite ou serveur SQL)"""
    if url.startswith("sqlite"):
        return create_engine(
            url,
            connect_args={"check_same_thread": False},
            echo=DEBUG
        )
    return create_engine(
        url,
        pool_size=5,  # Nombre de connexions permanentes
        max_overflow=10,  # Connexions supplémentaires temporaires
        pool_pre_ping=True,  # Vérifie que la connexion est vivante avant utilisation
        echo=DEBUG  # DEBUG=true affiche les requêtes SQL dans la console
    )


# Création de la connexion à la base de données
try:
    engine = build_engine(DATABASE_URL)
    logger.info("✅ Moteur de base de données initialisé")
except Exception as e:
    logger.error(f"❌ Erreur de connexion à la base de données: {e}")
    raise

# Session pour interagir avec la base
SessionLocal = sessionmaker(
    autocommit=False,
    autoflush=False,
    bind=engine
)

# Base pour créer les modèles (tables)
Base = declarative_base()

# Dependency pour FastAPI
def get_db():
    """
    Dépendance FastAPI pour obtenir une session de base de données.
    À utiliser dans les routes avec: db: Session = Depends(get_db)
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()

def create_tables(bind=None):
    """Crée toutes les tables définies dans les modèles"""
    # Enregistre les modèles sur Base.metadata
    from invoicer.models import models  # noqa: F401
    Base.metadata.create_all(bind=bind or engine)
    logger.info("✅ Tables créées/vérifiées avec succès")

def drop_tables(bind=None):
    """Supprime toutes les tables (UTILISER AVEC PRÉCAUTION)"""
    Base.metadata.drop_all(bind=bind or engine)
    logger.warning("⚠️ Toutes les tables ont été supprimées")

def check_connection():
    """Vérifie que la connexion à la base fonctionne"""
    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
        return True
    except Exception as e:
        logger.error(f"❌ Erreur de connexion: {e}")
        return False
