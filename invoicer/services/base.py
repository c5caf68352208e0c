# INVOICER/backend/invoicer/services/base.py : socle commun des services

import math
import logging
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, Query
from invoicer.exceptions import ConflictError

logger = logging.getLogger(__name__)

class BaseService:
    """Service adossé à une session SQLAlchemy fournie par la requête"""

    def __init__(self, db: Session):
        self.db = db

    def _commit(self, conflict_message: str = "Conflit avec une donnée existante"):
        """
        Valide la transaction courante en une seule fois.
        Toute erreur annule la transaction : rien de partiel n'est persisté.
        """
        try:
            self.db.commit()
        except IntegrityError as e:
            self.db.rollback()
            logger.warning(f"Contrainte d'intégrité violée: {e.orig}")
            raise ConflictError(conflict_message)
        except Exception:
            self.db.rollback()
            raise

    @staticmethod
    def _paginate(query: Query, page: int, limit: int) -> dict:
        """Applique offset/limit et construit l'enveloppe {data, meta}"""
        total = query.count()
        rows = query.offset((page - 1) * limit).limit(limit).all()
        return {
            "data": rows,
            "meta": {
                "total": total,
                "page": page,
                "limit": limit,
                "total_pages": math.ceil(total / limit) if limit else 0
            }
        }
