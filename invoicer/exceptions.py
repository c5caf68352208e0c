# INVOICER/backend/invoicer/exceptions.py
"""
Erreurs métier de l'application.

Les services lèvent ces exceptions ; seule la couche HTTP (voir main.py)
les traduit en codes de statut, à partir de leur `kind` et jamais en
cherchant des mots dans le message.
"""
import enum


class ErrorKind(str, enum.Enum):
    VALIDATION = "validation"
    NOT_FOUND = "not_found"
    AUTH = "auth"
    FORBIDDEN = "forbidden"
    CONFLICT = "conflict"


# Correspondance kind -> statut HTTP
STATUS_CODES = {
    ErrorKind.VALIDATION: 400,
    ErrorKind.NOT_FOUND: 404,
    ErrorKind.AUTH: 401,
    ErrorKind.FORBIDDEN: 403,
    ErrorKind.CONFLICT: 409,
}


class DomainError(Exception):
    """Erreur métier avec un message lisible par l'utilisateur"""

    kind = ErrorKind.VALIDATION

    def __init__(self, message: str, kind: ErrorKind = None):
        super().__init__(message)
        self.message = message
        if kind is not None:
            self.kind = kind

    @property
    def status_code(self) -> int:
        return STATUS_CODES[self.kind]


class ValidationError(DomainError):
    """Entrée invalide, doublon ou règle métier violée (400)"""
    kind = ErrorKind.VALIDATION


class NotFoundError(DomainError):
    """Entité référencée absente (404)"""
    kind = ErrorKind.NOT_FOUND


class AuthError(DomainError):
    """Identifiants absents ou invalides (401)"""
    kind = ErrorKind.AUTH


class AuthorizationError(DomainError):
    """Rôle insuffisant (403)"""
    kind = ErrorKind.FORBIDDEN


class ConflictError(DomainError):
    """Collision persistante (ex: numéro de facture après plusieurs tentatives)"""
    kind = ErrorKind.CONFLICT
