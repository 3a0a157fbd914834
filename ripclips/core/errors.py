# ripclips/core/errors.py
"""
Errores de dominio.

Los servicios y el repositorio lanzan estas excepciones; los routers las
atrapan, hacen rollback de la sesión y las convierten en HTTPException con
`to_http()`. Así nunca queda una mutación a medias visible para el usuario.
"""
from fastapi import HTTPException, status


class ClipError(Exception):
    """Base de todos los errores del dominio de clips."""

    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(self, detail: str):
        super().__init__(detail)
        self.detail = detail


class ValidationError(ClipError):
    """Filtro, orden o página inválidos."""

    status_code = status.HTTP_400_BAD_REQUEST


class NotFoundError(ClipError):
    status_code = status.HTTP_404_NOT_FOUND


class StatusTransitionError(ClipError):
    """El clip ya fue revisado: approved/rejected son terminales."""

    status_code = status.HTTP_409_CONFLICT


class TransientStoreError(ClipError):
    """La base de datos no respondió (conexión caída, timeout...)."""

    status_code = status.HTTP_503_SERVICE_UNAVAILABLE


def to_http(exc: ClipError) -> HTTPException:
    return HTTPException(status_code=exc.status_code, detail=exc.detail)
