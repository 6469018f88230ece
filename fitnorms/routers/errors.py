# fitnorms/routers/errors.py
from fastapi import HTTPException, status

from fitnorms.utils.errors import (
    ContractError,
    InstanceAlreadyExistsError,
    NormsError,
    NotFoundError,
)


def to_http(e: NormsError) -> HTTPException:
    """Ошибки ядра → HTTP-коды для вызывающей стороны."""
    if isinstance(e, NotFoundError):
        return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    if isinstance(e, InstanceAlreadyExistsError):
        return HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))
    if isinstance(e, ContractError):
        return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    return HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(e))
