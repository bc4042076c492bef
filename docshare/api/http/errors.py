from fastapi import HTTPException, status

from docshare.core.errors import (
    AccessDeniedError, CommentNotFoundError, CommentValidationError,
    DocumentNotAccessibleError, SaveTimeoutError, SharingSyncError
)

# Ошибки домена, которые роутеры переводят в HTTP-ответы
DOMAIN_ERRORS = (
    DocumentNotAccessibleError,
    CommentNotFoundError,
    AccessDeniedError,
    CommentValidationError,
    SaveTimeoutError,
    SharingSyncError,
)


def to_http_exception(error: Exception) -> HTTPException:
    """Преобразование ошибки домена в HTTPException"""
    if isinstance(error, (DocumentNotAccessibleError, CommentNotFoundError)):
        return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(error))
    
    if isinstance(error, AccessDeniedError):
        return HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(error))
    
    if isinstance(error, CommentValidationError):
        return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(error))
    
    # Клиент сохраняет черновик локально и предлагает повторить
    if isinstance(error, SaveTimeoutError):
        return HTTPException(
            status_code=status.HTTP_504_GATEWAY_TIMEOUT,
            detail={"message": str(error), "retriable": True}
        )
    
    if isinstance(error, SharingSyncError):
        return HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail={
                "message": "Sharing settings were saved but some recipients were not updated",
                "failed_recipients": error.failed_recipients,
                "retriable": True
            }
        )
    
    return HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Internal error")
