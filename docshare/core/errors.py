"""Ошибки ядра доступа и совместной работы.

Каждая ошибка наследуется от встроенного семейства исключений, которое
роутеры уже умеют переводить в HTTP-ответы.
"""
from typing import List, Optional


class DocumentNotAccessibleError(LookupError):
    """Документ не найден или недоступен вызывающему.

    Оба случая намеренно неразличимы, чтобы не подтверждать существование
    документа тому, у кого нет к нему доступа.
    """

    def __init__(self, document_id: Optional[str] = None):
        self.document_id = document_id
        super().__init__("Document not found or not accessible")


class AccessDeniedError(PermissionError):
    """Операция запрещена для роли вызывающего"""


class CommentValidationError(ValueError):
    """Некорректный запрос к комментариям, отклоняется до любой записи"""


class SaveTimeoutError(TimeoutError):
    """Запись не уложилась в отведенное время; клиент может повторить сохранение"""

    def __init__(self, document_id: str, timeout: float):
        self.document_id = document_id
        self.timeout = timeout
        super().__init__(f"Save timeout after {timeout:g} seconds")


class SharingSyncError(RuntimeError):
    """Основная запись прошла, но часть денормализованных представлений не обновилась.

    Откат не выполняется: повтор той же операции приводит данные в согласованное состояние.
    """

    def __init__(self, document_id: str, failed_recipients: List[str]):
        self.document_id = document_id
        self.failed_recipients = failed_recipients
        super().__init__(
            f"Sharing for document {document_id} partially applied, "
            f"failed recipients: {', '.join(failed_recipients) or '-'}"
        )


class CommentNotFoundError(LookupError):
    """Комментарий не найден в документе"""

    def __init__(self, comment_id: str):
        self.comment_id = comment_id
        super().__init__("Comment not found")
