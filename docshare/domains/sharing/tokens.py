import secrets
import string

from docshare.core.config import settings

PUBLIC_TOKEN_ALPHABET = string.ascii_uppercase + string.ascii_lowercase + string.digits


def generate_public_token(length: int = None) -> str:
    """Короткий токен публичной ссылки из 62 буквенно-цифровых символов.

    При длине 8 пространство токенов около 62**8 (~2*10**14): достаточно,
    чтобы ссылку нельзя было угадать перебором, но это не самостоятельная
    граница безопасности.
    """
    if length is None:
        length = settings.public_token_length
    if length <= 0:
        raise ValueError("Token length must be positive")
    return "".join(secrets.choice(PUBLIC_TOKEN_ALPHABET) for _ in range(length))
