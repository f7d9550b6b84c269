from authserver.models.client import Client
from authserver.models.token import Token, TokenType

__all__ = [
    "Client",
    "Token",
    "TokenType",
]
