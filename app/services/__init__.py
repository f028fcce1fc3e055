"""Service layer exports."""

from .credentials import CredentialIssuer, SecretsCredentialIssuer
from .token_cipher import TokenCipherService

__all__ = [
    "CredentialIssuer",
    "SecretsCredentialIssuer",
    "TokenCipherService",
]
