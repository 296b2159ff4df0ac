# Security Package
from .crypto import CryptoService
from .session_issuer import SessionIssuer

__all__ = ["CryptoService", "SessionIssuer"]
