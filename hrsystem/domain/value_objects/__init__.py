# Domain Value Objects
from .credentials import Credentials
from .session import Session

__all__ = ["Credentials", "Session"]
