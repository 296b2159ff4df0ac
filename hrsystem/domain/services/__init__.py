# Domain Services
from .candidacy import CandidacyEvent, CandidacyState, advance

__all__ = ["CandidacyEvent", "CandidacyState", "advance"]
