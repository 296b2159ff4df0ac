# Use Cases Package
from .results import OperationResult, Outcome
from .credential_directory import CredentialDirectory
from .job_registry import JobRegistry
from .hr_system import HRSystem

__all__ = ["OperationResult", "Outcome", "CredentialDirectory", "JobRegistry", "HRSystem"]
