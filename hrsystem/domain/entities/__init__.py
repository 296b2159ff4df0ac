# Domain Entities
from .job import JobPosting, JobState
from .candidate import Candidate
from .application import Application

__all__ = ["JobPosting", "JobState", "Candidate", "Application"]
