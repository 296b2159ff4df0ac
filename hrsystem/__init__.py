"""
HR System - Recruitment workflow engine.

Tracks job postings and candidates through the hiring pipeline.
"""

__version__ = "0.1.0"
