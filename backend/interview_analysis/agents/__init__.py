"""
Results Analysis Agents

One node per analysis step. Each node degrades to documented defaults
instead of raising.
"""

from .response_analyzer import response_analyzer_node
from .resume_analyzer import resume_analyzer_node
from .job_fit_analyzer import job_fit_analyzer_node
from .preparation_analyzer import preparation_analyzer_node
from .coach import coach_node

__all__ = [
    "response_analyzer_node",
    "resume_analyzer_node",
    "job_fit_analyzer_node",
    "preparation_analyzer_node",
    "coach_node",
]
