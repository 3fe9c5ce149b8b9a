"""
Job runners for the client completeness feature.
"""

from .completeness_scan_job import run_completeness_scan_job

__all__ = ["run_completeness_scan_job"]
