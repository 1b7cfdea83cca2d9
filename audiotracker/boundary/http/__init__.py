"""
HTTP boundary modules.

Exports: HttpJobStatusClient
"""

from .audio_api_client import HttpJobStatusClient

__all__ = ["HttpJobStatusClient"]
