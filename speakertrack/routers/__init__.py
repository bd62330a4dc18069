"""
FastAPI routers for the speaker tracking service.
"""

from speakertrack.routers import health, speakers

__all__ = ["health", "speakers"]
