# canvaschat/main.py
from __future__ import annotations

"""
Entry point for `uvicorn canvaschat.main:app`.
"""

from canvaschat.api import app  # re-export the FastAPI app

__all__ = ["app"]
