"""Overrides domain - containers, agent status, schedule validation and updates"""

from .router import router

__all__ = ["router"]
