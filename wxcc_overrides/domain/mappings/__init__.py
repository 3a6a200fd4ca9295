"""Mappings domain - human-readable names and working hours flags for WxCC overrides"""

from .router import router

__all__ = ["router"]
