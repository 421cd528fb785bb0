"""
API 路由包
"""
from .bot_audit import router as bot_audit_router

__all__ = [
    "bot_audit_router",
]
