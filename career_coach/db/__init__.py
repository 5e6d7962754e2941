"""Database utilities for Career Coach."""

from .base import Base
from .session import (
    SessionManager,
    build_session_factory,
    dispose_engine,
    get_engine,
    get_session_factory,
    session_scope,
    transaction_scope,
)

__all__ = [
    "Base",
    "SessionManager",
    "build_session_factory",
    "dispose_engine",
    "get_engine",
    "get_session_factory",
    "session_scope",
    "transaction_scope",
]
