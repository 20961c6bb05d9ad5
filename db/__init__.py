"""db package exports for the project's database layer.

Re-exports commonly used symbols to simplify imports in scripts
(e.g. `from db import Base`).
"""
from .models import Base, JobVariant  # noqa: F401
from .session import get_session, reconfigure  # noqa: F401

__all__ = ["Base", "JobVariant", "get_session", "reconfigure"]
