"""Route modules."""
from knowcode.routes import admin, exam

__all__ = ["admin", "exam"]
