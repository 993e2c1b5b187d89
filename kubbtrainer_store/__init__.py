from .db import Database
from .session_manager import SessionManager

__all__ = ["Database", "SessionManager"]
