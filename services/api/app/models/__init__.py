"""SQLAlchemy ORM models.

Models represent database tables:
- ranks: running average score per (project, item)
- users: registered users
"""

from app.models.rank import RankRecord
from app.models.user import UserRecord

__all__ = ["RankRecord", "UserRecord"]
