"""
Session helpers shared by the repositories.
"""

from sqlalchemy.exc import UnboundExecutionError
from sqlalchemy.orm import Session


def get_dialect_name(session: Session, default: str = "sqlite") -> str:
    """
    Name of the dialect the session is bound to.

    Parallel conflict checks are only enabled off SQLite, so an unbound
    session reports ``default``.
    """
    try:
        bind = session.get_bind()
    except UnboundExecutionError:
        return default
    return bind.dialect.name or default
