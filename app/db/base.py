# ============================================================================
# FILE: app/db/base.py
# ============================================================================
from sqlalchemy.orm import declarative_base

Base = declarative_base()

def import_models() -> None:
    """Import every model module so Base.metadata knows all tables"""
    from app.db.models import user, catalog, playlist  # noqa: F401
