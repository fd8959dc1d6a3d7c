import logging

from sqlalchemy.engine import Engine

from classroom.db.base import Base
# Imported so every table is registered on Base.metadata
from classroom.models import announcement, group, submission, task, user  # noqa: F401

logger = logging.getLogger(__name__)

def init_db(engine: Engine) -> None:
    """Create any missing tables"""
    Base.metadata.create_all(bind=engine)
    logger.info("Tables created: %s", ", ".join(sorted(Base.metadata.tables)))
