import logging

from sqlalchemy import inspect
from sqlalchemy.engine import Engine

# Registers every model on Base.metadata
from socialfeed.db.base import Base

logger = logging.getLogger("socialfeed")


def create_all_tables(engine: Engine) -> bool:
    """Create any missing tables. Schema changes are not handled here."""
    try:
        existing_tables = inspect(engine).get_table_names()

        Base.metadata.create_all(bind=engine)

        new_tables = set(inspect(engine).get_table_names()) - set(existing_tables)
        if new_tables:
            logger.info(f"Created new tables: {new_tables}")

        return True
    except Exception as e:
        logger.error(f"Error creating database tables: {e}")
        return False


def drop_all_tables(engine: Engine) -> None:
    Base.metadata.drop_all(bind=engine)
    logger.info("Dropped all tables")
