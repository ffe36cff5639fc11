# create_tables.py
"""
Create (or with --drop, recreate) every table in DATABASE_URL
"""

import argparse
import logging

from teamboard.database import Base, engine
import teamboard.models  # noqa: F401  (registers all tables on Base.metadata)

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


def create_tables(drop: bool = False):
    """Create all tables"""
    if drop:
        Base.metadata.drop_all(bind=engine)
        logger.info("Dropped existing tables")

    Base.metadata.create_all(bind=engine)
    logger.info(f"Created tables: {', '.join(sorted(Base.metadata.tables))}")


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("--drop", action="store_true", help="drop existing tables first")
    args = parser.parse_args()
    create_tables(drop=args.drop)
