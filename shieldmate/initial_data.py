from loguru import logger
from sqlmodel import Session

from shieldmate.database.database import engine, create_db_and_tables
from shieldmate.database.init_db import init_db


def init() -> None:
    """
    Create the database schema and seed the super admin and starter catalogue.
    """
    create_db_and_tables()
    with Session(engine) as session:
        init_db(session)


def main() -> None:
    logger.info("Creating initial data")
    init()
    logger.info("Initial data created")


if __name__ == "__main__":
    main()
