"""
Database connection handling for the food delivery analytics pipeline.
"""
import logging
from sqlalchemy import create_engine, event
from sqlalchemy.engine import URL
from sqlalchemy.orm import sessionmaker
from delivery_analytics.config import Config

logger = logging.getLogger(__name__)

# [DATABASE] type -> SQLAlchemy driver name
DRIVERS = {
    'sqlite': 'sqlite',
    'postgres': 'postgresql+psycopg2',
    'postgresql': 'postgresql+psycopg2',
    'mysql': 'mysql+pymysql'
}


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def build_url(db_config):
    """Build the connection URL for a [DATABASE] section."""
    db_type = db_config['type']
    if db_type not in DRIVERS:
        raise ValueError(f"Unsupported database type: {db_type}")

    if db_type == 'sqlite':
        return URL.create(DRIVERS[db_type], database=db_config['name'])

    return URL.create(
        DRIVERS[db_type],
        username=db_config['user'] or None,
        password=db_config['password'] or None,
        host=db_config['host'],
        port=int(db_config['port']) if db_config['port'] else None,
        database=db_config['name']
    )


def create_db_engine(config=None):
    """
    Create a SQLAlchemy engine from the [DATABASE] section.
    """
    try:
        config = config or Config()
        db_config = config.get_database_config()

        engine = create_engine(build_url(db_config))

        # SQLite only enforces FOREIGN KEY clauses when asked to, per connection
        if engine.dialect.name == 'sqlite':
            event.listen(engine, 'connect', _enable_sqlite_foreign_keys)

        logger.info(f"Database engine created for {db_config['type']}")
        return engine
    except Exception as e:
        logger.error(f"Failed to create database engine: {str(e)}")
        raise


def create_session(engine):
    """Open an ORM session bound to `engine`."""
    return sessionmaker(bind=engine)()


def init_db(engine, base):
    """
    Create any missing tables of `base`.
    """
    base.metadata.create_all(engine)
    logger.info(f"Database schema ready: {', '.join(base.metadata.tables)}")
