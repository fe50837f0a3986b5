"""
Data ingestion components for the food delivery analytics pipeline.
"""
import os
import logging
import traceback
import pandas as pd
from sqlalchemy.exc import SQLAlchemyError
from delivery_analytics.db.engine import create_session
from delivery_analytics.db.models import LOAD_ORDER
from delivery_analytics.transformation.joins import time_of_day_to_time
from delivery_analytics.transformation.quality import enforce_integrity
from delivery_analytics.transformation.snapshot import (
    Snapshot, normalize_frames, DATE_COLUMNS, TIME_COLUMNS, ID_COLUMNS, AMOUNT_COLUMNS
)

logger = logging.getLogger(__name__)

# Source file per table, in bulk load order
SOURCE_FILES = {
    'customers': 'customers.csv',
    'restaurants': 'restaurants.csv',
    'orders': 'orders.csv',
    'riders': 'riders.csv',
    'deliveries': 'deliveries.csv'
}

# Dates and times are parsed later, keep them as text here
SOURCE_DTYPES = {
    'customers': {'customer_name': 'str', 'reg_date': 'str'},
    'restaurants': {'restaurant_name': 'str', 'city': 'str', 'opening_hours': 'str'},
    'orders': {'order_item': 'str', 'order_date': 'str', 'order_time': 'str', 'order_status': 'str'},
    'riders': {'rider_name': 'str', 'sign_up': 'str'},
    'deliveries': {'delivery_status': 'str', 'delivery_time': 'str'}
}


def read_source_csv(file_path, table_name):
    """
    Read one source CSV file into a DataFrame.

    """
    try:
        logger.info(f"Loading data from {file_path} for {table_name}")

        # Check if file exists
        if not os.path.exists(file_path):
            raise FileNotFoundError(f"Source file not found: {file_path}")

        df = pd.read_csv(file_path, dtype=SOURCE_DTYPES.get(table_name))
        df = df.rename(columns=lambda x: x.strip() if isinstance(x, str) else x)

        logger.info(f"Loaded {len(df)} rows from {file_path}")

        missing_values = int(df.isnull().sum().sum())
        if missing_values > 0:
            logger.info(f"Found {missing_values} missing values in {file_path}")

        return df
    except Exception as e:
        logger.error(f"Failed to load {file_path}: {str(e)}")
        logger.error(traceback.format_exc())
        raise


def load_source_data(config):
    """
    Load all source CSV files in foreign-key order.

    Args:
        config: Configuration object

    Returns:
        dict: Dictionary of loaded DataFrames keyed by table name
    """
    data_frames = {}
    for table_name, _ in LOAD_ORDER:
        data_frames[table_name] = read_source_csv(
            config.get_input_path(SOURCE_FILES[table_name]),
            table_name
        )
    return data_frames


def _to_records(table_name, df):
    """Convert a normalised frame to dicts of Python values for insertion."""
    records = []
    for row in df.to_dict(orient='records'):
        record = {}
        for column, value in row.items():
            if column in TIME_COLUMNS:
                value = time_of_day_to_time(value)
            elif pd.isna(value):
                value = None
            elif column in DATE_COLUMNS:
                value = value.date()
            elif column in ID_COLUMNS:
                value = int(value)
            elif column in AMOUNT_COLUMNS:
                value = round(float(value), 2)
            record[column] = value
        records.append(record)
    return records


def clear_tables(session):
    """Delete all rows, children first."""
    for table_name, model in reversed(LOAD_ORDER):
        deleted = session.query(model).delete()
        logger.info(f"Deleted {deleted} rows from {table_name}")


def write_source_data(engine, data_frames):
    """
    Bulk load the five tables in foreign-key order, replacing existing rows.

    The data set is validated first; referential violations raise
    IntegrityError before anything is written. The whole load runs in one
    transaction.
    """
    frames = normalize_frames(data_frames)
    enforce_integrity(frames)

    session = create_session(engine)
    try:
        clear_tables(session)
        session.flush()

        for table_name, model in LOAD_ORDER:
            records = _to_records(table_name, frames[table_name])
            if records:
                session.execute(model.__table__.insert(), records)
            logger.info(f"Inserted {len(records)} rows into {table_name}")

        session.commit()
        return {table_name: len(frames[table_name]) for table_name, _ in LOAD_ORDER}
    except SQLAlchemyError as e:
        session.rollback()
        logger.error(f"Error during database load: {str(e)}")
        raise
    finally:
        session.close()


def load_snapshot_from_database(engine):
    """
    Read the five tables back and build a snapshot.
    """
    try:
        data_frames = {}
        for table_name, _ in LOAD_ORDER:
            data_frames[table_name] = pd.read_sql(f"SELECT * FROM {table_name}", engine)
            logger.info(f"Read {len(data_frames[table_name])} rows from {table_name}")

        return Snapshot.from_frames(data_frames)
    except Exception as e:
        logger.error(f"Failed to read snapshot from database: {str(e)}")
        logger.error(traceback.format_exc())
        raise


def load_snapshot_from_csv(config):
    """
    Read the source CSV files and build a snapshot without a database.
    """
    return Snapshot.from_frames(load_source_data(config))
