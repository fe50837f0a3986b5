"""
Data loading components for the food delivery analytics pipeline.
"""
import logging
import traceback
import os

logger = logging.getLogger(__name__)

REPORT_TABLE_PREFIX = 'report_'


def load_report_tables(engine, results):
    """
    Write each report DataFrame to a `report_<name>` table, replacing
    previous contents.

    Args:
        engine: SQLAlchemy engine
        results (dict): report name -> DataFrame

    Returns:
        dict: table name -> rows written
    """
    try:
        logger.info(f"Loading {len(results)} reports to report tables")

        written = {}
        for name, df in results.items():
            table_name = f"{REPORT_TABLE_PREFIX}{name}"
            written[table_name] = _load_table(engine, df, table_name)

        logger.info("Report loading completed successfully")
        return written
    except Exception as e:
        logger.error(f"Error in report loading: {str(e)}")
        logger.error(traceback.format_exc())
        raise


def _load_table(engine, df, table_name):
    """
    Replace a table with the contents of a DataFrame.
    """
    if df is None:
        logger.warning(f"No data to load for table {table_name}")
        return 0

    if len(df) == 0:
        logger.warning(f"Report for table {table_name} is empty")

    df.to_sql(table_name, engine, if_exists='replace', index=False)
    logger.info(f"Successfully loaded {len(df)} rows to {table_name}")
    return len(df)


def export_results_to_csv(results, output_dir):
    """
    Export report DataFrames to CSV files.

    """
    try:
        # Create output directory if it doesn't exist
        if not os.path.exists(output_dir):
            os.makedirs(output_dir)

        exported_files = {}

        # Export each DataFrame to CSV, empty reports keep their header
        for name, df in results.items():
            if df is None:
                continue
            file_path = os.path.join(output_dir, f"{name}.csv")
            df.to_csv(file_path, index=False)
            exported_files[name] = file_path
            logger.info(f"Exported {len(df)} rows to {file_path}")

        return exported_files
    except Exception as e:
        logger.error(f"Error exporting results to CSV: {str(e)}")
        logger.error(traceback.format_exc())
        raise
