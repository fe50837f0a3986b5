"""
Data quality checks for the food delivery analytics pipeline.
"""
import logging
import pandas as pd
import traceback
from delivery_analytics.exceptions import IntegrityError
from delivery_analytics.transformation.joins import is_time_of_day

logger = logging.getLogger(__name__)

# Primary keys for each table
PRIMARY_KEYS = {
    'customers': ['customer_id'],
    'restaurants': ['restaurant_id'],
    'orders': ['order_id'],
    'riders': ['rider_id'],
    'deliveries': ['delivery_id']
}

# Foreign key relationships; null foreign keys are allowed as in the DDL
FOREIGN_KEYS = [
    {'table': 'orders', 'key': 'customer_id', 'ref_table': 'customers', 'ref_key': 'customer_id'},
    {'table': 'orders', 'key': 'restaurant_id', 'ref_table': 'restaurants', 'ref_key': 'restaurant_id'},
    {'table': 'deliveries', 'key': 'order_id', 'ref_table': 'orders', 'ref_key': 'order_id'},
    {'table': 'deliveries', 'key': 'rider_id', 'ref_table': 'riders', 'ref_key': 'rider_id'}
]

# Columns declared NOT NULL
REQUIRED_COLUMNS = {
    'customers': ['customer_id', 'customer_name'],
    'restaurants': ['restaurant_id', 'restaurant_name'],
    'riders': ['rider_id', 'rider_name'],
    'orders': ['order_id', 'order_date', 'order_time', 'total_amount'],
    'deliveries': ['delivery_id']
}

STATUS_COLUMNS = {
    'orders': 'order_status',
    'deliveries': 'delivery_status'
}

DEFAULT_STATUS = 'Pending'


def run_data_quality_checks(data_frames):
    """
    Run a series of data quality checks on the input data.

    """
    try:
        logger.info("Running data quality checks")

        quality_results = {}

        # Run individual checks
        quality_results['missing_values'] = check_missing_values(data_frames)
        quality_results['duplicate_keys'] = check_duplicate_keys(data_frames)
        quality_results['value_ranges'] = check_value_ranges(data_frames)
        quality_results['referential_integrity'] = check_referential_integrity(data_frames)

        total_issues = count_issues(quality_results)
        if total_issues > 0:
            logger.warning(f"Found a total of {total_issues} data quality issues")
        else:
            logger.info("All data quality checks passed")

        return quality_results
    except Exception as e:
        logger.error(f"Error running data quality checks: {str(e)}")
        logger.error(traceback.format_exc())
        raise


def count_issues(quality_results):
    """
    Count blocking issues: duplicate keys, invalid values and orphaned rows.
    """
    total = 0
    for result in quality_results.get('duplicate_keys', {}).values():
        total += result.get('duplicate_count', 0)
    for column_results in quality_results.get('value_ranges', {}).values():
        for result in column_results.values():
            total += result.get('invalid_count', 0)
    for result in quality_results.get('referential_integrity', {}).values():
        total += result.get('orphaned_count', 0)
    return total


def check_missing_values(data_frames):
    """
    Check for missing values in each DataFrame.
    """
    results = {}

    for table_name, df in data_frames.items():
        missing_by_column = df.isnull().sum()
        total_missing = int(missing_by_column.sum())

        # Only include columns with missing values
        missing_columns = {
            col: int(count) for col, count in missing_by_column[missing_by_column > 0].items()
        }

        results[table_name] = {
            'total_missing': total_missing,
            'missing_columns': missing_columns
        }

        if total_missing > 0:
            logger.info(f"Table '{table_name}' has {total_missing} missing values")
            for col, count in missing_columns.items():
                logger.info(f"  - Column '{col}': {count} missing values")

    return results


def check_duplicate_keys(data_frames):
    """
    Check for duplicate primary keys, and for orders with more than one delivery.
    """
    results = {}

    for table_name, df in data_frames.items():
        if table_name not in PRIMARY_KEYS:
            continue

        pk_columns = PRIMARY_KEYS[table_name]
        if not all(col in df.columns for col in pk_columns):
            raise IntegrityError(
                f"Table '{table_name}' is missing primary key columns {pk_columns}"
            )

        duplicates = df[df.duplicated(subset=pk_columns, keep=False)]
        duplicate_count = len(duplicates)

        results[table_name] = {
            'duplicate_count': duplicate_count,
            'duplicate_keys': duplicates[pk_columns].head(10).values.tolist() if duplicate_count > 0 else []
        }

        if duplicate_count > 0:
            logger.warning(f"Table '{table_name}' has {duplicate_count} duplicate primary keys")

    # An order has at most one delivery
    deliveries = data_frames.get('deliveries')
    if deliveries is not None and 'order_id' in deliveries.columns:
        with_order = deliveries.dropna(subset=['order_id'])
        repeated = with_order[with_order.duplicated(subset=['order_id'], keep=False)]
        results['deliveries.order_id'] = {
            'duplicate_count': len(repeated),
            'duplicate_keys': repeated['order_id'].drop_duplicates().head(10).tolist()
        }
        if len(repeated) > 0:
            logger.warning(f"Found {len(repeated)} deliveries sharing an order_id")

    return results


def _is_positive_amount(value):
    if pd.isna(value):
        return True
    try:
        return float(value) > 0
    except (TypeError, ValueError):
        return False


def check_value_ranges(data_frames):
    """
    Check for values outside of expected ranges and missing required values.

    Range checks let nulls through; a null in a NOT NULL column is counted
    against that column once.
    """
    results = {}

    range_checks = {
        'orders': {
            'total_amount': _is_positive_amount,
            'order_time': is_time_of_day,
        },
        'deliveries': {
            'delivery_time': is_time_of_day,
        }
    }

    for table_name, df in data_frames.items():
        table_results = {}

        for column, condition in range_checks.get(table_name, {}).items():
            if column not in df.columns:
                continue
            invalid_mask = ~df[column].apply(condition).astype(bool)
            invalid_count = int(invalid_mask.sum())

            table_results[column] = {
                'invalid_count': invalid_count,
                'invalid_examples': df.loc[invalid_mask, column].head(5).tolist() if invalid_count > 0 else []
            }

            if invalid_count > 0:
                logger.warning(f"Table '{table_name}' has {invalid_count} invalid values in column '{column}'")

        for column in REQUIRED_COLUMNS.get(table_name, []):
            if column not in df.columns:
                table_results[column] = {'invalid_count': len(df), 'invalid_examples': []}
                logger.warning(f"Table '{table_name}' is missing required column '{column}'")
                continue
            null_count = int(df[column].isnull().sum())
            column_result = table_results.setdefault(column, {'invalid_count': 0, 'invalid_examples': []})
            column_result['invalid_count'] += null_count
            if null_count > 0:
                logger.warning(f"Table '{table_name}' has {null_count} nulls in required column '{column}'")

        results[table_name] = table_results

    return results


def check_referential_integrity(data_frames):
    """
    Check referential integrity between tables.
    """
    results = {}

    for fk in FOREIGN_KEYS:
        relationship = f"{fk['table']}.{fk['key']} -> {fk['ref_table']}.{fk['ref_key']}"

        if fk['table'] not in data_frames:
            continue
        if fk['ref_table'] not in data_frames:
            raise IntegrityError(f"Cannot check {relationship}: table '{fk['ref_table']}' not loaded")

        child = data_frames[fk['table']]
        parent = data_frames[fk['ref_table']]
        if fk['key'] not in child.columns or fk['ref_key'] not in parent.columns:
            raise IntegrityError(f"Cannot check {relationship}: missing column")

        fk_values = set(child[fk['key']].dropna().unique())
        ref_values = set(parent[fk['ref_key']].dropna().unique())

        # Foreign keys without matching reference keys
        orphaned = fk_values - ref_values
        orphaned_count = len(orphaned)

        results[relationship] = {
            'orphaned_count': orphaned_count,
            'orphaned_examples': sorted(orphaned)[:10] if orphaned_count > 0 else []
        }

        if orphaned_count > 0:
            logger.warning(
                f"Referential integrity issue: {orphaned_count} values in "
                f"{fk['table']}.{fk['key']} have no matching {fk['ref_table']}.{fk['ref_key']}"
            )

    return results


def enforce_integrity(data_frames):
    """
    Reject the data set if any key is duplicated, any required value is
    missing or invalid, or any foreign key is orphaned.

    Returns the quality results when everything passes.
    """
    quality_results = run_data_quality_checks(data_frames)

    violations = {}
    for table, result in quality_results['duplicate_keys'].items():
        if result.get('duplicate_count', 0) > 0:
            violations[f"duplicate {table}"] = result['duplicate_keys']
    for table, column_results in quality_results['value_ranges'].items():
        for column, result in column_results.items():
            if result.get('invalid_count', 0) > 0:
                violations[f"invalid {table}.{column}"] = result['invalid_examples']
    for relationship, result in quality_results['referential_integrity'].items():
        if result.get('orphaned_count', 0) > 0:
            violations[relationship] = result['orphaned_examples']

    if violations:
        summary = '; '.join(f"{name}: {examples}" for name, examples in violations.items())
        raise IntegrityError(f"Data set rejected: {summary}", violations)

    return quality_results


def apply_data_fixes(data_frames):
    """
    Apply column defaults the schema declares.

    Strips whitespace from column names and fills missing order and
    delivery statuses with 'Pending'. Returns new DataFrames.
    """
    fixed_data = {}

    for table, df in data_frames.items():
        df = df.rename(columns=lambda x: x.strip() if isinstance(x, str) else x)

        status_column = STATUS_COLUMNS.get(table)
        if status_column is not None:
            if status_column not in df.columns:
                df = df.assign(**{status_column: DEFAULT_STATUS})
            else:
                missing = int(df[status_column].isnull().sum())
                if missing > 0:
                    logger.info(f"Defaulting {missing} missing '{table}.{status_column}' values to '{DEFAULT_STATUS}'")
                    df = df.assign(**{status_column: df[status_column].fillna(DEFAULT_STATUS)})

        fixed_data[table] = df

    return fixed_data
