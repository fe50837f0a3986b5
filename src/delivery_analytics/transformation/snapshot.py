"""
Immutable snapshot of the five delivery tables.

A snapshot is built once from raw DataFrames: column types are normalised,
referential integrity is enforced and the order join index is computed.
Reports receive the snapshot explicitly and only ever see copies of its
frames, so any number of them can read the same snapshot at once.
"""
import logging
import pandas as pd
from delivery_analytics.exceptions import IntegrityError
from delivery_analytics.transformation.joins import is_missing_time, join_order_details, to_time_of_day
from delivery_analytics.transformation.quality import apply_data_fixes, enforce_integrity

logger = logging.getLogger(__name__)

# Columns kept for each table, in DDL order
SCHEMA = {
    'customers': ['customer_id', 'customer_name', 'reg_date'],
    'restaurants': ['restaurant_id', 'restaurant_name', 'city', 'opening_hours'],
    'orders': ['order_id', 'customer_id', 'restaurant_id', 'order_item', 'order_date',
               'order_time', 'order_status', 'total_amount'],
    'riders': ['rider_id', 'rider_name', 'sign_up'],
    'deliveries': ['delivery_id', 'order_id', 'delivery_status', 'delivery_time', 'rider_id']
}

ID_COLUMNS = {'customer_id', 'restaurant_id', 'order_id', 'rider_id', 'delivery_id'}
DATE_COLUMNS = {'reg_date', 'sign_up', 'order_date'}
TIME_COLUMNS = {'order_time', 'delivery_time'}
AMOUNT_COLUMNS = {'total_amount'}

PRIMARY_KEY = {
    'customers': 'customer_id',
    'restaurants': 'restaurant_id',
    'orders': 'order_id',
    'riders': 'rider_id',
    'deliveries': 'delivery_id'
}


def _coerce_column(column, values):
    """
    Coerce one column to its schema type.

    Returns the coerced values and a mask of inputs that were present but
    could not be converted: non-numeric or fractional ids, unparseable dates,
    times and amounts.
    """
    if column in ID_COLUMNS:
        numeric = pd.to_numeric(values, errors='coerce').astype('float64')
        malformed = values.notna() & (numeric.isna() | ((numeric % 1).fillna(0) != 0))
        return numeric.mask(malformed).astype('Int64'), malformed
    if column in DATE_COLUMNS:
        dates = pd.to_datetime(values, errors='coerce').dt.normalize()
        return dates, values.notna() & dates.isna()
    if column in TIME_COLUMNS:
        times = to_time_of_day(values)
        return times, ~values.map(is_missing_time).astype(bool) & times.isna()
    if column in AMOUNT_COLUMNS:
        amounts = pd.to_numeric(values, errors='coerce').astype('float64')
        return amounts, values.notna() & amounts.isna()
    return values, pd.Series(False, index=values.index)


def normalize_frame(table, df):
    """
    Select the schema columns of `table` and coerce their types.

    Ids become nullable integers, dates datetime64, times timedeltas since
    midnight and amounts floats. Missing optional columns are added as nulls.
    Values that are present but cannot be coerced raise IntegrityError.
    """
    columns = SCHEMA[table]
    df = df.rename(columns=lambda x: x.strip() if isinstance(x, str) else x)

    normalized = {}
    violations = {}
    for column in columns:
        if column not in df.columns:
            normalized[column] = pd.Series([None] * len(df), index=df.index, dtype='object')
            continue

        values, malformed = _coerce_column(column, df[column])
        if malformed.any():
            violations[f"invalid {table}.{column}"] = df.loc[malformed, column].head(5).tolist()
            logger.warning(f"Table '{table}' has {int(malformed.sum())} malformed values in column '{column}'")
        normalized[column] = values

    if violations:
        raise IntegrityError(f"Malformed values in '{table}': {violations}", violations)

    return pd.DataFrame(normalized, index=df.index).reset_index(drop=True)


def normalize_frames(data_frames):
    """
    Normalise every table and apply the schema's status defaults.

    Malformed values across all tables are reported together.
    """
    fixed = apply_data_fixes(data_frames)

    frames = {}
    violations = {}
    for table in SCHEMA:
        if table not in fixed:
            continue
        try:
            frames[table] = normalize_frame(table, fixed[table])
        except IntegrityError as e:
            violations.update(e.violations)

    if violations:
        summary = '; '.join(f"{name}: {examples}" for name, examples in violations.items())
        raise IntegrityError(f"Data set rejected: {summary}", violations)

    return frames


class Snapshot:
    """Read-only view over customers, restaurants, riders, orders and deliveries."""

    def __init__(self, restaurants, customers, riders, orders, deliveries):
        frames = normalize_frames({
            'customers': customers,
            'restaurants': restaurants,
            'orders': orders,
            'riders': riders,
            'deliveries': deliveries
        })

        # Raises IntegrityError on orphans, duplicate keys or invalid values
        enforce_integrity(frames)

        indexes = {
            table: frame.set_index(PRIMARY_KEY[table], drop=False)
            for table, frame in frames.items()
        }
        deliveries_by_order = frames['deliveries'].dropna(subset=['order_id']).set_index('order_id', drop=False)
        order_details = join_order_details(
            frames['orders'],
            frames['deliveries'],
            frames['customers'],
            frames['restaurants'],
            frames['riders']
        )

        object.__setattr__(self, '_frames', frames)
        object.__setattr__(self, '_indexes', indexes)
        object.__setattr__(self, '_deliveries_by_order', deliveries_by_order)
        object.__setattr__(self, '_order_details', order_details)

        logger.info(
            "Snapshot built: " + ', '.join(f"{len(frame)} {table}" for table, frame in frames.items())
        )

    @classmethod
    def from_frames(cls, data_frames):
        """Build a snapshot from a dict of DataFrames keyed by table name."""
        return cls(
            restaurants=data_frames['restaurants'],
            customers=data_frames['customers'],
            riders=data_frames['riders'],
            orders=data_frames['orders'],
            deliveries=data_frames['deliveries']
        )

    def __setattr__(self, name, value):
        raise AttributeError("Snapshot is immutable")

    def __delattr__(self, name):
        raise AttributeError("Snapshot is immutable")

    # Full-table access; every accessor returns a copy

    @property
    def customers(self):
        return self._frames['customers'].copy()

    @property
    def restaurants(self):
        return self._frames['restaurants'].copy()

    @property
    def riders(self):
        return self._frames['riders'].copy()

    @property
    def orders(self):
        return self._frames['orders'].copy()

    @property
    def deliveries(self):
        return self._frames['deliveries'].copy()

    @property
    def order_details(self):
        """Every order joined to its delivery, customer, restaurant and rider."""
        return self._order_details.copy()

    def tables(self):
        return {table: frame.copy() for table, frame in self._frames.items()}

    # Lookup by id; unknown ids raise KeyError

    def _lookup(self, table, key):
        return self._indexes[table].loc[key].copy()

    def customer(self, customer_id):
        return self._lookup('customers', customer_id)

    def restaurant(self, restaurant_id):
        return self._lookup('restaurants', restaurant_id)

    def rider(self, rider_id):
        return self._lookup('riders', rider_id)

    def order(self, order_id):
        return self._lookup('orders', order_id)

    def delivery(self, delivery_id):
        return self._lookup('deliveries', delivery_id)

    def delivery_for_order(self, order_id):
        """The delivery of an order, or None if it has none yet."""
        if order_id not in self._indexes['orders'].index:
            raise KeyError(order_id)
        if order_id not in self._deliveries_by_order.index:
            return None
        return self._deliveries_by_order.loc[order_id].copy()

    def __len__(self):
        return len(self._frames['orders'])

    def __repr__(self):
        counts = ', '.join(f"{table}={len(frame)}" for table, frame in self._frames.items())
        return f"Snapshot({counts})"
