"""
Data joining operations for the food delivery analytics pipeline.
"""
import logging
import traceback
from datetime import datetime, time, timedelta
import pandas as pd

logger = logging.getLogger(__name__)

DELIVERED = 'Delivered'
MINUTES_PER_DAY = 24 * 60
ONE_DAY = pd.Timedelta(days=1)

# Text read back as a null time
NULL_TEXT = ('', 'nan', 'nat', 'none')

# Month number -> season
SEASONS = {
    1: 'Winter', 2: 'Winter', 3: 'Winter',
    4: 'Spring', 5: 'Spring', 6: 'Spring',
    7: 'Summer', 8: 'Summer',
    9: 'Winter', 10: 'Winter', 11: 'Winter', 12: 'Winter'
}


def is_missing_time(value):
    """True for null values and null-like text such as '' or 'NaT'."""
    if isinstance(value, str):
        return value.strip().lower() in NULL_TEXT
    return value is None or (pd.api.types.is_scalar(value) and pd.isna(value))


def _parse_time_of_day(value):
    if is_missing_time(value):
        return pd.NaT
    if isinstance(value, (pd.Timedelta, timedelta)):
        return pd.Timedelta(value)
    if isinstance(value, datetime):
        value = value.time()
    if isinstance(value, time):
        return pd.Timedelta(hours=value.hour, minutes=value.minute,
                            seconds=value.second, microseconds=value.microsecond)
    text = str(value).strip()
    # Accept HH:MM as well as HH:MM:SS
    if text.count(':') == 1:
        text += ':00'
    return pd.Timedelta(text)


def _coerce_time_of_day(value):
    try:
        return _parse_time_of_day(value)
    except ValueError:
        return pd.NaT


def to_time_of_day(series):
    """
    Convert a column of times (strings, datetime.time or timedeltas) to
    timedeltas since midnight. Missing and unparseable values become NaT.
    """
    if pd.api.types.is_timedelta64_dtype(series):
        return series
    return pd.Series(
        [_coerce_time_of_day(value) for value in series],
        index=series.index,
        dtype='timedelta64[ns]'
    )


def is_time_of_day(value):
    """
    True if `value` parses as a time within the day, 00:00:00 up to but not
    including 24:00:00. Null values pass; required columns are checked apart.
    """
    if is_missing_time(value):
        return True
    try:
        parsed = _parse_time_of_day(value)
    except ValueError:
        return False
    return bool(pd.Timedelta(0) <= parsed < ONE_DAY)


def time_of_day_to_time(value):
    """Convert a timedelta since midnight back to a datetime.time."""
    if pd.isna(value):
        return None
    return (datetime.min + pd.Timedelta(value).to_pytimedelta()).time()


def delivery_minutes(order_time, delivery_time):
    """
    Minutes between order and delivery time of day.

    Delivery times are recorded without a date, so a negative difference
    means the delivery happened after midnight: a full day is added.
    """
    minutes = (delivery_time - order_time).dt.total_seconds() / 60
    return minutes.where(minutes.isna() | (minutes >= 0), minutes + MINUTES_PER_DAY)


def is_delivered(delivery_status):
    """True where the delivery status is 'Delivered'; a missing delivery is not delivered."""
    return delivery_status.eq(DELIVERED).fillna(False).astype(bool)


def time_slot_start(order_time):
    """Start hour of the 2-hour slot each order time falls into (0, 2, ..., 22)."""
    hours = order_time.dt.total_seconds() // 3600
    return ((hours // 2) * 2).astype(int) % 24


def season_of(month):
    """Season label for each month number."""
    return month.map(SEASONS)


def join_order_details(orders, deliveries, customers, restaurants, riders):
    """
    Join orders with their delivery, customer, restaurant and rider.

    Every order appears exactly once; orders without a delivery keep null
    delivery columns. Adds delivered, delivery_minutes, order_year and
    order_month.
    """
    try:
        logger.info("Joining orders, deliveries, customers, restaurants and riders")

        details = pd.merge(
            orders,
            deliveries.dropna(subset=['order_id']),
            on='order_id',
            how='left',
            validate='one_to_one'
        )

        details = pd.merge(
            details,
            customers[['customer_id', 'customer_name']],
            on='customer_id',
            how='left',
            validate='many_to_one'
        )

        details = pd.merge(
            details,
            restaurants[['restaurant_id', 'restaurant_name', 'city']],
            on='restaurant_id',
            how='left',
            validate='many_to_one'
        )

        details = pd.merge(
            details,
            riders[['rider_id', 'rider_name']],
            on='rider_id',
            how='left',
            validate='many_to_one'
        )

        details['delivered'] = is_delivered(details['delivery_status'])
        details['delivery_minutes'] = delivery_minutes(details['order_time'], details['delivery_time'])
        details['order_year'] = details['order_date'].dt.year
        details['order_month'] = details['order_date'].dt.month

        # Orders with no delivery row
        orders_without_delivery = int(details['delivery_id'].isna().sum())
        if orders_without_delivery:
            logger.info(f"Found {orders_without_delivery} orders with no delivery record")

        logger.info(f"Joined data has {len(details)} rows")
        return details.sort_values('order_id', kind='mergesort').reset_index(drop=True)

    except Exception as e:
        logger.error(f"Error joining data: {str(e)}")
        logger.error(traceback.format_exc())
        raise
