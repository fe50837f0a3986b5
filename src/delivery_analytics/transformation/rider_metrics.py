"""
Rider metrics: delivery times, earnings, star ratings and efficiency.
"""
import logging
import traceback
import numpy as np
import pandas as pd

logger = logging.getLogger(__name__)

RIDER_KEYS = ['rider_id', 'rider_name']


def _completed_deliveries(details):
    """Delivered orders with a rider and a recorded delivery time."""
    return details[
        details['delivered']
        & details['rider_id'].notna()
        & details['delivery_minutes'].notna()
    ]


def star_rating(minutes):
    """5 stars under 15 minutes, 4 stars from 15 to 20 minutes, 3 stars above."""
    return pd.Series(
        np.select([minutes < 15, minutes <= 20], [5, 4], default=3),
        index=minutes.index
    )


def rider_average_delivery_time(snapshot):
    """
    Average minutes from order to delivery per rider, over delivered orders.
    """
    try:
        logger.info("Calculating average delivery time per rider")

        deliveries = _completed_deliveries(snapshot.order_details)
        averages = deliveries.groupby(RIDER_KEYS).agg(
            avg_delivery_minutes=('delivery_minutes', 'mean')
        ).reset_index()
        averages['avg_delivery_minutes'] = averages['avg_delivery_minutes'].round(2)

        logger.info(f"Calculated average delivery time for {len(averages)} riders")
        return averages.sort_values('rider_id', kind='mergesort').reset_index(drop=True)
    except Exception as e:
        logger.error(f"Error calculating rider delivery times: {str(e)}")
        logger.error(traceback.format_exc())
        raise


def rider_monthly_earnings(snapshot, commission_rate=0.08):
    """
    Monthly earnings per rider: `commission_rate` of the order totals of
    every delivery assigned to the rider.
    """
    try:
        logger.info(f"Calculating rider monthly earnings at {commission_rate:.0%} commission")

        details = snapshot.order_details
        assigned = details[details['rider_id'].notna()].assign(
            month=lambda df: df['order_date'].dt.strftime('%Y-%m')
        )

        earnings = assigned.groupby(RIDER_KEYS + ['month']).agg(
            total_revenue=('total_amount', 'sum')
        ).reset_index()
        earnings['total_revenue'] = earnings['total_revenue'].round(2)
        earnings['earnings'] = (earnings['total_revenue'] * commission_rate).round(2)

        return earnings.sort_values(['rider_id', 'month'], kind='mergesort').reset_index(drop=True)
    except Exception as e:
        logger.error(f"Error calculating rider earnings: {str(e)}")
        logger.error(traceback.format_exc())
        raise


def rider_star_ratings(snapshot):
    """Number of deliveries per rider in each star tier."""
    deliveries = _completed_deliveries(snapshot.order_details)
    deliveries = deliveries.assign(stars=star_rating(deliveries['delivery_minutes']))

    ratings = (deliveries.groupby(RIDER_KEYS + ['stars'])
               .size()
               .reset_index(name='total_deliveries'))

    return ratings.sort_values(
        ['rider_id', 'stars'], ascending=[True, False], kind='mergesort'
    ).reset_index(drop=True)


def rider_efficiency(snapshot):
    """Fastest and slowest per-rider average delivery time, as one row."""
    averages = rider_average_delivery_time(snapshot)['avg_delivery_minutes']

    fastest = round(float(averages.min()), 2) if not averages.empty else np.nan
    slowest = round(float(averages.max()), 2) if not averages.empty else np.nan

    return pd.DataFrame([{
        'fastest_avg_minutes': fastest,
        'slowest_avg_minutes': slowest
    }])
