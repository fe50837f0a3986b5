"""
Restaurant and city metrics: undelivered orders, revenue rankings,
popular dishes, cancellation rates, growth and peak days.
"""
import logging
import traceback
import pandas as pd
from delivery_analytics.transformation.customer_metrics import trailing_year
from delivery_analytics.transformation.windows import dense_rank, lag, safe_ratio

logger = logging.getLogger(__name__)

RESTAURANT_KEYS = ['restaurant_id', 'restaurant_name', 'city']


def _with_restaurant(details):
    return details[details['restaurant_id'].notna()]


def undelivered_orders_by_restaurant(snapshot):
    """
    Count orders per restaurant that were not delivered.

    An order is not delivered when it has no delivery record or its
    delivery status is anything other than 'Delivered'.
    """
    try:
        logger.info("Counting undelivered orders per restaurant")

        details = _with_restaurant(snapshot.order_details)
        undelivered = details[~details['delivered']]

        counts = (undelivered.groupby(RESTAURANT_KEYS, dropna=False)
                  .size()
                  .reset_index(name='undelivered_orders'))

        logger.info(f"{len(undelivered)} undelivered orders across {len(counts)} restaurants")
        return counts.sort_values(
            ['undelivered_orders', 'restaurant_id'], ascending=[False, True], kind='mergesort'
        ).reset_index(drop=True)
    except Exception as e:
        logger.error(f"Error counting undelivered orders: {str(e)}")
        logger.error(traceback.format_exc())
        raise


def restaurant_revenue_ranking(snapshot, reference_date):
    """
    Rank restaurants by revenue within their city over the trailing year.
    """
    try:
        logger.info(f"Ranking restaurant revenue for the year up to {reference_date}")

        details = _with_restaurant(trailing_year(snapshot.order_details, reference_date))
        revenue = details.groupby(RESTAURANT_KEYS, dropna=False).agg(
            revenue=('total_amount', 'sum')
        ).reset_index()
        revenue['revenue'] = revenue['revenue'].round(2)

        ranked = dense_rank(revenue, 'revenue', partition_by='city')
        ranked = ranked.sort_values(['city', 'rank', 'restaurant_id'], kind='mergesort')
        return ranked[['city', 'restaurant_id', 'restaurant_name', 'revenue', 'rank']].reset_index(drop=True)
    except Exception as e:
        logger.error(f"Error ranking restaurant revenue: {str(e)}")
        logger.error(traceback.format_exc())
        raise


def most_popular_dish_by_city(snapshot):
    """Dish(es) ordered most in each city; ties are all returned."""
    details = _with_restaurant(snapshot.order_details)
    dishes = (details.groupby(['city', 'order_item'], dropna=False)
              .size()
              .reset_index(name='total_orders'))

    ranked = dense_rank(dishes, 'total_orders', partition_by='city')
    popular = ranked[ranked['rank'] == 1]
    return popular.sort_values(['city', 'order_item'], kind='mergesort').reset_index(drop=True)


def _yearly_cancellations(details, year):
    yearly = details[details['order_year'] == year].assign(
        not_delivered=lambda df: (~df['delivered']).astype(int)
    )
    summary = yearly.groupby('restaurant_id').agg(
        total_orders=('order_id', 'count'),
        not_delivered=('not_delivered', 'sum')
    ).reset_index()
    summary['cancel_ratio'] = safe_ratio(summary['not_delivered'], summary['total_orders'], scale=100)
    return summary


def cancellation_rate_comparison(snapshot, previous_year=2023, current_year=2024):
    """
    Compare each restaurant's not-delivered percentage between two years.

    Restaurants with orders in only one of the years are kept, with nulls
    for the other year. A year with no orders has a null ratio.
    """
    try:
        logger.info(f"Comparing cancellation rates between {previous_year} and {current_year}")

        details = _with_restaurant(snapshot.order_details)
        previous = _yearly_cancellations(details, previous_year).rename(columns={
            'total_orders': 'previous_total_orders',
            'not_delivered': 'previous_not_delivered',
            'cancel_ratio': 'previous_cancel_ratio'
        })
        current = _yearly_cancellations(details, current_year).rename(columns={
            'total_orders': 'current_total_orders',
            'not_delivered': 'current_not_delivered',
            'cancel_ratio': 'current_cancel_ratio'
        })

        comparison = pd.merge(previous, current, on='restaurant_id', how='outer')
        for column in ['previous_total_orders', 'previous_not_delivered',
                       'current_total_orders', 'current_not_delivered']:
            comparison[column] = comparison[column].astype('Int64')

        restaurants = snapshot.restaurants[['restaurant_id', 'restaurant_name']]
        comparison = pd.merge(comparison, restaurants, on='restaurant_id', how='left')

        columns = ['restaurant_id', 'restaurant_name',
                   'previous_total_orders', 'previous_not_delivered', 'previous_cancel_ratio',
                   'current_total_orders', 'current_not_delivered', 'current_cancel_ratio']
        return comparison[columns].sort_values('restaurant_id', kind='mergesort').reset_index(drop=True)
    except Exception as e:
        logger.error(f"Error comparing cancellation rates: {str(e)}")
        logger.error(traceback.format_exc())
        raise


def monthly_restaurant_growth(snapshot):
    """
    Month-over-month growth of delivered orders per restaurant.

    The previous month is the restaurant's preceding month with delivered
    orders. growth_ratio is null for a restaurant's first month and
    whenever the previous count is zero.
    """
    try:
        logger.info("Calculating monthly restaurant growth")

        details = _with_restaurant(snapshot.order_details)
        delivered = details[details['delivered']]

        monthly = (delivered.groupby(['restaurant_id', 'restaurant_name', 'order_year', 'order_month'])
                   .size()
                   .reset_index(name='current_month_orders'))

        monthly = lag(
            monthly,
            'current_month_orders',
            order_by=['order_year', 'order_month'],
            partition_by='restaurant_id',
            name='previous_month_orders'
        )
        monthly['previous_month_orders'] = monthly['previous_month_orders'].astype('Int64')
        monthly['growth_ratio'] = safe_ratio(
            monthly['current_month_orders'] - monthly['previous_month_orders'],
            monthly['previous_month_orders'],
            scale=100
        )

        monthly = monthly.rename(columns={'order_year': 'year', 'order_month': 'month'})
        logger.info(f"Calculated growth for {len(monthly)} restaurant-months")
        return monthly[['restaurant_id', 'restaurant_name', 'year', 'month',
                        'current_month_orders', 'previous_month_orders', 'growth_ratio']]
    except Exception as e:
        logger.error(f"Error calculating monthly restaurant growth: {str(e)}")
        logger.error(traceback.format_exc())
        raise


def peak_order_day_by_restaurant(snapshot):
    """Weekday(s) with the most orders for each restaurant."""
    details = _with_restaurant(snapshot.order_details).assign(
        weekday=lambda df: df['order_date'].dt.dayofweek,
        day_of_week=lambda df: df['order_date'].dt.day_name()
    )

    days = (details.groupby(['restaurant_id', 'restaurant_name', 'weekday', 'day_of_week'])
            .size()
            .reset_index(name='total_orders'))

    ranked = dense_rank(days, 'total_orders', partition_by='restaurant_id')
    peak = ranked[ranked['rank'] == 1].sort_values(['restaurant_id', 'weekday'], kind='mergesort')
    return peak[['restaurant_id', 'restaurant_name', 'day_of_week', 'total_orders', 'rank']].reset_index(drop=True)


def city_revenue_ranking(snapshot, year=2023):
    """Rank cities by total revenue for one calendar year."""
    details = _with_restaurant(snapshot.order_details)
    details = details[details['order_year'] == year]

    revenue = details.groupby('city', dropna=False).agg(
        total_revenue=('total_amount', 'sum')
    ).reset_index()
    revenue['total_revenue'] = revenue['total_revenue'].round(2)

    ranked = dense_rank(revenue, 'total_revenue')
    logger.info(f"Ranked {len(ranked)} cities by {year} revenue")
    return ranked.sort_values(['rank', 'city'], kind='mergesort').reset_index(drop=True)
