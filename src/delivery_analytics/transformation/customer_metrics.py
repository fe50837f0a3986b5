"""
Customer metrics: favourite dishes, order frequency, spend, churn,
segmentation and lifetime value.
"""
import logging
import traceback
import numpy as np
import pandas as pd
from delivery_analytics.transformation.windows import dense_rank

logger = logging.getLogger(__name__)


def trailing_year(details, reference_date):
    """Orders dated within one year up to and including the reference date."""
    end = pd.Timestamp(reference_date).normalize()
    start = end - pd.DateOffset(years=1)
    return details[details['order_date'].between(start, end)]


def top_dishes_for_customer(snapshot, customer_name, reference_date, top_n=5):
    """
    Most ordered dishes of one customer over the trailing year.

    Dishes are dense-ranked by order count; ranks up to `top_n` are kept,
    so ties can return more than `top_n` rows.
    """
    try:
        logger.info(f"Finding top {top_n} dishes for customer '{customer_name}'")

        details = trailing_year(snapshot.order_details, reference_date)
        details = details[details['customer_name'] == customer_name]

        dishes = (details.groupby(['customer_name', 'order_item'])
                  .size()
                  .reset_index(name='total_orders'))

        ranked = dense_rank(dishes, 'total_orders')
        top_dishes = (ranked[ranked['rank'] <= top_n]
                      .sort_values(['rank', 'order_item'], kind='mergesort')
                      .reset_index(drop=True))

        logger.info(f"Found {len(top_dishes)} top dishes")
        return top_dishes[['customer_name', 'order_item', 'total_orders', 'rank']]
    except Exception as e:
        logger.error(f"Error finding top dishes: {str(e)}")
        logger.error(traceback.format_exc())
        raise


def high_frequency_customer_aov(snapshot, min_orders=750):
    """
    Average order value of customers with more than `min_orders` orders.
    """
    try:
        logger.info(f"Calculating average order value for customers with more than {min_orders} orders")

        details = snapshot.order_details
        customers = details.groupby(['customer_id', 'customer_name']).agg(
            total_orders=('order_id', 'count'),
            aov=('total_amount', 'mean')
        ).reset_index()

        customers = customers[customers['total_orders'] > min_orders].assign(
            aov=lambda df: df['aov'].round(2)
        )

        return customers.sort_values(
            ['total_orders', 'customer_id'], ascending=[False, True], kind='mergesort'
        ).reset_index(drop=True)
    except Exception as e:
        logger.error(f"Error calculating high frequency customer AOV: {str(e)}")
        logger.error(traceback.format_exc())
        raise


def high_value_customers(snapshot, min_spend=100000):
    """Customers whose total spend exceeds `min_spend`, highest first."""
    details = snapshot.order_details
    spend = details.groupby(['customer_id', 'customer_name']).agg(
        total_spent=('total_amount', 'sum')
    ).reset_index()
    spend['total_spent'] = spend['total_spent'].round(2)

    spend = spend[spend['total_spent'] > min_spend]
    logger.info(f"Found {len(spend)} customers spending more than {min_spend}")

    return spend.sort_values(
        ['total_spent', 'customer_id'], ascending=[False, True], kind='mergesort'
    ).reset_index(drop=True)


def churned_customers(snapshot, previous_year=2023, current_year=2024):
    """
    Customers who ordered in `previous_year` but not in `current_year`.
    """
    details = snapshot.order_details

    ordered_before = set(details.loc[details['order_year'] == previous_year, 'customer_id'].dropna())
    ordered_now = set(details.loc[details['order_year'] == current_year, 'customer_id'].dropna())
    churned = ordered_before - ordered_now

    logger.info(f"Found {len(churned)} customers who ordered in {previous_year} but not in {current_year}")

    customers = snapshot.customers
    churned_df = customers[customers['customer_id'].isin(churned)]
    return (churned_df[['customer_id', 'customer_name']]
            .sort_values('customer_id', kind='mergesort')
            .reset_index(drop=True))


def customer_segmentation(snapshot):
    """
    Split customers into Gold and Silver segments.

    A customer is Gold when their total spend is above the average order
    value across all orders. Returns order count and revenue per segment.
    """
    try:
        logger.info("Segmenting customers")

        details = snapshot.order_details
        if details.empty:
            return pd.DataFrame(columns=['segment', 'total_orders', 'total_revenue'])

        average_order_value = details['total_amount'].mean()
        logger.info(f"Average order value: {average_order_value:.2f}")

        customers = details.groupby('customer_id').agg(
            total_spent=('total_amount', 'sum'),
            total_orders=('order_id', 'count')
        ).reset_index()
        customers['segment'] = np.where(customers['total_spent'] > average_order_value, 'Gold', 'Silver')

        segments = customers.groupby('segment').agg(
            total_orders=('total_orders', 'sum'),
            total_revenue=('total_spent', 'sum')
        ).reset_index()
        segments['total_revenue'] = segments['total_revenue'].round(2)

        return segments.sort_values('segment', kind='mergesort').reset_index(drop=True)
    except Exception as e:
        logger.error(f"Error segmenting customers: {str(e)}")
        logger.error(traceback.format_exc())
        raise


def customer_lifetime_value(snapshot):
    """Total revenue per customer over all orders."""
    details = snapshot.order_details
    lifetime = details.groupby(['customer_id', 'customer_name']).agg(
        total_revenue=('total_amount', 'sum')
    ).reset_index()
    lifetime['total_revenue'] = lifetime['total_revenue'].round(2)

    return lifetime.sort_values(
        ['total_revenue', 'customer_id'], ascending=[False, True], kind='mergesort'
    ).reset_index(drop=True)
