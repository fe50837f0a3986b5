"""
Registry of the analytical reports and helpers to run them against a snapshot.
"""
import inspect
import logging
import time
from delivery_analytics.transformation import customer_metrics, restaurant_metrics, rider_metrics, sales_trends

logger = logging.getLogger(__name__)

# Report name -> function(snapshot, **params), in presentation order
REPORTS = {
    'top_dishes_for_customer': customer_metrics.top_dishes_for_customer,
    'popular_time_slots': sales_trends.popular_time_slots,
    'high_frequency_customer_aov': customer_metrics.high_frequency_customer_aov,
    'high_value_customers': customer_metrics.high_value_customers,
    'undelivered_orders_by_restaurant': restaurant_metrics.undelivered_orders_by_restaurant,
    'restaurant_revenue_ranking': restaurant_metrics.restaurant_revenue_ranking,
    'most_popular_dish_by_city': restaurant_metrics.most_popular_dish_by_city,
    'churned_customers': customer_metrics.churned_customers,
    'cancellation_rate_comparison': restaurant_metrics.cancellation_rate_comparison,
    'rider_average_delivery_time': rider_metrics.rider_average_delivery_time,
    'monthly_restaurant_growth': restaurant_metrics.monthly_restaurant_growth,
    'customer_segmentation': customer_metrics.customer_segmentation,
    'rider_monthly_earnings': rider_metrics.rider_monthly_earnings,
    'rider_star_ratings': rider_metrics.rider_star_ratings,
    'peak_order_day_by_restaurant': restaurant_metrics.peak_order_day_by_restaurant,
    'customer_lifetime_value': customer_metrics.customer_lifetime_value,
    'monthly_sales_trend': sales_trends.monthly_sales_trend,
    'rider_efficiency': rider_metrics.rider_efficiency,
    'seasonal_item_popularity': sales_trends.seasonal_item_popularity,
    'city_revenue_ranking': restaurant_metrics.city_revenue_ranking,
}


def run_report(snapshot, name, **params):
    """
    Run one report, passing only the parameters its function accepts.
    """
    if name not in REPORTS:
        raise ValueError(f"Unknown report: {name}")

    report = REPORTS[name]
    accepted = inspect.signature(report).parameters
    kwargs = {key: value for key, value in params.items() if key in accepted}
    return report(snapshot, **kwargs)


def run_reports(snapshot, params=None, names=None):
    """
    Run the named reports (all of them by default).

    Returns:
        dict: report name -> result DataFrame, in registry order
    """
    params = params or {}
    selected = list(REPORTS) if not names else list(names)

    unknown = [name for name in selected if name not in REPORTS]
    if unknown:
        raise ValueError(f"Unknown report(s): {', '.join(unknown)}")

    results = {}
    for name in REPORTS:
        if name not in selected:
            continue
        start = time.time()
        results[name] = run_report(snapshot, name, **params)
        logger.info(f"Report '{name}' produced {len(results[name])} rows in {time.time() - start:.3f}s")

    return results
