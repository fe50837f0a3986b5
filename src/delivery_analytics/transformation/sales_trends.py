"""
Sales trends over time: order time slots, monthly sales and seasonal items.
"""
import logging
import traceback
from delivery_analytics.transformation.joins import season_of, time_slot_start
from delivery_analytics.transformation.windows import lag

logger = logging.getLogger(__name__)


def _hour_label(hour):
    return f"{hour % 24:02d}:00"


def popular_time_slots(snapshot):
    """
    Orders per 2-hour slot of the day (00:00-02:00 ... 22:00-00:00),
    busiest first. Slots without orders are omitted.
    """
    try:
        logger.info("Counting orders per 2-hour time slot")

        details = snapshot.order_details
        details = details.assign(slot=time_slot_start(details['order_time']))

        slots = details.groupby('slot').size().reset_index(name='total_orders')
        slots = slots.sort_values(['total_orders', 'slot'], ascending=[False, True], kind='mergesort')

        slots['start_time'] = slots['slot'].map(_hour_label)
        slots['end_time'] = (slots['slot'] + 2).map(_hour_label)

        return slots[['start_time', 'end_time', 'total_orders']].reset_index(drop=True)
    except Exception as e:
        logger.error(f"Error counting orders per time slot: {str(e)}")
        logger.error(traceback.format_exc())
        raise


def monthly_sales_trend(snapshot):
    """Total sales per month alongside the previous month's total."""
    try:
        logger.info("Calculating monthly sales trend")

        details = snapshot.order_details
        monthly = details.groupby(['order_year', 'order_month']).agg(
            total_sale=('total_amount', 'sum')
        ).reset_index()
        monthly['total_sale'] = monthly['total_sale'].round(2)

        monthly = lag(monthly, 'total_sale', order_by=['order_year', 'order_month'],
                      name='previous_month_sale')

        return monthly.rename(columns={'order_year': 'year', 'order_month': 'month'})
    except Exception as e:
        logger.error(f"Error calculating monthly sales trend: {str(e)}")
        logger.error(traceback.format_exc())
        raise


def seasonal_item_popularity(snapshot):
    """
    Orders per item and season: Spring (Apr-Jun), Summer (Jul-Aug),
    Winter otherwise.
    """
    details = snapshot.order_details
    details = details.assign(season=season_of(details['order_month']))

    seasons = (details.groupby(['order_item', 'season'])
               .size()
               .reset_index(name='total_orders'))

    return seasons.sort_values(
        ['order_item', 'total_orders', 'season'], ascending=[True, False, True], kind='mergesort'
    ).reset_index(drop=True)
