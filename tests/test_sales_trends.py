import math
from conftest import make_snapshot
from delivery_analytics.transformation.sales_trends import (
    monthly_sales_trend, popular_time_slots, seasonal_item_popularity
)


def test_popular_time_slots(snapshot):
    result = popular_time_slots(snapshot)
    assert list(result.itertuples(index=False, name=None)) == [
        ('12:00', '14:00', 2),
        ('20:00', '22:00', 2),
        ('00:00', '02:00', 1),
        ('08:00', '10:00', 1),
        ('18:00', '20:00', 1),
        ('22:00', '00:00', 1),
    ]


def test_every_order_lands_in_one_slot(snapshot):
    result = popular_time_slots(snapshot)
    assert result['total_orders'].sum() == len(snapshot)


def test_slot_boundaries():
    orders = [
        (1, 1, 1, 'Pizza', '2024-01-01', '01:59:59', 'Completed', 100.0),
        (2, 1, 1, 'Pizza', '2024-01-01', '02:00:00', 'Completed', 100.0),
        (3, 1, 1, 'Pizza', '2024-01-01', '02:30:00', 'Completed', 100.0),
    ]
    result = popular_time_slots(make_snapshot(orders=orders, deliveries=[]))
    assert list(result.itertuples(index=False, name=None)) == [
        ('02:00', '04:00', 2),
        ('00:00', '02:00', 1),
    ]


def test_monthly_sales_trend(snapshot):
    result = monthly_sales_trend(snapshot)

    assert list(zip(result['year'], result['month'])) == [
        (2023, 2), (2023, 7), (2023, 8), (2023, 11),
        (2024, 1), (2024, 3), (2024, 4), (2024, 5),
    ]
    assert result['total_sale'].tolist() == [400.0, 500.0, 250.0, 200.0, 300.0, 320.0, 350.0, 150.0]
    assert math.isnan(result['previous_month_sale'][0])
    assert result['previous_month_sale'][1:].tolist() == [400.0, 500.0, 250.0, 200.0, 300.0, 320.0, 350.0]


def test_seasonal_item_popularity(snapshot):
    result = seasonal_item_popularity(snapshot)
    assert list(result.itertuples(index=False, name=None)) == [
        ('Biryani', 'Spring', 1),
        ('Biryani', 'Summer', 1),
        ('Biryani', 'Winter', 1),
        ('Burger', 'Spring', 1),
        ('Paneer Tikka', 'Winter', 1),
        ('Pizza', 'Winter', 2),
        ('Pizza', 'Summer', 1),
    ]


def test_seasons_cover_every_order(snapshot):
    assert seasonal_item_popularity(snapshot)['total_orders'].sum() == len(snapshot)
