import pandas as pd
import pytest
from delivery_analytics.transformation.snapshot import Snapshot

REFERENCE_DATE = '2024-06-30'

CUSTOMERS = [
    (1, 'Arjun Mehta', '2022-03-01'),
    (2, 'Priya Sharma', '2022-05-12'),
    (3, 'Rahul Verma', '2023-01-20'),
]

RESTAURANTS = [
    (1, 'Spice Hub', 'Mumbai', '09:00 AM - 11:00 PM'),
    (2, 'Curry House', 'Mumbai', '10:00 AM - 10:00 PM'),
    (3, 'Tandoor Express', 'Delhi', '11:00 AM - 12:00 AM'),
]

RIDERS = [
    (1, 'Ravi Kumar', '2022-01-01'),
    (2, 'Sunil Das', '2022-06-01'),
]

ORDERS = [
    (1, 1, 1, 'Pizza', '2024-01-10', '12:30:00', 'Completed', 300.00),
    (2, 1, 1, 'Pizza', '2024-03-05', '19:15:00', 'Completed', 320.00),
    (3, 1, 2, 'Burger', '2024-05-20', '23:50:00', 'Completed', 150.00),
    (4, 1, 2, 'Biryani', '2023-02-01', '13:00:00', 'Completed', 400.00),
    (5, 2, 1, 'Biryani', '2023-07-15', '20:10:00', 'Not Fulfilled', 500.00),
    (6, 2, 3, 'Pizza', '2023-08-02', '08:05:00', 'Not Fulfilled', 250.00),
    (7, 3, 3, 'Paneer Tikka', '2023-11-11', '21:40:00', 'Completed', 200.00),
    (8, 3, 2, 'Biryani', '2024-04-14', '01:20:00', 'Completed', 350.00),
]

# Order 6 has no delivery record
DELIVERIES = [
    (1, 1, 'Delivered', '12:50:00', 1),
    (2, 2, 'Delivered', '19:25:00', 1),
    (3, 3, 'Delivered', '00:10:00', 2),
    (4, 4, 'Delivered', '13:30:00', 2),
    (5, 5, 'Not Delivered', None, 1),
    (6, 7, 'Delivered', '21:56:00', 1),
    (7, 8, 'Delivered', '01:35:00', 2),
]


def make_frames(customers=CUSTOMERS, restaurants=RESTAURANTS, riders=RIDERS,
                orders=ORDERS, deliveries=DELIVERIES):
    return {
        'customers': pd.DataFrame(customers, columns=['customer_id', 'customer_name', 'reg_date']),
        'restaurants': pd.DataFrame(restaurants, columns=['restaurant_id', 'restaurant_name', 'city', 'opening_hours']),
        'riders': pd.DataFrame(riders, columns=['rider_id', 'rider_name', 'sign_up']),
        'orders': pd.DataFrame(orders, columns=['order_id', 'customer_id', 'restaurant_id', 'order_item',
                                                'order_date', 'order_time', 'order_status', 'total_amount']),
        'deliveries': pd.DataFrame(deliveries, columns=['delivery_id', 'order_id', 'delivery_status',
                                                        'delivery_time', 'rider_id']),
    }


def make_snapshot(**tables):
    return Snapshot.from_frames(make_frames(**tables))


@pytest.fixture
def frames():
    return make_frames()


@pytest.fixture
def snapshot():
    return make_snapshot()


@pytest.fixture
def write_csv_sources(tmp_path):
    """Write the sample tables as source CSV files and return the input dir."""
    def _write(frames=None):
        input_dir = tmp_path / 'input'
        input_dir.mkdir(exist_ok=True)
        for table, df in (frames or make_frames()).items():
            df.to_csv(input_dir / f'{table}.csv', index=False)
        return input_dir
    return _write


@pytest.fixture
def config_file(tmp_path):
    """Write a config.ini pointing at tmp_path and return its path."""
    def _write(source='csv', write_db='false'):
        path = tmp_path / 'config.ini'
        path.write_text(
            "[DATABASE]\n"
            "type = sqlite\n"
            f"name = {tmp_path / 'analytics.db'}\n"
            "\n"
            "[LOGGING]\n"
            "level = INFO\n"
            f"file = {tmp_path / 'logs' / 'pipeline.log'}\n"
            "\n"
            "[PATHS]\n"
            f"input_dir = {tmp_path / 'input'}\n"
            f"output_dir = {tmp_path / 'output'}\n"
            "\n"
            "[PIPELINE]\n"
            f"source = {source}\n"
            "quality_check = true\n"
            f"write_db = {write_db}\n"
            "\n"
            "[ANALYSIS]\n"
            f"reference_date = {REFERENCE_DATE}\n"
            "customer_name = Arjun Mehta\n"
            "top_n = 5\n"
            "high_frequency_min_orders = 1\n"
            "high_value_min_spend = 500\n"
            "previous_year = 2023\n"
            "current_year = 2024\n"
            "revenue_year = 2023\n"
            "rider_commission_rate = 0.08\n"
        )
        return path
    return _write
