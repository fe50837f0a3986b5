"""
Synthetic food delivery data for demos and local runs.

Generates the five source tables with fixed seeds so repeated runs produce
the same data set, and writes them as CSV files in the input directory.
"""
import os
import random
import logging
from datetime import date, datetime, timedelta
import pandas as pd
from faker import Faker

logger = logging.getLogger(__name__)

CITIES = ["Mumbai", "Delhi", "Bengaluru", "Pune", "Hyderabad", "Chennai"]

RESTAURANT_NAMES = [
    "Spice Hub", "Curry House", "Tandoor Express", "Biryani Blues", "Dosa Corner",
    "Punjabi Dhaba", "Mumbai Tiffins", "Royal Thali", "Pizza Point", "Burger Barn",
    "Chaat Street", "Kebab Factory", "Udupi Palace", "Wok & Roll", "Cafe Chai"
]

DISHES = [
    "Chicken Biryani", "Paneer Butter Masala", "Masala Dosa", "Butter Chicken",
    "Veg Thali", "Pizza", "Burger", "Chole Bhature", "Paneer Tikka", "Pav Bhaji",
    "Mutton Rogan Josh", "Hakka Noodles", "Dal Makhani", "Fish Curry"
]

OPENING_HOURS = ["09:00 AM - 11:00 PM", "10:00 AM - 10:00 PM", "11:00 AM - 12:00 AM", "08:00 AM - 10:00 PM"]

# Order share per hour of day, peaks at lunch and dinner
HOUR_WEIGHTS = [2, 1, 1, 1, 1, 1, 2, 3, 5, 6, 7, 9, 10, 9, 7, 6, 6, 7, 9, 10, 10, 8, 5, 3]


def generate_sample_data(n_orders=2000, n_customers=60, n_riders=15, seed=101,
                         start_date=date(2023, 1, 1), end_date=date(2024, 12, 31)):
    """
    Generate customers, restaurants, orders, riders and deliveries.

    Returns:
        dict: table name -> DataFrame with dates and times as text
    """
    fake = Faker("en_IN")
    Faker.seed(seed)
    rng = random.Random(seed)
    span_days = (end_date - start_date).days

    customers = [{
        'customer_id': 1,
        'customer_name': 'Arjun Mehta',
        'reg_date': start_date.isoformat()
    }]
    for customer_id in range(2, n_customers + 1):
        customers.append({
            'customer_id': customer_id,
            'customer_name': fake.name(),
            'reg_date': (start_date - timedelta(days=rng.randint(0, 700))).isoformat()
        })

    restaurants = []
    for restaurant_id, name in enumerate(RESTAURANT_NAMES, start=1):
        restaurants.append({
            'restaurant_id': restaurant_id,
            'restaurant_name': name,
            'city': rng.choice(CITIES),
            'opening_hours': rng.choice(OPENING_HOURS)
        })

    riders = []
    for rider_id in range(1, n_riders + 1):
        riders.append({
            'rider_id': rider_id,
            'rider_name': fake.name(),
            'sign_up': (start_date - timedelta(days=rng.randint(0, 500))).isoformat()
        })

    orders = []
    deliveries = []
    for order_id in range(1, n_orders + 1):
        hour = rng.choices(range(24), weights=HOUR_WEIGHTS, k=1)[0]
        order_dt = datetime.combine(
            start_date + timedelta(days=rng.randint(0, span_days)),
            datetime.min.time()
        ).replace(hour=hour, minute=rng.randint(0, 59))

        order_status = rng.choices(["Completed", "Not Fulfilled"], weights=[92, 8], k=1)[0]
        orders.append({
            'order_id': order_id,
            'customer_id': rng.randint(1, n_customers),
            'restaurant_id': rng.randint(1, len(restaurants)),
            'order_item': rng.choice(DISHES),
            'order_date': order_dt.date().isoformat(),
            'order_time': order_dt.strftime('%H:%M:%S'),
            'order_status': order_status,
            'total_amount': round(rng.uniform(150.0, 1500.0), 2)
        })

        # Some orders never reach the delivery table
        if order_status == "Not Fulfilled" and rng.random() < 0.5:
            continue

        delivered = order_status == "Completed"
        delivery_time = None
        if delivered:
            delivery_time = (order_dt + timedelta(minutes=rng.randint(8, 45))).strftime('%H:%M:%S')

        deliveries.append({
            'delivery_id': len(deliveries) + 1,
            'order_id': order_id,
            'delivery_status': "Delivered" if delivered else "Not Delivered",
            'delivery_time': delivery_time,
            'rider_id': rng.randint(1, n_riders)
        })

    logger.info(
        f"Generated {len(customers)} customers, {len(restaurants)} restaurants, "
        f"{len(orders)} orders, {len(riders)} riders and {len(deliveries)} deliveries"
    )

    return {
        'customers': pd.DataFrame(customers),
        'restaurants': pd.DataFrame(restaurants),
        'orders': pd.DataFrame(orders),
        'riders': pd.DataFrame(riders),
        'deliveries': pd.DataFrame(deliveries)
    }


def write_sample_data(output_dir, **kwargs):
    """
    Generate the sample data set and write one CSV per table.

    Returns:
        dict: table name -> file path
    """
    data_frames = generate_sample_data(**kwargs)

    if not os.path.exists(output_dir):
        os.makedirs(output_dir)

    written = {}
    for table_name, df in data_frames.items():
        file_path = os.path.join(output_dir, f"{table_name}.csv")
        df.to_csv(file_path, index=False)
        written[table_name] = file_path
        logger.info(f"Wrote {len(df)} rows to {file_path}")

    return written
