"""
Database models for the food delivery schema.
"""
from sqlalchemy import Column, Integer, String, Numeric, Date, Time, ForeignKey, CheckConstraint
from sqlalchemy.orm import declarative_base

Base = declarative_base()


class Restaurant(Base):
    """Restaurants taking orders."""
    __tablename__ = 'restaurants'

    restaurant_id = Column(Integer, primary_key=True, autoincrement=True)
    restaurant_name = Column(String(100), nullable=False)
    city = Column(String(50))
    opening_hours = Column(String(50))


class Customer(Base):
    """Registered customers."""
    __tablename__ = 'customers'

    customer_id = Column(Integer, primary_key=True, autoincrement=True)
    customer_name = Column(String(100), nullable=False)
    reg_date = Column(Date)


class Rider(Base):
    """Delivery riders."""
    __tablename__ = 'riders'

    rider_id = Column(Integer, primary_key=True, autoincrement=True)
    rider_name = Column(String(100), nullable=False)
    sign_up = Column(Date)


class Order(Base):
    """One order of one item placed by a customer at a restaurant."""
    __tablename__ = 'orders'
    __table_args__ = (
        CheckConstraint('total_amount > 0', name='ck_orders_total_amount_positive'),
    )

    order_id = Column(Integer, primary_key=True, autoincrement=True)
    customer_id = Column(Integer, ForeignKey('customers.customer_id'))
    restaurant_id = Column(Integer, ForeignKey('restaurants.restaurant_id'))
    order_item = Column(String(255))
    order_date = Column(Date, nullable=False)
    order_time = Column(Time, nullable=False)
    order_status = Column(String(20), default='Pending', server_default='Pending')
    total_amount = Column(Numeric(10, 2), nullable=False)


class Delivery(Base):
    """Delivery of an order, optionally assigned to a rider."""
    __tablename__ = 'deliveries'

    delivery_id = Column(Integer, primary_key=True, autoincrement=True)
    order_id = Column(Integer, ForeignKey('orders.order_id'), unique=True)
    delivery_status = Column(String(20), default='Pending', server_default='Pending')
    # Null until the delivery completes
    delivery_time = Column(Time)
    rider_id = Column(Integer, ForeignKey('riders.rider_id'))


# Bulk load order, parents first
LOAD_ORDER = [
    ('customers', Customer),
    ('restaurants', Restaurant),
    ('orders', Order),
    ('riders', Rider),
    ('deliveries', Delivery),
]
