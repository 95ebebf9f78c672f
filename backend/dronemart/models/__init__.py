from .users import User, Admin
from .businesses import Business, Location
from .catalog import Product
from .fleet import Drone, Trip
from .orders import Order, OrderLine
from .stats import Stats

__all__ = [
    'User', 'Admin',
    'Business', 'Location',
    'Product',
    'Drone', 'Trip',
    'Order', 'OrderLine',
    'Stats',
]
