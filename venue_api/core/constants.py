"""
Shared constants
"""

# Lower bounds of the capacity buckets, shared by every city
VENUE_CAPACITY_RANGES = [0, 50, 100, 200, 500, 1000, 2000]

# Beverages a venue's price class is computed from
PRICE_CLASS_CATEGORIES = ("coke", "beer")


class UserRoles:
    ADMIN = "admin"
    USER = "user"


class ClientIds:
    CLIENT_APP = "client-app"
