# fleet_booking/utils/constants.py

"""
Global constants for reservation statuses, calendar shape and request limits.
These constants are imported by both models and services.
"""


class ReservationStatus:
    PENDING = "pending"
    CONFIRMED = "confirmed"
    CANCELLED = "cancelled"


# Reservations in these states occupy their dates
ACTIVE_RESERVATION_STATES = {ReservationStatus.PENDING, ReservationStatus.CONFIRMED}


class Weekday:
    # Python numbering: Monday=0 ... Sunday=6
    MONDAY = 0
    SUNDAY = 6


# --- Calendar ---
GRID_WEEKS = 6
GRID_CELLS = GRID_WEEKS * 7
DEFAULT_WEEK_START = Weekday.SUNDAY
DAY_NAMES = ("Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun")

# --- Reservation request ---
SPECIAL_REQUESTS_MAX = 500
CUSTOMER_FIELDS = ("full_name", "email", "phone", "id_number")
DEFAULT_TIMEZONE = "UTC"
