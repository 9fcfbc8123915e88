"""
reset_data.py
-------------
Utility script to clear all stored data (vehicles, reservations) from the local data.pkl file.

Usage:
    $ python reset_data.py

After running this script, you can repopulate sample data by executing:
    $ python seeds.py
"""

from fleet_booking.models.store import Store


def main():
    """Clear vehicles, reservations and date claims, then save the empty store."""
    store = Store.instance()

    store.vehicles.clear()
    store.reservations.clear()
    store.claims.clear()

    store.save()

    print("✅ data.pkl has been successfully cleared.")
    print("💡 Tip: Run `python seeds.py` to regenerate demo data.")


if __name__ == "__main__":
    main()
