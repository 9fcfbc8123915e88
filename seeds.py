from datetime import date, timedelta

from fleet_booking import create_app
from fleet_booking.models.store import Store
from fleet_booking.utils.constants import ReservationStatus
from fleet_booking.utils.security import hash_id_number


def main():
    app = create_app()
    with app.app_context():
        store = Store.instance()

        # ---- Demo vehicles (create only if none exist) ----
        if not store.vehicles:
            corolla = store.create_vehicle({"model": "Toyota Corolla", "rate": "4500"})
            store.create_vehicle({"model": "Honda Civic", "rate": "5000"})
            store.create_vehicle({"model": "Isuzu D-Max", "rate": "9500"})

            # ---- One demo reservation next week ----
            start = date.today() + timedelta(days=7)
            days = [(start + timedelta(days=i)).isoformat() for i in range(3)]
            store.reserve_dates(corolla, days, {
                "total_amount": "13500.00",
                "rate": "4500",
                "customer": {
                    "full_name": "Demo Customer",
                    "email": "demo@example.com",
                    "phone": "0700000000",
                    "id_number_hash": hash_id_number("12345678"),
                },
                "special_requests": "",
                "status": ReservationStatus.CONFIRMED,
                "created_at": date.today().isoformat(),
            })

        store.save()

        print("✅ Seed complete.")
        for vid, v in store.vehicles.items():
            print(f"🚗 {v['model']}: {vid} ({v['rate']} per day)")


if __name__ == "__main__":
    main()
