"""
Run this script to see a full wizard session without a browser:
 - homepage draft lands in session storage and is hydrated into the wizard
 - route distance comes from a mock provider
 - vehicle and contact details are filled step by step
 - the price is estimated client-side and re-computed the way the server does
"""

import json

from booking_tools import MockDistanceProvider, lookup_distance_patch
from fleet import VEHICLES, get_recommended_vehicle
from logging_setup import configure_logging
from payments.checkout import reprice_booking
from wizard import BookingWizard, SessionDraftStore

def main():
    configure_logging("INFO")

    store = SessionDraftStore()
    store.set(json.dumps({
        "version": "2.0",
        "serviceType": "distance",
        "transferType": "return",
        "pickup": {"address": "Barcelona Airport (BCN)", "placeId": "bcn-airport", "type": "airport"},
        "dropoff": {"address": "Hotel Arts Barcelona", "placeId": "hotel-arts"},
        "pickupDateTime": {"date": "2026-07-01", "time": "09:00"},
        "returnDateTime": {"date": "2026-07-03", "time": "18:00"},
        "passengers": {"count": 2, "luggage": 2},
    }))

    wizard = BookingWizard()
    wizard.hydrate_from_source(store, step_param=1)
    print("=== Hydrated ===")
    print("step:", wizard.current_step, "| draft left in storage:", store.get() is not None)
    print("return leg:", wizard.draft.date_time.return_date, wizard.draft.date_time.return_time)

    provider = MockDistanceProvider(routes={("bcn-airport", "hotel-arts"): (15800, 1320)})
    wizard.update(lookup_distance_patch(provider, wizard.draft))
    print("distance km:", wizard.draft.distance, "| minutes:", wizard.draft.duration)

    print("\n=== Ride details ===")
    print("can advance:", wizard.go_to_next_step(), "-> step", wizard.current_step)

    vehicle = get_recommended_vehicle(VEHICLES, wizard.draft.passengers.count, wizard.draft.passengers.luggage)
    wizard.update({"selected_vehicle": vehicle})
    estimate = wizard.recalculate_pricing()
    print("\n=== Vehicle ===")
    print("selected:", vehicle.name, "| estimate:", round(estimate.total, 2), estimate.currency)
    wizard.go_to_next_step()

    wizard.update({"passenger_details": {"first_name": "Ana", "last_name": "Puig"}})
    wizard.update({"passenger_details": {"email": "ana@example.com", "phone": "600111222"}})
    print("\n=== Contact ===")
    print("can advance:", wizard.go_to_next_step(), "-> step", wizard.current_step)

    priced = reprice_booking(wizard.draft)
    print("\n=== Server re-pricing ===")
    print(json.dumps(priced.pricing.model_dump(by_alias=True), indent=2))


if __name__ == "__main__":
    main()
