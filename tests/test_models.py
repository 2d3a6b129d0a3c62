import unittest

from pydantic import ValidationError

from parkfinder.models import NewParkingLot, ParkingLot, RatingRequest


class TestParkingLot(unittest.TestCase):
    def test_parses_service_payload(self):
        lot = ParkingLot.model_validate(
            {
                "_id": 7,
                "name": "Central",
                "latitude": 52.1,
                "longitude": 21.0,
                "capacity": 40,
                "available": 12,
                "rate": 3.5,
                "ratings": [4, 5],
                "__v": 0,
            }
        )
        self.assertEqual(lot.id, 7)
        self.assertEqual(lot.ratings, (4, 5))
        self.assertEqual(lot.coordinates.latitude, 52.1)

    def test_ratings_default_empty(self):
        lot = ParkingLot.model_validate(
            {"_id": 1, "name": "A", "latitude": 0, "longitude": 0, "capacity": 1, "available": 1, "rate": 0}
        )
        self.assertEqual(lot.ratings, ())

    def test_available_clamped_to_capacity(self):
        lot = ParkingLot(id=1, name="A", latitude=0, longitude=0, capacity=5, available=9, rate=1)
        self.assertEqual(lot.available, 5)

    def test_clamp_applies_to_service_payload(self):
        lot = ParkingLot.model_validate(
            {"_id": 2, "name": "B", "latitude": 0, "longitude": 0, "capacity": "4", "available": "6", "rate": 1}
        )
        self.assertEqual(lot.available, 4)
        with self.assertRaises(ValidationError):
            lot.available = 1

    def test_clamp_leaves_bad_counts_to_validation(self):
        with self.assertRaises(ValidationError):
            ParkingLot.model_validate(
                {"_id": 2, "name": "B", "latitude": 0, "longitude": 0, "capacity": "many", "available": 1, "rate": 1}
            )

    def test_negative_available_rejected(self):
        with self.assertRaises(ValidationError):
            ParkingLot(id=1, name="A", latitude=0, longitude=0, capacity=5, available=-1, rate=1)

    def test_frozen(self):
        lot = ParkingLot(id=1, name="A", latitude=0, longitude=0, capacity=5, available=2, rate=1)
        with self.assertRaises(ValidationError):
            lot.available = 3

    def test_with_available_returns_copy(self):
        lot = ParkingLot(id=1, name="A", latitude=0, longitude=0, capacity=5, available=2, rate=1)
        other = lot.with_available(1)
        self.assertEqual(other.available, 1)
        self.assertEqual(lot.available, 2)


class TestRequests(unittest.TestCase):
    def test_rating_bounds(self):
        RatingRequest(id="1", rating=5)
        with self.assertRaises(ValidationError):
            RatingRequest(id="1", rating=0)
        with self.assertRaises(ValidationError):
            RatingRequest(id="1", rating=6)

    def test_new_lot_dump(self):
        lot = NewParkingLot(name="A", latitude=1.5, longitude=2.5, capacity=10, available=4, rate=3)
        self.assertEqual(
            lot.model_dump(),
            {"name": "A", "latitude": 1.5, "longitude": 2.5, "capacity": 10, "available": 4, "rate": 3},
        )


if __name__ == "__main__":
    unittest.main()
