import unittest

from parkfinder.models import Coordinates
from parkfinder.services import describe_lots, filter_by_name, format_lot, lot_details

from fakes import make_lot


HERE = Coordinates(latitude=52.2297, longitude=21.0122)


class TestFilterByName(unittest.TestCase):
    def setUp(self):
        self.lots = [make_lot(1, name="Central Garage"), make_lot(2, name="Old Town Lot")]

    def test_case_insensitive_substring(self):
        self.assertEqual([l.id for l in filter_by_name(self.lots, "GARAGE")], [1])
        self.assertEqual([l.id for l in filter_by_name(self.lots, "o")], [1, 2])

    def test_blank_query_keeps_all(self):
        self.assertEqual(len(filter_by_name(self.lots, "  ")), 2)

    def test_no_match(self):
        self.assertEqual(filter_by_name(self.lots, "airport"), [])


class TestLotDetails(unittest.TestCase):
    def test_without_origin(self):
        row = lot_details(make_lot(1, ratings=[2, 4]), None)
        self.assertIsNone(row["distance_km"])
        self.assertIsNone(row["eta_min"])
        self.assertEqual(row["average_rating"], 3)

    def test_eta_uses_speed(self):
        far = make_lot(1, latitude=52.2297 + 0.18, longitude=21.0122)
        row = lot_details(far, HERE, speed_kmh=20)
        self.assertAlmostEqual(row["eta_min"], row["distance_km"] / 20 * 60)

    def test_nearest_first(self):
        lots = [
            make_lot(1, latitude=52.5, longitude=21.0),
            make_lot(2, latitude=52.23, longitude=21.01),
        ]
        rows = describe_lots(lots, HERE, nearest_first=True)
        self.assertEqual([r["id"] for r in rows], [2, 1])
        self.assertEqual([r["id"] for r in describe_lots(lots, HERE)], [1, 2])

    def test_format(self):
        text = format_lot(lot_details(make_lot(1, name="Central", available=3, capacity=10, rate=5), HERE))
        self.assertIn("#1 Central", text)
        self.assertIn("3/10 free", text)
        self.assertIn("0.00 km", text)
        self.assertIn("rating 0.0", text)


if __name__ == "__main__":
    unittest.main()
