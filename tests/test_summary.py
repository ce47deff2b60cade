import unittest

from participation_intake.rows import StoreRecord
from participation_intake.summary import build_upload_summary, records_frame, render_summary_text, round_one_decimal

RECORDS = (
    StoreRecord("Main St A031", 80.0),
    StoreRecord("Downtown area 7", 60.0),
    StoreRecord("Harbour Outlet", 150.0, "a12"),
    StoreRecord("Kiosk A031", 40.0),
)


class UploadSummaryTests(unittest.TestCase):
    def test_headline_figures(self):
        summary = build_upload_summary(RECORDS)
        self.assertEqual(summary["total_stores"], 4)
        self.assertEqual(summary["average_participation"], 82.5)
        self.assertEqual(summary["best_store"], {"store": "Harbour Outlet", "participation": 150.0})
        self.assertEqual(summary["areas_detected"], 3)
        self.assertEqual(summary["out_of_range_count"], 1)

    def test_area_breakdown_is_sorted_by_area_number(self):
        areas = build_upload_summary(RECORDS)["areas"]
        self.assertEqual([area["code"] for area in areas], ["A007", "A12", "A031"])
        self.assertEqual(areas[2]["stores"], 2)
        self.assertEqual(areas[2]["average_participation"], 60.0)
        self.assertEqual(areas[1]["display"], "Area 12")

    def test_half_way_averages_round_up(self):
        summary = build_upload_summary([StoreRecord("A", 80.0), StoreRecord("B", 84.5)])
        self.assertEqual(summary["average_participation"], 82.3)
        self.assertEqual(summary["areas"][0]["average_participation"], 82.3)

    def test_round_one_decimal(self):
        self.assertEqual(round_one_decimal(0.25), 0.3)
        self.assertEqual(round_one_decimal(-0.25), -0.3)
        self.assertEqual(round_one_decimal(float("inf")), float("inf"))

    def test_best_store_display_rounds_half_up(self):
        text = render_summary_text(build_upload_summary([StoreRecord("Top", 84.25)]))
        self.assertIn("- Best store: Top (84.3%)", text)

    def test_best_store_tie_keeps_file_order(self):
        summary = build_upload_summary([StoreRecord("First", 90.0), StoreRecord("Second", 90.0)])
        self.assertEqual(summary["best_store"]["store"], "First")

    def test_empty_record_set_is_rejected(self):
        with self.assertRaises(ValueError):
            build_upload_summary([])

    def test_frame_has_one_row_per_record(self):
        df = records_frame(RECORDS)
        self.assertEqual(len(df), 4)
        self.assertEqual(list(df["area"]), ["A031", "A007", "A12", "A031"])

    def test_rendered_text(self):
        text = render_summary_text(build_upload_summary(RECORDS))
        self.assertIn("Successfully processed 4 store records!", text)
        self.assertIn("- Average participation: 82.5%", text)
        self.assertIn("- Best store: Harbour Outlet (150.0%)", text)
        self.assertIn("- Areas detected: 3", text)
        self.assertIn("- Values outside 0-100%: 1", text)


if __name__ == "__main__":
    unittest.main()
