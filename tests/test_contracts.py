import unittest
from pathlib import Path

from participation_intake.contracts import CONTRACT_VERSIONS, build_contract, build_run_summary
from participation_intake.errors import EmptyOrHeaderOnly, InvalidFileType, MissingRequiredColumns, NoValidRows


class ContractTests(unittest.TestCase):
    def test_build_contract_uses_registered_version(self):
        contract = build_contract("participation_intake.ingest")
        self.assertEqual(contract, {"name": "participation_intake.ingest", "version": CONTRACT_VERSIONS["participation_intake.ingest"]})
        with self.assertRaises(KeyError):
            build_contract("participation_intake.unknown")

    def test_run_summary_shape(self):
        summary = build_run_summary(
            command="ingest",
            input_path=Path("week1.csv"),
            warnings=["a", "b"],
            metrics={"records": 3},
        )
        self.assertEqual(summary["tool"], "participation-intake")
        self.assertEqual(summary["input_file"], "week1.csv")
        self.assertIsNone(summary["output_file"])
        self.assertEqual(summary["warnings_count"], 2)
        self.assertEqual(summary["metrics"], {"records": 3})
        self.assertTrue(summary["generated_at"].endswith("Z"))


class RejectionPayloadTests(unittest.TestCase):
    def test_rejections_serialise_their_details(self):
        self.assertEqual(EmptyOrHeaderOnly().to_dict()["code"], "empty_or_header_only")
        self.assertEqual(NoValidRows(3).to_dict()["skipped_rows"], 3)
        self.assertEqual(InvalidFileType("data.txt").to_dict()["file_name"], "data.txt")

        payload = MissingRequiredColumns(["ID", "Value"], ["store", "participation"]).to_dict()
        self.assertEqual(payload["code"], "missing_required_columns")
        self.assertEqual(payload["headers"], ["ID", "Value"])
        self.assertEqual(payload["missing"], ["store", "participation"])


if __name__ == "__main__":
    unittest.main()
