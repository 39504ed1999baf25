from __future__ import annotations

import unittest

from app.mappers.field_mapper import (
    LEGACY_MAPPING_TABLE,
    build_csv_template,
    check_field_presence,
    suggest_field_mapping,
    suggest_mapping,
    template_headers,
    transform_to_canonical,
)


class TestSuggestMapping(unittest.TestCase):
    def test_lookup_ignores_case_and_surrounding_whitespace(self) -> None:
        self.assertEqual(suggest_mapping(" MRR "), "mrr")
        self.assertEqual(suggest_mapping("mrr"), "mrr")
        self.assertEqual(suggest_mapping("Monthly_Recurring_Revenue"), "mrr")

    def test_covers_core_import_fields(self) -> None:
        expected = {
            "customer_id": "client.id",
            "company_name": "company.name",
            "contact_name": "contact.name",
            "email": "contact.email",
            "start_date": "contract.startDate",
            "expiry_date": "contract.endDate",
            "next_renewal": "renewal.date",
            "monthly_value": "mrr",
            "clv": "ltv",
            "tenure": "subscribedMonths",
        }
        for legacy, canonical in expected.items():
            with self.subTest(legacy=legacy):
                self.assertEqual(suggest_mapping(legacy), canonical)

    def test_unmatched_or_non_string_returns_none(self) -> None:
        self.assertIsNone(suggest_mapping("favourite_colour"))
        self.assertIsNone(suggest_mapping(None))
        self.assertIsNone(suggest_mapping(42))

    def test_table_is_read_only(self) -> None:
        with self.assertRaises(TypeError):
            LEGACY_MAPPING_TABLE["mrr"] = "ltv"  # type: ignore[index]

    def test_suggest_field_mapping_omits_unmatched_headers(self) -> None:
        mapping = suggest_field_mapping(["Client_ID", "Company", "Notes"])
        self.assertEqual(mapping, {"Client_ID": "client.id", "Company": "company.name"})


class TestCheckFieldPresence(unittest.TestCase):
    def test_empty_dataset_reports_every_path_missing(self) -> None:
        required = ["company.name", "mrr", "renewal.date"]
        presence = check_field_presence(required, [])

        self.assertFalse(presence.has_all)
        self.assertEqual(presence.missing, required)
        self.assertEqual(presence.available, [])

    def test_only_first_record_is_sampled(self) -> None:
        dataset = [
            {"company": {"name": "Acme"}},
            {"company": {"name": "Beta"}, "mrr": 100},
        ]
        presence = check_field_presence(["company.name", "mrr"], dataset)

        self.assertFalse(presence.has_all)
        self.assertEqual(presence.available, ["company.name"])
        self.assertEqual(presence.missing, ["mrr"])

    def test_zero_counts_as_present(self) -> None:
        presence = check_field_presence(["mrr", "health.score"], [{"mrr": 0, "health": {"score": 0}}])
        self.assertTrue(presence.has_all)


class TestTransformToCanonical(unittest.TestCase):
    def test_drops_empty_and_null_values(self) -> None:
        records = transform_to_canonical(
            [{"a": "", "b": None, "c": "x"}],
            {"a": "p.q", "b": "p.r", "c": "p.s"},
        )
        self.assertEqual(records, [{"p": {"s": "x"}}])

    def test_writes_flat_and_nested_paths_in_order(self) -> None:
        rows = [
            {"Company": "Acme", "MRR": "1500", "Ignored": "y"},
            {"Company": "Beta", "MRR": "200"},
        ]
        records = transform_to_canonical(rows, {"Company": "company.name", "MRR": "mrr"})

        self.assertEqual(
            records,
            [
                {"company": {"name": "Acme"}, "mrr": "1500"},
                {"company": {"name": "Beta"}, "mrr": "200"},
            ],
        )

    def test_skips_unmapped_targets_and_non_mapping_rows(self) -> None:
        records = transform_to_canonical(
            [{"a": "1", "b": "2"}, "not-a-row"],
            {"a": "mrr", "b": None},
        )
        self.assertEqual(records, [{"mrr": "1"}, {}])


class TestCSVTemplate(unittest.TestCase):
    def test_header_row_follows_registry_order(self) -> None:
        self.assertEqual(
            template_headers(),
            [
                "client_id",
                "company_name",
                "contact_name",
                "contact_email",
                "contract_startDate",
                "contract_endDate",
                "renewal_date",
                "mrr",
                "ltv",
                "subscribedMonths",
            ],
        )

    def test_template_has_header_and_one_example_row(self) -> None:
        lines = build_csv_template().splitlines()

        self.assertEqual(len(lines), 2)
        self.assertEqual(lines[0], ",".join(template_headers()))
        self.assertTrue(lines[1].startswith("CLIENT_001,Example Company Inc,John Doe,john@example.com"))
        self.assertTrue(lines[1].endswith("5000,60000,12"))

    def test_template_headers_map_back_to_their_fields(self) -> None:
        headers = template_headers()
        mapping = suggest_field_mapping(headers)

        self.assertEqual(list(mapping), headers)
        for header in headers:
            self.assertEqual(mapping[header], header.replace("_", "."))


if __name__ == "__main__":
    unittest.main()
