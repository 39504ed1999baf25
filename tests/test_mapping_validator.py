from __future__ import annotations

import unittest

from app.domain.client_record import REQUIRED_CANONICAL_FIELDS
from app.validators.mapping_validator import MappingValidator, SchemaMappingError, find_duplicate_mappings


class TestMappingValidator(unittest.TestCase):
    def setUp(self) -> None:
        self.validator = MappingValidator()
        self.headers = ("Company", "Contact", "Email", "Start", "End", "Renewal", "MRR")
        self.full_mapping = {
            "Company": "company.name",
            "Contact": "contact.name",
            "Email": "contact.email",
            "Start": "contract.startDate",
            "End": "contract.endDate",
            "Renewal": "renewal.date",
            "MRR": "mrr",
        }

    def test_accepts_complete_mapping(self) -> None:
        self.validator.validate(
            mapping=self.full_mapping,
            source_headers=self.headers,
            require_all_fields=True,
        )

    def test_raises_on_missing_required_fields(self) -> None:
        with self.assertRaises(SchemaMappingError) as ctx:
            self.validator.validate(
                mapping={"Company": "company.name", "MRR": "mrr"},
                source_headers=self.headers,
                require_all_fields=True,
            )

        codes = {error.code for error in ctx.exception.errors}
        self.assertEqual(codes, {"required_field_unmapped"})
        unmapped = {error.canonical_field for error in ctx.exception.errors}
        self.assertIn("renewal.date", unmapped)
        self.assertNotIn("ltv", unmapped)

    def test_missing_required_fields_allowed_by_default(self) -> None:
        self.validator.validate(
            mapping={"Company": "company.name"},
            source_headers=self.headers,
        )

    def test_raises_on_invalid_source_column(self) -> None:
        with self.assertRaises(SchemaMappingError) as ctx:
            self.validator.validate(
                mapping={"Company": "company.name", "Revenue": "mrr"},
                source_headers=self.headers,
            )

        errors = ctx.exception.errors
        self.assertEqual([error.code for error in errors], ["unknown_source_column"])
        self.assertEqual(errors[0].source_column, "Revenue")

    def test_raises_on_unknown_canonical_field(self) -> None:
        with self.assertRaises(SchemaMappingError) as ctx:
            self.validator.validate(
                mapping={"Company": "company.title"},
                source_headers=self.headers,
            )

        self.assertEqual(ctx.exception.errors[0].code, "invalid_canonical_field")
        self.assertEqual(str(ctx.exception), "Field mapping validation failed: invalid_canonical_field.")

    def test_raises_on_duplicate_targets(self) -> None:
        with self.assertRaises(SchemaMappingError) as ctx:
            self.validator.validate(
                mapping={"Company": "company.name", "Contact": "company.name"},
                source_headers=self.headers,
            )

        payload = ctx.exception.to_dict()
        self.assertEqual(payload["errors"][0]["code"], "duplicate_canonical_field")
        self.assertEqual(payload["errors"][0]["canonical_field"], "company.name")
        self.assertEqual(payload["errors"][0]["context"], {"source_columns": ["Company", "Contact"]})

    def test_analytics_paths_are_valid_targets(self) -> None:
        self.validator.validate(
            mapping={"Company": "company.name", "MRR": "health.score"},
            source_headers=self.headers,
        )


class TestMappingReview(unittest.TestCase):
    def setUp(self) -> None:
        self.validator = MappingValidator()

    def test_review_reports_presence_missing_and_unmapped(self) -> None:
        rows = [{"Company": "Acme", "MRR": "", "Notes": "vip"}]
        review = self.validator.review(
            mapping={"Company": "company.name", "MRR": "mrr"},
            rows=rows,
        )

        self.assertEqual(review.presence.available, ["company.name"])
        self.assertEqual(review.presence.missing, ["mrr"])
        self.assertFalse(review.presence.has_all)
        self.assertEqual(
            review.missing_required,
            [field for field in REQUIRED_CANONICAL_FIELDS if field not in {"company.name", "mrr"}],
        )
        self.assertEqual(review.unmapped_fields, ["Notes"])
        self.assertEqual(review.duplicate_mappings, [])
        self.assertFalse(review.has_required_fields)

    def test_review_flags_duplicates(self) -> None:
        review = self.validator.review(
            mapping={"a": "mrr", "b": "mrr", "c": None},
            rows=[{"a": "1", "b": "2", "c": "3"}],
        )
        self.assertEqual(review.duplicate_mappings, ["mrr"])
        self.assertEqual(review.unmapped_fields, ["c"])

    def test_find_duplicate_mappings_ignores_empty_targets(self) -> None:
        self.assertEqual(find_duplicate_mappings({"a": None, "b": "", "c": None}), [])


if __name__ == "__main__":
    unittest.main()
