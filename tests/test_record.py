"""Tests for mlmunion.models.record.parse_record."""

from datetime import datetime, timezone

from mlmunion.models.record import Invalid, Ok, parse_record

_ID = "11111111-1111-1111-1111-111111111111"


class TestParseRecord:
    def test_blog_row(self):
        result = parse_record(
            {
                "id": _ID,
                "slug": "top-10-tips",
                "title": "Top 10 Tips",
                "content": "<p>Body</p>",
                "cover_image": "https://cdn.example.com/cover.jpg",
                "created_at": "2024-01-05T10:30:00+00:00",
                "author": {"username": "jdoe", "full_name": "Jane Doe"},
            }
        )
        assert isinstance(result, Ok)
        record = result.record
        assert record.slug == "top-10-tips"
        assert record.title == "Top 10 Tips"
        assert record.body == "<p>Body</p>"
        assert record.image == "https://cdn.example.com/cover.jpg"
        assert record.created_at == datetime(2024, 1, 5, 10, 30, tzinfo=timezone.utc)
        assert record.author_name == "Jane Doe"

    def test_company_row_uses_name_and_logo(self):
        result = parse_record(
            {
                "id": _ID,
                "slug": "acme-mlm",
                "name": "Acme MLM",
                "description": "Wellness products",
                "logo_url": "https://cdn.example.com/logo.png",
                "country_name": "India",
                "established": "1998",
            }
        )
        assert isinstance(result, Ok)
        assert result.record.title == "Acme MLM"
        assert result.record.body == "Wellness products"
        assert result.record.image == "https://cdn.example.com/logo.png"
        assert result.record.established == 1998

    def test_author_as_list(self):
        result = parse_record({"id": _ID, "user": [{"username": "seller1"}]})
        assert isinstance(result, Ok)
        assert result.record.author_name == "seller1"

    def test_custom_slug_column(self):
        result = parse_record(
            {"id": _ID, "username": "jane", "full_name": None, "city": "Pune", "country": "India"},
            slug_column="username",
        )
        assert isinstance(result, Ok)
        assert result.record.slug == "jane"
        assert result.record.title == "jane"
        assert result.record.location == "Pune, India"

    def test_date_only_timestamp(self):
        result = parse_record({"id": _ID, "created_at": "2024-01-05"})
        assert isinstance(result, Ok)
        assert result.record.created_at.date().isoformat() == "2024-01-05"

    def test_last_updated_feeds_updated_at(self):
        result = parse_record({"id": _ID, "last_updated": "2024-03-01T00:00:00Z"})
        assert isinstance(result, Ok)
        assert result.record.updated_at.date().isoformat() == "2024-03-01"

    def test_unparseable_year_is_dropped(self):
        result = parse_record({"id": _ID, "established": "N/A"})
        assert isinstance(result, Ok)
        assert result.record.established is None

    def test_numeric_id_is_coerced(self):
        result = parse_record({"id": 42, "slug": None})
        assert isinstance(result, Ok)
        assert result.record.id == "42"


class TestCanonicalSlug:
    def test_slug_present(self):
        result = parse_record({"id": _ID, "slug": "acme-mlm"})
        assert result.record.canonical_slug == "acme-mlm"

    def test_null_slug_falls_back_to_id(self):
        result = parse_record({"id": "abc123", "slug": None})
        assert result.record.canonical_slug == "abc123"

    def test_blank_slug_falls_back_to_id(self):
        result = parse_record({"id": "abc123", "slug": "   "})
        assert result.record.slug is None
        assert result.record.canonical_slug == "abc123"

    def test_alternate_column_fills_missing_slug(self):
        row = {"id": "abc123", "slug": None, "page": "about"}
        assert parse_record(row, alt_slug_column="page").record.canonical_slug == "about"
        assert parse_record(row).record.canonical_slug == "abc123"

    def test_slug_wins_over_alternate_column(self):
        row = {"id": "abc123", "slug": "about-us", "page": "about"}
        assert parse_record(row, alt_slug_column="page").record.canonical_slug == "about-us"


class TestInvalidRows:
    def test_missing_id(self):
        result = parse_record({"slug": "orphan"})
        assert isinstance(result, Invalid)
        assert "id" in result.reason

    def test_blank_id(self):
        result = parse_record({"id": "  ", "slug": "orphan"})
        assert isinstance(result, Invalid)

    def test_non_dict_row(self):
        result = parse_record(["not", "a", "row"])
        assert isinstance(result, Invalid)

    def test_bad_timestamp(self):
        result = parse_record({"id": _ID, "created_at": "yesterday-ish"})
        assert isinstance(result, Invalid)
        assert "created_at" in result.reason
