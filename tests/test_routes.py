"""End-to-end tests of the HTTP surface through FastAPI's TestClient."""

import xml.etree.ElementTree as ET
from unittest.mock import patch

from mlmunion.services.sitemap import SITEMAP_NS

SITE_URL = "https://www.mlmunion.in"

_ID = "11111111-1111-1111-1111-111111111111"
_ID2 = "22222222-2222-2222-2222-222222222222"


class TestHealth:
    def test_root(self, client):
        resp = client.get("/")
        assert resp.status_code == 200
        assert "running" in resp.json()["message"]


class TestCompanyDetail:
    def test_canonical_url_renders(self, client, store):
        store.add(
            "mlm_companies", id=_ID, slug="acme-mlm", name="Acme MLM",
            country_name="India", status="approved",
        )
        resp = client.get("/company/india/acme-mlm")
        assert resp.status_code == 200
        data = resp.json()
        assert data["slug"] == "acme-mlm"
        assert data["canonical_url"] == f"{SITE_URL}/company/india/acme-mlm"
        assert data["metadata"]["structured_data"]["@type"] == "Organization"

    def test_id_request_redirects_permanently(self, client, store):
        store.add(
            "mlm_companies", id=_ID, slug="acme-mlm", country_name="India", status="approved"
        )
        resp = client.get(f"/company/india/{_ID}")
        assert resp.status_code == 301
        assert resp.headers["location"] == "/company/india/acme-mlm"

    def test_wrong_country_redirects(self, client, store):
        store.add(
            "mlm_companies", id=_ID, slug="acme-mlm", country_name="India", status="approved"
        )
        resp = client.get("/company/usa/acme-mlm")
        assert resp.status_code == 301
        assert resp.headers["location"] == "/company/india/acme-mlm"

    def test_unknown_company_is_404(self, client):
        resp = client.get("/company/india/nobody")
        assert resp.status_code == 404
        assert resp.json() == {"detail": "Not found"}

    def test_unapproved_company_is_404(self, client, store):
        store.add("mlm_companies", id=_ID, slug="acme-mlm", status="pending")
        assert client.get("/company/unknown/acme-mlm").status_code == 404


class TestNewsDetail:
    def test_null_slug_renders_at_id(self, client, store):
        store.add("news", id=_ID, slug=None, title="Untitled", published=True)
        resp = client.get(f"/news/{_ID}")
        assert resp.status_code == 200
        assert resp.json()["canonical_url"] == f"{SITE_URL}/news/{_ID}"

    def test_unpublished_redirects_to_index(self, client, store):
        store.add("news", id=_ID, slug="draft-story", published=False)
        resp = client.get("/news/draft-story")
        assert resp.status_code == 307
        assert resp.headers["location"] == "/news"

    def test_id_route_with_stale_slug(self, client, store):
        store.add("news", id=_ID, slug="big-launch", title="Big launch", published=True)
        resp = client.get(f"/news/old-title/{_ID}")
        assert resp.status_code == 301
        assert resp.headers["location"] == f"/news/big-launch/{_ID}"

    def test_id_route_canonical_pair(self, client, store):
        store.add("news", id=_ID, slug="big-launch", title="Big launch", published=True)
        resp = client.get(f"/news/big-launch/{_ID}")
        assert resp.status_code == 200
        assert resp.json()["canonical_url"] == f"{SITE_URL}/news/big-launch/{_ID}"

    def test_store_outage_falls_back_to_index(self, client, store):
        store.fail = True
        resp = client.get("/news/big-launch")
        assert resp.status_code == 307
        assert resp.headers["location"] == "/news"


class TestBlogDetail:
    def test_render_with_metadata(self, client, store):
        store.add(
            "blog_posts", id=_ID, slug="acme-review", title="Acme review",
            content="<p>Honest review of Acme.</p>", meta_keywords="acme, review",
            published=True,
        )
        resp = client.get("/blog/acme-review")
        assert resp.status_code == 200
        metadata = resp.json()["metadata"]
        assert metadata["title"] == "Acme review"
        assert metadata["description"] == "Honest review of Acme."
        assert metadata["keywords"] == ["acme", "review"]
        assert metadata["canonical_url"] == f"{SITE_URL}/blog/acme-review"

    def test_id_redirects_to_slug(self, client, store):
        store.add("blog_posts", id=_ID, slug="acme-review", published=True)
        resp = client.get(f"/blog/{_ID}")
        assert resp.status_code == 301
        assert resp.headers["location"] == "/blog/acme-review"

    def test_missing_post_redirects_to_index(self, client):
        resp = client.get("/blog/no-such-post")
        assert resp.status_code == 307
        assert resp.headers["location"] == "/blog"

    def test_non_id_secondary_segment(self, client, store):
        store.add("blog_posts", id=_ID, slug="acme-review", published=True)
        resp = client.get("/blog/acme-review/not-an-id")
        assert resp.status_code == 307
        assert resp.headers["location"] == "/blog"


class TestOtherDetails:
    def test_classified_case_mismatch_falls_back_to_index(self, client, store):
        store.add("classifieds", id=_ID, slug="used-car", title="Used car", status="active")
        resp = client.get("/classifieds/Used-Car")
        assert resp.status_code == 307
        assert resp.headers["location"] == "/classifieds"

    def test_seller_by_id_redirects_to_username(self, client, store):
        store.add("profiles", id=_ID, username="jane", full_name="Jane", is_direct_seller=True)
        resp = client.get(f"/recommended-direct-sellers/{_ID}")
        assert resp.status_code == 301
        assert resp.headers["location"] == "/recommended-direct-sellers/jane"

    def test_static_page(self, client, store):
        store.add(
            "page_content", id=_ID, slug="about-us", title="About Us",
            content="<h1>About</h1>", is_published=True,
        )
        resp = client.get("/about-us")
        assert resp.status_code == 200
        assert resp.json()["metadata"]["title"] == "About Us - MLM Union"

    def test_static_page_keyed_by_page_column(self, client, store):
        store.add(
            "page_content", id=_ID, slug=None, page="about", title="About",
            is_published=True,
        )
        resp = client.get("/about")
        assert resp.status_code == 200
        assert resp.json()["canonical_url"] == f"{SITE_URL}/about"

    def test_page_key_redirects_to_slug(self, client, store):
        store.add(
            "page_content", id=_ID, slug="about-us", page="about", title="About",
            is_published=True,
        )
        resp = client.get("/about")
        assert resp.status_code == 301
        assert resp.headers["location"] == "/about-us"

    def test_unknown_static_page_is_404(self, client):
        assert client.get("/no-such-page").status_code == 404


class TestListings:
    def _seed(self, store, count):
        for i in range(count):
            store.add(
                "news",
                id=f"{i:08d}-0000-0000-0000-000000000000",
                slug=f"story-{i}",
                title=f"Story {i}",
                content=f"<p>Body {i}</p>",
                created_at=f"2024-01-{i + 1:02d}T00:00:00Z",
                published=True,
            )

    def test_newest_first_with_has_more(self, client, store):
        self._seed(store, 5)
        resp = client.get("/news", params={"page_size": 2})
        assert resp.status_code == 200
        data = resp.json()
        assert data["has_more"] is True
        assert [item["slug"] for item in data["items"]] == ["story-4", "story-3"]
        assert data["items"][0]["url"] == f"{SITE_URL}/news/story-4"
        assert data["items"][0]["description"] == "Body 4"

    def test_last_page(self, client, store):
        self._seed(store, 5)
        data = client.get("/news", params={"page": 3, "page_size": 2}).json()
        assert data["has_more"] is False
        assert [item["slug"] for item in data["items"]] == ["story-0"]

    def test_unpublished_rows_are_hidden(self, client, store):
        store.add("news", id=_ID, slug="public", published=True, created_at="2024-01-02")
        store.add("news", id=_ID2, slug="draft", published=False, created_at="2024-01-03")
        data = client.get("/news").json()
        assert [item["slug"] for item in data["items"]] == ["public"]

    def test_company_listing_urls(self, client, store):
        store.add(
            "mlm_companies", id=_ID, slug="acme-mlm", name="Acme",
            country_name="India", status="approved",
        )
        data = client.get("/companies").json()
        assert data["items"][0]["url"] == f"{SITE_URL}/company/india/acme-mlm"

    def test_invalid_page_size(self, client):
        assert client.get("/blog", params={"page_size": 0}).status_code == 422
        assert client.get("/blog", params={"page_size": 500}).status_code == 422

    def test_store_outage_is_502(self, client, store):
        store.fail = True
        resp = client.get("/classifieds")
        assert resp.status_code == 502


class TestSitemapRoutes:
    def test_index(self, client):
        resp = client.get("/sitemap.xml")
        assert resp.status_code == 200
        assert resp.headers["content-type"].startswith("application/xml")
        assert "s-maxage=3600" in resp.headers["cache-control"]
        root = ET.fromstring(resp.content)
        assert root.tag == f"{{{SITEMAP_NS}}}sitemapindex"

    def test_news_sitemap(self, client, store):
        store.add("news", id=_ID, slug="big-launch", published=True, created_at="2024-01-05")
        resp = client.get("/sitemap-news.xml")
        assert resp.status_code == 200
        assert f"<loc>{SITE_URL}/news/big-launch</loc>" in resp.text
        assert "<lastmod>2024-01-05</lastmod>" in resp.text

    def test_static_sitemap(self, client):
        resp = client.get("/sitemap-static.xml")
        assert resp.status_code == 200
        assert f"<loc>{SITE_URL}/faq</loc>" in resp.text

    def test_store_failure_returns_xml_error(self, client, store):
        store.fail = True
        resp = client.get("/sitemap-companies.xml")
        assert resp.status_code == 500
        assert resp.headers["content-type"].startswith("application/xml")
        assert "cache-control" not in resp.headers
        root = ET.fromstring(resp.content)
        assert root.tag == "error"

    def test_unexpected_error_returns_xml_error(self, client, store):
        store.add("blog_posts", id=_ID, slug="acme-review", published=True)
        with patch(
            "mlmunion.services.sitemap.SitemapEmitter.emit",
            side_effect=RuntimeError("template broke"),
        ):
            resp = client.get("/sitemap-blogs.xml")
        assert resp.status_code == 500
        assert resp.headers["content-type"].startswith("application/xml")
        assert ET.fromstring(resp.content).tag == "error"
