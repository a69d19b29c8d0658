"""Per-resource routing configuration for the public content types."""

from dataclasses import dataclass
from typing import Dict, Literal, Optional

Secondary = Literal["id", "country"]


@dataclass(frozen=True)
class ResourceConfig:
    """How one content type is stored, addressed and described.

    ``fail_soft`` resources send unresolved requests back to ``index_path``;
    the others answer with a 404.  ``secondary`` names the extra path segment
    the resource's URLs carry (``"country"`` for companies) or accept
    (``"id"`` for the ``/<slug>/<id>`` article routes).  ``alt_slug_column``
    is a second key column matched when the slug misses, and stands in for
    an empty slug (static pages keyed by ``page``).
    """

    name: str
    table: str
    path: str
    index_path: str
    select: str
    status_column: str
    status_value: object
    fail_soft: bool
    schema_type: str
    default_title: str
    slug_column: str = "slug"
    alt_slug_column: Optional[str] = None
    secondary: Optional[Secondary] = None
    og_type: str = "article"
    title_format: str = "{title}"
    default_image: Optional[str] = None
    changefreq: str = "weekly"
    priority: str = "0.7"
    sitemap_select: str = "id, slug, updated_at, created_at"


_ARTICLE_COLUMNS = (
    "id, slug, title, content, meta_description, meta_keywords, focus_keyword, "
    "created_at, updated_at"
)

NEWS_FALLBACK_IMAGE = (
    "https://images.unsplash.com/photo-1557804506-669a67965ba0"
    "?auto=format&fit=crop&q=80&w=1200"
)

BLOG = ResourceConfig(
    name="blog",
    table="blog_posts",
    path="/blog",
    index_path="/blog",
    select=f"{_ARTICLE_COLUMNS}, cover_image, author:profiles(username, full_name)",
    status_column="published",
    status_value=True,
    fail_soft=True,
    secondary="id",
    schema_type="BlogPosting",
    default_title="Blog Post",
)

NEWS = ResourceConfig(
    name="news",
    table="news",
    path="/news",
    index_path="/news",
    select=f"{_ARTICLE_COLUMNS}, image_url, author:profiles(username, full_name)",
    status_column="published",
    status_value=True,
    fail_soft=True,
    secondary="id",
    schema_type="NewsArticle",
    default_title="News Article",
    default_image=NEWS_FALLBACK_IMAGE,
)

CLASSIFIEDS = ResourceConfig(
    name="classifieds",
    table="classifieds",
    path="/classifieds",
    index_path="/classifieds",
    select=(
        "id, slug, title, description, meta_description, meta_keywords, focus_keyword, "
        "image_url, created_at, updated_at, user:profiles(username, full_name)"
    ),
    status_column="status",
    status_value="active",
    fail_soft=True,
    schema_type="Article",
    og_type="website",
    default_title="Classified",
)

COMPANY = ResourceConfig(
    name="company",
    table="mlm_companies",
    path="/company",
    index_path="/companies",
    select=(
        "id, slug, name, description, meta_description, meta_keywords, focus_keyword, "
        "country_name, country, logo_url, website, headquarters, established, "
        "created_at, updated_at"
    ),
    status_column="status",
    status_value="approved",
    fail_soft=False,
    secondary="country",
    schema_type="Organization",
    og_type="website",
    default_title="Company",
    changefreq="monthly",
    priority="0.8",
    sitemap_select="id, slug, country_name, country, updated_at, created_at",
)

SELLER = ResourceConfig(
    name="seller",
    table="profiles",
    path="/recommended-direct-sellers",
    index_path="/recommended-direct-sellers",
    select=(
        "id, username, full_name, image_url, seller_bio, specialties, city, state, "
        "country, created_at, updated_at"
    ),
    slug_column="username",
    status_column="is_direct_seller",
    status_value=True,
    fail_soft=False,
    schema_type="ProfilePage",
    og_type="profile",
    title_format="{title} - Recommended Direct Seller | {site_name}",
    default_title="Direct Seller",
)

PAGE = ResourceConfig(
    name="page",
    table="page_content",
    path="",
    index_path="/",
    select="id, slug, page, title, content, meta_description, meta_keywords, last_updated",
    alt_slug_column="page",
    status_column="is_published",
    status_value=True,
    fail_soft=False,
    schema_type="WebPage",
    title_format="{title} - {site_name}",
    default_title="Page",
)

RESOURCES: Dict[str, ResourceConfig] = {
    resource.name: resource for resource in (BLOG, NEWS, CLASSIFIEDS, COMPANY, SELLER, PAGE)
}
