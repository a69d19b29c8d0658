from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel

from mlmunion.models.record import ContentRecord


class PageMetadata(BaseModel):
    """SEO metadata for one rendered page."""

    title: str
    description: Optional[str] = None
    keywords: List[str] = []
    canonical_url: Optional[str] = None
    image: Optional[str] = None
    robots: str = "index, follow"
    open_graph: Dict[str, Any] = {}
    twitter: Dict[str, Any] = {}
    structured_data: Dict[str, Any] = {}  # JSON-LD


class DetailPage(BaseModel):
    resource: str
    id: str
    slug: str
    canonical_url: str
    record: ContentRecord
    metadata: PageMetadata


class ListingItem(BaseModel):
    id: str
    slug: str
    title: str
    url: str
    description: str
    image: Optional[str] = None
    created_at: Optional[datetime] = None


class ListingPage(BaseModel):
    resource: str
    page: int
    page_size: int
    has_more: bool
    items: List[ListingItem]
