"""Gallery service — paginated public view of opted-in transformations."""

from sceneit_engine.common.config import SceneItSettings
from sceneit_engine.common.dates import parse_date_bound
from sceneit_engine.gallery.schemas import GalleryItem, GalleryResponse
from sceneit_engine.storage.base import StorageBackend, TransformationFilter


class GalleryService:
    def __init__(self, settings: SceneItSettings, storage: StorageBackend):
        self.settings = settings
        self.storage = storage

    async def list_gallery(
        self,
        page: int = 1,
        per_page: int | None = None,
        style_key: str | None = None,
        search: str | None = None,
        date_from: str | None = None,
        date_to: str | None = None,
    ) -> GalleryResponse:
        """Newest first. Only opted-in records are eligible, whatever the filters."""
        page = max(1, page)
        if per_page is None:
            per_page = self.settings.gallery_default_page_size
        per_page = min(self.settings.gallery_max_page_size, max(1, per_page))

        filters = TransformationFilter(
            opt_in_only=True,
            style_key=style_key or None,
            search_text=search or None,
            date_from=parse_date_bound(date_from),
            date_to=parse_date_bound(date_to, end=True),
        )
        items, total = await self.storage.query_transformations(filters, page, per_page)
        return GalleryResponse(
            transformations=[GalleryItem.model_validate(t, from_attributes=True) for t in items],
            total=total,
            page=page,
            per_page=per_page,
        )
