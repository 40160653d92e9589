from __future__ import annotations

from typing import Iterable, Mapping

from pydantic import BaseModel, Field, ValidationError

from .collection import Collection
from .errors import InvalidQuery
from .values import Document, canonical_text, resolve_path

DEFAULT_PAGE_LIMIT = 10
RESERVED_PARAMS = ("page", "limit")


class ListQuery(BaseModel):
    """
    A listing request: optional page window plus field filters.

    filters maps a dot-separated path to the set of accepted textual values.
    """

    page: int | None = Field(default=None, ge=0)
    limit: int | None = Field(default=None, ge=0)
    filters: dict[str, set[str]] = Field(default_factory=dict)

    @classmethod
    def from_params(cls, params: Iterable[tuple[str, str]]) -> "ListQuery":
        """
        Build from raw query-string pairs. Repeated filter keys accumulate
        accepted values (?status=active&status=new).
        """
        raw: dict[str, str] = {}
        filters: dict[str, set[str]] = {}
        for key, value in params:
            if key in RESERVED_PARAMS:
                raw[key] = value
            else:
                filters.setdefault(key, set()).add(value)
        try:
            return cls(page=raw.get("page"), limit=raw.get("limit"), filters=filters)
        except ValidationError as e:
            fields = sorted({str(err["loc"][0]) for err in e.errors() if err.get("loc")})
            raise InvalidQuery(f"invalid query parameter(s): {', '.join(fields)}") from e

    def window(self) -> tuple[int, int] | None:
        if self.page is None:
            return None
        limit = self.limit if self.limit is not None else DEFAULT_PAGE_LIMIT
        start = self.page * limit
        return start, start + limit


def matches(doc: Document, filters: Mapping[str, set[str]]) -> bool:
    for path, accepted in filters.items():
        text = canonical_text(resolve_path(doc, path))
        if text is None or text not in accepted:
            return False
    return True


def run_query(collection: Collection, query: ListQuery) -> list[Document]:
    """
    Sort ids ascending, cut the page window, then filter inside that window.

    Filtering after the window means a page may hold fewer than `limit`
    matches while more matches exist on other pages.
    """
    ids = collection.sorted_ids()
    window = query.window()
    if window is not None:
        start, end = window
        ids = ids[start:end]

    results: list[Document] = []
    for item_id in ids:
        doc = collection.get(item_id)
        if doc is None:
            continue
        if query.filters and not matches(doc, query.filters):
            continue
        results.append(doc)
    return results
