import re

from fastapi import Query

from app.config import settings

_LEADING_INT_RE = re.compile(r"\s*([+-]?\d+)")
_WHOLE_INT_RE = re.compile(r"\s*[+-]?\d+\s*")


def _lenient_int(raw: str | None, default: int, minimum: int) -> int:
    """
    Parse the leading integer of *raw* (``"1.5"`` -> 1, ``"12abc"`` -> 12),
    falling back to *default* when there is none or it is below *minimum*.
    """
    if raw is None:
        return default
    match = _LEADING_INT_RE.match(raw)
    if match is None:
        return default
    value = int(match.group(1))
    return value if value >= minimum else default


def _post_id(raw: str | None) -> int | str | None:
    """Empty means no filter; a whole integer is an id; anything else stays a string."""
    if not raw:
        return None
    if _WHOLE_INT_RE.fullmatch(raw):
        return int(raw)
    return raw


class PostListParams:
    """
    Reusable FastAPI dependency that parses the ``getPosts`` query string.

    Usage in a router::

        @router.get("/getPosts")
        async def get_posts(params: PostListParams = Depends()):
            ...

    Attributes
    ----------
    user_id, category, slug, post_id, search_term:
        Optional filters; empty strings are treated as absent.  A
        ``post_id`` that is not a whole integer is passed through as a
        string and matches no post.
    start_index:
        Number of matching posts to skip.  Values without a leading
        integer, or negative ones, fall back to 0.
    limit:
        Maximum posts returned.  Values without a leading integer, or
        non-positive ones, fall back to ``settings.DEFAULT_PAGE_SIZE``.
    order:
        ``"asc"`` sorts oldest-edited first; any other value sorts
        newest-edited first.
    """

    def __init__(
        self,
        user_id: str | None = Query(None, alias="userId"),
        category: str | None = Query(None),
        slug: str | None = Query(None),
        post_id: str | None = Query(None, alias="postId"),
        search_term: str | None = Query(None, alias="searchTerm"),
        start_index: str | None = Query(None, alias="startIndex"),
        limit: str | None = Query(None),
        order: str | None = Query(None, description="'asc' or 'desc' by last edit."),
    ) -> None:
        self.user_id = user_id or None
        self.category = category or None
        self.slug = slug or None
        self.post_id = _post_id(post_id)
        self.search_term = search_term or None
        self.start_index = _lenient_int(start_index, 0, minimum=0)
        self.limit = _lenient_int(limit, settings.DEFAULT_PAGE_SIZE, minimum=1)
        self.order = "asc" if order == "asc" else "desc"

    def as_kwargs(self) -> dict:
        return {
            "user_id": self.user_id,
            "category": self.category,
            "slug": self.slug,
            "post_id": self.post_id,
            "search_term": self.search_term,
            "start_index": self.start_index,
            "limit": self.limit,
            "order": self.order,
        }
