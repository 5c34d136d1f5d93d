"""
Pure helpers used by the post service: slug derivation, list-filter
construction and the "last month" cut-off.

Nothing here touches the database session, so every function can be
tested without a running store.
"""
import calendar
import re
from datetime import datetime

from sqlalchemy import ColumnElement, false, or_

from app.models import Post

_SLUG_STRIP_RE = re.compile(r"[^a-z0-9-]")
_LIKE_ESCAPE = "\\"


def slugify(title: str) -> str:
    """
    Return the slug for *title*: lower-cased, spaces turned into hyphens,
    then every character outside ``[a-z0-9-]`` removed.

    The transform is lossy; distinct titles may share a slug and the
    result may be empty.  Collisions are left to the store's unique
    constraint.
    """
    return _SLUG_STRIP_RE.sub("", title.lower().replace(" ", "-"))


def _escape_like(term: str) -> str:
    return (
        term.replace(_LIKE_ESCAPE, _LIKE_ESCAPE * 2)
        .replace("%", _LIKE_ESCAPE + "%")
        .replace("_", _LIKE_ESCAPE + "_")
    )


def build_post_filter(
    user_id: str | None = None,
    category: str | None = None,
    slug: str | None = None,
    post_id: int | str | None = None,
    search_term: str | None = None,
) -> list[ColumnElement[bool]]:
    """
    Map the optional list parameters to a list of predicates that the
    caller ANDs together.

    Each provided field becomes an equality predicate.  A search term
    becomes a case-insensitive substring match over title OR content.
    Absent or empty inputs contribute nothing, so no input means
    match-all.  A non-integer *post_id* cannot name any post and
    becomes an always-false predicate.
    """
    clauses: list[ColumnElement[bool]] = []
    if user_id:
        clauses.append(Post.user_id == user_id)
    if category:
        clauses.append(Post.category == category)
    if slug:
        clauses.append(Post.slug == slug)
    if isinstance(post_id, int):
        clauses.append(Post.id == post_id)
    elif post_id:
        clauses.append(false())
    if search_term:
        pattern = f"%{_escape_like(search_term)}%"
        clauses.append(
            or_(
                Post.title.ilike(pattern, escape=_LIKE_ESCAPE),
                Post.content.ilike(pattern, escape=_LIKE_ESCAPE),
            )
        )
    return clauses


def one_month_ago(now: datetime) -> datetime:
    """
    Midnight of the same day-of-month one calendar month before *now*.

    The day is clipped to the length of the target month, so 31 March
    maps to 28 (or 29) February.  The timezone of *now* is kept.
    """
    year, month = (now.year - 1, 12) if now.month == 1 else (now.year, now.month - 1)
    day = min(now.day, calendar.monthrange(year, month)[1])
    return now.replace(year=year, month=month, day=day, hour=0, minute=0, second=0, microsecond=0)
