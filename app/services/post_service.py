"""
Post service: business logic for the Post aggregate.

Design notes
------------
- Every function takes the request's ``AsyncSession`` and, where
  authorization matters, the ``Requester`` resolved by the router.  No
  function reads ambient request state.
- Functions flush but do not commit; the transaction boundary is owned
  by the ``get_db`` dependency, which rolls back whenever an error
  escapes the route.
- Failures are raised as ``app.errors`` types.  Unique-constraint
  violations (duplicate title or slug) surface as a generic
  ``StoreError``.
- The public list endpoint goes through the cache-aside layer.  Every
  write marks the session, and all cached pages are dropped only after
  ``get_db`` commits, so a concurrent read cannot re-cache the old page.
"""
import logging
from datetime import datetime, timezone

from sqlalchemy import asc, desc, func, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.auth import Requester
from app.cache import cache
from app.config import settings
from app.database import mark_posts_changed
from app.errors import BadRequest, Forbidden, NotFound, StoreError, Unauthorized
from app.models import Post, PostView, utcnow
from app.schemas import PostCreate, PostUpdate
from app.services.filters import build_post_filter, one_month_ago, slugify

logger = logging.getLogger(__name__)

DELETED_MESSAGE = "The post has been deleted"


# ---------------------------------------------------------------------------
# Serialisation helpers
# ---------------------------------------------------------------------------

def _isoformat(value: datetime | None) -> str | None:
    return value.isoformat() if value else None


def _view_to_dict(view: PostView) -> dict:
    return {"userId": view.viewer_id, "viewedAt": _isoformat(view.viewed_at)}


def _post_to_dict(post: Post) -> dict:
    """Serialise a Post ORM instance to the camelCase dict the frontend reads."""
    return {
        "id": post.id,
        "userId": post.user_id,
        "title": post.title,
        "content": post.content,
        "image": post.image,
        "video": post.video,
        "category": post.category,
        "slug": post.slug,
        "views": post.views,
        "viewHistory": [_view_to_dict(v) for v in post.view_history],
        "createdAt": _isoformat(post.created_at),
        "updatedAt": _isoformat(post.updated_at),
    }


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------

def _require_requester(requester: Requester | None) -> Requester:
    if requester is None:
        raise Unauthorized("Unauthorized: Please log in")
    return requester


async def _flush(db: AsyncSession, action: str) -> None:
    try:
        await db.flush()
    except IntegrityError as exc:
        logger.error("Failed to %s post: %s", action, exc.orig)
        raise StoreError() from exc


async def _load_post(db: AsyncSession, post_id: int, refresh: bool = False) -> Post | None:
    q = (
        select(Post)
        .where(Post.id == post_id)
        .options(selectinload(Post.view_history))
    )
    if refresh:
        q = q.execution_options(populate_existing=True)
    result = await db.execute(q)
    return result.scalar_one_or_none()


# ---------------------------------------------------------------------------
# Public service functions
# ---------------------------------------------------------------------------

async def create_post(
    db: AsyncSession, data: PostCreate, requester: Requester | None
) -> dict:
    """
    Create a post owned by *requester* and return its dict.

    The slug is derived from the title here and never again.  A title
    or slug that already exists raises ``StoreError``.
    """
    requester = _require_requester(requester)
    if not data.title or not data.content:
        raise BadRequest("Title and content are required")

    post = Post(
        user_id=requester.id,
        title=data.title,
        content=data.content,
        slug=slugify(data.title),
        category=data.category or settings.DEFAULT_CATEGORY,
        image=data.image or settings.DEFAULT_POST_IMAGE,
        view_history=[],
    )
    db.add(post)
    await _flush(db, "create")

    logger.info("Post %s created by user %s (slug=%r)", post.id, requester.id, post.slug)
    mark_posts_changed(db)
    return _post_to_dict(post)


async def get_posts(
    db: AsyncSession,
    user_id: str | None = None,
    category: str | None = None,
    slug: str | None = None,
    post_id: int | str | None = None,
    search_term: str | None = None,
    start_index: int = 0,
    limit: int = settings.DEFAULT_PAGE_SIZE,
    order: str = "desc",
    now: datetime | None = None,
) -> dict:
    """
    Return one page of posts plus the store-wide counters.

    Three SQL statements (plus one view-history load) are issued on a
    cache miss:

    1. SELECT of the filtered page, ordered by ``updated_at``.
    2. COUNT of every post.  Filters are deliberately not applied, so
       ``totalPosts`` may exceed the number of matching posts.
    3. COUNT of posts created since ``one_month_ago(now)``, also
       unfiltered.
    """
    cache_key = cache.post_list_key(
        user_id=user_id,
        category=category,
        slug=slug,
        post_id=post_id,
        search_term=search_term,
        start_index=start_index,
        limit=limit,
        order=order,
    )
    cached = await cache.get(cache_key)
    if cached is not None:
        return cached

    clauses = build_post_filter(
        user_id=user_id,
        category=category,
        slug=slug,
        post_id=post_id,
        search_term=search_term,
    )
    direction = asc if order == "asc" else desc
    posts_q = (
        select(Post)
        .where(*clauses)
        .options(selectinload(Post.view_history))
        .order_by(direction(Post.updated_at), direction(Post.id))
        .offset(start_index)
        .limit(limit)
    )
    posts = (await db.execute(posts_q)).scalars().all()

    total = (await db.execute(select(func.count()).select_from(Post))).scalar_one()

    cutoff = one_month_ago(now or datetime.now(timezone.utc))
    last_month = (
        await db.execute(
            select(func.count()).select_from(Post).where(Post.created_at >= cutoff)
        )
    ).scalar_one()

    response = {
        "posts": [_post_to_dict(p) for p in posts],
        "totalPosts": total,
        "lastMonthPosts": last_month,
    }
    await cache.set(cache_key, response, ttl=settings.CACHE_TTL_LIST)
    return response


async def update_post(
    db: AsyncSession,
    post_id: int,
    user_id: str,
    data: PostUpdate,
    requester: Requester | None,
) -> dict:
    """
    Apply the supplied fields of *data* to the post and return its dict.

    Only an administrator whose own id equals the *user_id* path segment
    may update.  Post ownership is not consulted, unlike ``delete_post``.
    Fields left out of the payload (or sent as null) are unchanged, and
    the slug is never recomputed, so it can drift from an edited title.
    """
    requester = _require_requester(requester)
    if not requester.is_admin or requester.id != user_id:
        logger.warning(
            "User %s denied update of post %s (path user %s)", requester.id, post_id, user_id
        )
        raise Forbidden("You are not allowed to update this post")

    post = await _load_post(db, post_id)
    if post is None:
        raise NotFound("Post not found")

    for field, value in data.model_dump(exclude_unset=True, exclude_none=True).items():
        setattr(post, field, value)
    post.updated_at = utcnow()
    await _flush(db, "update")

    logger.info("Post %s updated by user %s", post.id, requester.id)
    mark_posts_changed(db)
    return _post_to_dict(post)


async def delete_post(
    db: AsyncSession, post_id: int, requester: Requester | None
) -> str:
    """
    Permanently delete the post and its view history.

    Allowed for administrators and for the post's owner.
    """
    requester = _require_requester(requester)
    post = await _load_post(db, post_id)
    if post is None:
        raise NotFound("Post not found")

    if not requester.is_admin and requester.id != post.user_id:
        logger.warning("User %s denied delete of post %s", requester.id, post_id)
        raise Forbidden("You are not allowed to delete this post")

    await db.delete(post)
    await _flush(db, "delete")

    logger.info("Post %s deleted by user %s", post_id, requester.id)
    mark_posts_changed(db)
    return DELETED_MESSAGE


async def record_view(
    db: AsyncSession, post_id: int, requester: Requester | None
) -> dict:
    """
    Count one view of the post and return its refreshed dict.

    The counter is bumped with a single ``UPDATE ... SET views = views + 1``
    so concurrent views are never lost.  Authenticated viewers are also
    appended to the view history; anonymous views are only counted.
    ``updated_at`` is left alone because a view is not an edit.
    """
    result = await db.execute(
        update(Post)
        .where(Post.id == post_id)
        .values(views=Post.views + 1, updated_at=Post.updated_at)
        .execution_options(synchronize_session=False)
    )
    if result.rowcount == 0:
        raise NotFound("Post not found")

    if requester is not None:
        db.add(PostView(post_id=post_id, viewer_id=requester.id))
        await _flush(db, "record view of")

    post = await _load_post(db, post_id, refresh=True)
    mark_posts_changed(db)
    return _post_to_dict(post)
