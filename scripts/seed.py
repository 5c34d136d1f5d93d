"""Seed the posts table with sample data for local development."""
import argparse
import asyncio
import logging
import random
import time
from datetime import datetime, timedelta, timezone

from app.database import Base, async_session, engine
from app.models import Post, PostView
from app.services.filters import slugify

logger = logging.getLogger("seed")

CATEGORIES = ["uncategorized", "travel", "visa", "immigration", "study-abroad", "work-permits"]
TOPICS = ["Visa Renewal", "Work Permit", "Student Housing", "Health Insurance",
          "Bank Account", "Tax Return", "Language Course", "Driving Licence"]
OWNERS = [f"user-{i:03d}" for i in range(8)]


async def seed(num_posts: int) -> None:
    start = time.perf_counter()

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)

    async with async_session() as session:
        for i in range(num_posts):
            created = datetime.now(timezone.utc) - timedelta(days=random.randint(0, 120))
            title = f"{random.choice(TOPICS)} Guide {i}"
            post = Post(
                user_id=random.choice(OWNERS),
                title=title,
                slug=slugify(title),
                content=f"<p>Everything you need to know about {title.lower()}.</p>" * 5,
                category=random.choice(CATEGORIES),
                views=random.randint(0, 500),
                created_at=created,
                updated_at=created + timedelta(hours=random.randint(0, 72)),
            )
            session.add(post)
            await session.flush()
            for _ in range(random.randint(0, 3)):
                session.add(PostView(
                    post_id=post.id,
                    viewer_id=random.choice(OWNERS),
                    viewed_at=created + timedelta(days=random.randint(0, 5)),
                ))
        await session.commit()

    logger.info("Seeded %d posts in %.1fs", num_posts, time.perf_counter() - start)


def main():
    parser = argparse.ArgumentParser(description="Seed the blog post database")
    parser.add_argument("--posts", type=int, default=50, help="Number of posts to create")
    args = parser.parse_args()
    logging.basicConfig(level=logging.INFO, format="%(message)s")
    asyncio.run(seed(args.posts))


if __name__ == "__main__":
    main()
