"""Populate a development database with users, articles, comments, follows and favorites."""
import argparse
import asyncio
import random
import time
from datetime import datetime, timedelta, timezone

from sqlalchemy import select

from conduit.database import Base, async_session, engine
from conduit.models import Article, Comment, Favorite, Follow, Tag, User
from conduit.security import hash_password
from conduit.slug import generate_slug

TAGS = ["python", "fastapi", "postgresql", "redis", "docker", "kubernetes",
        "react", "typescript", "aws", "devops", "testing", "performance",
        "security", "microservices", "graphql", "rest-api"]

SEED_PASSWORD = "password123"


async def seed(small: bool = False):
    num_users = 10 if small else 50
    num_articles = 100 if small else 2000
    num_comments_per_article = 2 if small else 5

    print(f"Seeding: {num_users} users, {num_articles} articles")
    start = time.perf_counter()

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)

    async with async_session() as session:
        tags = [Tag(name=name) for name in TAGS]
        session.add_all(tags)

        # One hash shared by every seeded account keeps seeding fast.
        password_hash = hash_password(SEED_PASSWORD)
        users = [
            User(
                email=f"user_{i:04d}@example.com",
                username=f"user_{i:04d}",
                password_hash=password_hash,
                bio=f"I am test user number {i}. I write about technology.",
                image="",
            )
            for i in range(num_users)
        ]
        session.add_all(users)
        await session.flush()
        print(f"  Created {len(tags)} tags, {len(users)} users (password: {SEED_PASSWORD})")

        for user in users:
            for followee in random.sample(users, k=min(5, num_users)):
                if followee.id != user.id:
                    session.add(Follow(follower_id=user.id, followee_id=followee.id))

        for i in range(num_articles):
            created = datetime.now(timezone.utc) - timedelta(days=random.randint(0, 365))
            topic = random.choice(TAGS)
            title = f"Article {i}: How to optimize {topic} applications"
            article = Article(
                slug=generate_slug(title),
                title=title,
                description=f"A guide to optimizing {topic} applications for production.",
                body=f"This is the full body of article {i}. " * 20,
                created_at=created,
                updated_at=created,
                author_id=random.choice(users).id,
            )
            article.tags = random.sample(tags, k=random.randint(1, 4))
            session.add(article)
        await session.flush()

        article_ids = list((await session.execute(select(Article.id))).scalars().all())
        total_comments = 0
        for article_id in article_ids:
            for _ in range(random.randint(1, num_comments_per_article)):
                author = random.choice(users)
                session.add(Comment(
                    body=f"Great article! Very helpful. Comment by {author.username}.",
                    article_id=article_id,
                    author_id=author.id,
                ))
                total_comments += 1
            for fan in random.sample(users, k=random.randint(0, 3)):
                session.add(Favorite(user_id=fan.id, article_id=article_id))

        await session.commit()

    elapsed = time.perf_counter() - start
    print(f"\nSeeding complete in {elapsed:.1f}s")
    print(f"  Articles: {num_articles}")
    print(f"  Comments: {total_comments}")


def main():
    parser = argparse.ArgumentParser(description="Seed the conduit database")
    parser.add_argument("--small", action="store_true", help="Use small dataset (100 articles)")
    args = parser.parse_args()
    asyncio.run(seed(small=args.small))


if __name__ == "__main__":
    main()
