"""
Utility helpers for running the hoodorm blog example end-to-end.
"""

from __future__ import annotations

from dataclasses import asdict
from typing import Any, Dict, List

from hoodorm import JoinKind, Migration, MigrationRunner, Session

from .models import Author, FeedEntry, Post

SCHEMA_STAMP = 1


class CreateBlogSchema(Migration):
    name = "create_blog_schema"

    def up(self, session: Session) -> None:
        session.create_table(Author)
        session.create_table(Post)

    def down(self, session: Session) -> None:
        session.drop_table(Post)
        session.drop_table(Author)


def bootstrap_session(source: str = ":memory:") -> Session:
    """
    Open a SQLite-backed session and migrate the blog schema.
    """
    session = Session.open("sqlite3", source)
    MigrationRunner(session, {SCHEMA_STAMP: CreateBlogSchema()}).migrate()
    return session


def seed_sample_data(session: Session) -> Dict[str, List[Dict[str, Any]]]:
    """
    Populate authors and posts so the feed has something to show.
    """
    authors = [
        Author(name="Alice Carter", email="alice@example.com", bio="Editor-in-chief."),
        Author(name="Brian Kim", email="brian@example.com", bio="Database specialist."),
    ]
    with session.transaction() as tx:
        tx.save_all(authors)
        posts = [
            Post(
                author_id=authors[0].id,
                title="Introducing hoodorm",
                body="Sessions, dataclass structures and migrations in one walkthrough.",
                published=True,
            ),
            Post(
                author_id=authors[1].id,
                title="Numbered markers explained",
                body="Why PostgreSQL sees $1, $2 while SQLite sees ?.",
                published=True,
            ),
            Post(author_id=authors[1].id, title="Draft: savepoints", body="Unfinished."),
        ]
        tx.save_all(posts)

    return {
        "authors": [asdict(author) for author in authors],
        "posts": [asdict(post) for post in posts],
    }


def fetch_recent_posts(session: Session, limit: int = 5) -> List[Dict[str, Any]]:
    """
    Published posts with their author's name, newest first.
    """
    entries = (
        session.select(Post, "post.title", "post.published", "author.name")
        .join(JoinKind.INNER, Author, "author_id", "id")
        .where('"post"."published" = ?', True)
        .order_by("-post.id")
        .limit(limit)
        .find(FeedEntry)
    )
    return [asdict(entry) for entry in entries]


def run_demo(source: str = ":memory:") -> List[Dict[str, Any]]:
    """
    Bootstrap the database, seed data, and return the rendered feed.
    """
    with bootstrap_session(source) as session:
        seed_sample_data(session)
        return fetch_recent_posts(session)
