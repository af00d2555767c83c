"""
Blog-style sample application showcasing hoodorm capabilities.
"""

from .demo import CreateBlogSchema, bootstrap_session, fetch_recent_posts, run_demo, seed_sample_data
from .models import Author, FeedEntry, Post, Timestamps

__all__ = [
    "Author",
    "CreateBlogSchema",
    "FeedEntry",
    "Post",
    "Timestamps",
    "bootstrap_session",
    "fetch_recent_posts",
    "run_demo",
    "seed_sample_data",
]
