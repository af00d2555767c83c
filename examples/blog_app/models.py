"""
Data structures for the hoodorm blog example.
"""

from dataclasses import dataclass
from typing import Optional

from hoodorm import Created, Id, Index, UniqueIndex, Updated, VarChar, column, embed, index


@dataclass
class Timestamps:
    created: Optional[Created] = None
    updated: Optional[Updated] = None


@dataclass
class Author:
    id: Id = Id(0)
    name: VarChar = column(VarChar(""), size=120, not_null=True, presence=True)
    email: VarChar = column(VarChar(""), size=255, not_null=True)
    bio: str = ""
    email_index: UniqueIndex = index("email")


@dataclass
class Post:
    id: Id = Id(0)
    author_id: int = column(0, not_null=True)
    title: VarChar = column(VarChar(""), size=200, length=(1, 200))
    body: str = ""
    published: bool = False
    stamps: Timestamps = embed(Timestamps)
    author_index: Index = index("author_id")


@dataclass
class FeedEntry:
    """Row shape of the published-posts feed (post joined with its author)."""

    title: str = ""
    published: bool = False
    name: str = ""
