"""Shared test fixtures."""

from datetime import date

import pytest

from hashquery import Registry


POSTS = [
    {"id": 1, "title": "Post 1", "published_at": date(2024, 1, 1), "featured": True, "tags": ["ruby", "web"], "views": 100},
    {"id": 2, "title": "Post 2", "published_at": date(2024, 2, 1), "featured": False, "tags": ["tools"], "views": 200},
    {"id": 3, "title": "Post 3", "published_at": date(2023, 12, 1), "featured": True, "tags": ["ruby"], "views": 150},
    {"id": 4, "title": None, "published_at": None, "featured": None, "tags": [], "views": None},
]


@pytest.fixture
def registry():
    """A fresh, empty registry."""
    return Registry()


@pytest.fixture
def posts_data():
    return [dict(post) for post in POSTS]


@pytest.fixture
def blog(registry, posts_data):
    """Registry with the four-post collection, its scopes and presenter."""

    def build(ctx):
        ctx.from_records(posts_data)
        ctx.scope(
            featured=lambda q: q.where(featured=True),
            recent=lambda q, n=2: q.order("published_at", desc=True).limit(n),
            tagged=lambda q, tag: q.where(tags={"contains": tag}),
        )

    registry.define("posts", build)
    registry.present(
        "posts",
        title_upper=lambda post: post.title.upper() if post.title else None,
        view_category=lambda post: "popular" if post.views and post.views > 150 else "standard",
    )
    return registry


@pytest.fixture
def posts(blog):
    return blog.query("posts")


@pytest.fixture
def related(registry):
    """Registry with authors, posts, profiles, tags and their join collection."""

    @registry.define("authors")
    def authors(ctx):
        ctx.from_records([
            {"id": 1, "name": "Alice"},
            {"id": 2, "name": "Bob"},
            {"id": 3, "name": "Charlie"},
        ])
        ctx.has_many("posts")
        ctx.has_one("profile")

    @registry.define("posts")
    def posts(ctx):
        ctx.from_records([
            {"id": 101, "title": "Intro to HashQuery", "author_id": 1, "published": True},
            {"id": 102, "title": "Advanced Queries", "author_id": 1, "published": False},
            {"id": 103, "title": "Web Development", "author_id": 2, "published": True},
            {"id": 104, "title": "Orphaned Post", "author_id": None, "published": True},
        ])
        ctx.belongs_to("author")
        ctx.has_many("post_tags")
        ctx.has_many("tags", through="post_tags")

    @registry.define("profiles")
    def profiles(ctx):
        ctx.from_records([
            {"id": 201, "bio": "Python Developer", "author_id": 1},
            {"id": 202, "bio": "Web Enthusiast", "author_id": 2},
        ])
        ctx.belongs_to("author")

    @registry.define("tags")
    def tags(ctx):
        ctx.from_records([
            {"id": 301, "name": "python"},
            {"id": 302, "name": "web"},
            {"id": 303, "name": "performance"},
        ])
        ctx.has_many("post_tags")
        ctx.has_many("posts", through="post_tags")

    @registry.define("post_tags")
    def post_tags(ctx):
        ctx.from_records([
            {"id": 401, "post_id": 101, "tag_id": 301},
            {"id": 402, "post_id": 101, "tag_id": 302},
            {"id": 403, "post_id": 102, "tag_id": 301},
            {"id": 404, "post_id": 103, "tag_id": 302},
        ])
        ctx.belongs_to("post")
        ctx.belongs_to("tag")

    @registry.define("users")
    def users(ctx):
        ctx.from_records([{"user_pk": 501, "username": "admin"}])
        ctx.has_many("articles", foreign_key="creator_id", owner_key="user_pk")

    @registry.define("articles")
    def articles(ctx):
        ctx.from_records([{"id": 601, "title": "User Article", "creator_id": 501}])
        ctx.belongs_to("creator", target="users", foreign_key="creator_id", target_key="user_pk")

    return registry
