"""Shared fixtures.

The Gemini calls are always replaced by ``fake_gemini``: no test reaches the
network. The database is an in-memory SQLite shared across threads.
"""

from __future__ import annotations

import os

os.environ["DATABASE_URL"] = "sqlite://"
os.environ["GEMINI_API_KEY"] = ""
os.environ["PACING_DELAY_SECONDS"] = "0"

import pytest
from fastapi.testclient import TestClient

from badgeguide.ai import gemini
from badgeguide.core import settings
from badgeguide.db import Base, SessionLocal, engine
from badgeguide.deps import get_store
from badgeguide.domain.pipeline.session import SessionStore
from badgeguide.models import preference  # noqa: F401
from badgeguide.schemas.badge import Badge


# ---------------------------------------------------------------------------
# Sample data
# ---------------------------------------------------------------------------


def make_badge(badge_id: str, **overrides) -> Badge:
    data = {
        "id": badge_id,
        "name": badge_id.replace("-", " ").title(),
        "emoji": "🏅",
        "description": f"Description of {badge_id}",
        "category": "Earnable",
        "rarity": "Common",
        "isOwned": False,
        "howToEarn": "Just do it.",
        "tiers": ["Bronze", "Silver", "Gold"],
    }
    data.update(overrides)
    return Badge(**data)


@pytest.fixture
def sample_badges() -> list[Badge]:
    return [
        make_badge("pull-shark", name="Pull Shark", rarity="Common", isOwned=True,
                   description="Merge pull requests."),
        make_badge("galaxy-brain", name="Galaxy Brain", rarity="Rare",
                   description="Accepted answers in Discussions."),
        make_badge("arctic-code-vault", name="Arctic Code Vault Contributor", emoji="❄️",
                   category="Retired", rarity="Legendary", isOwned=True, tiers=["Single Tier"],
                   description="Code archived in the 2020 GitHub Archive Program."),
        make_badge("starstruck", name="Starstruck", emoji="🤩", rarity="Epic",
                   description="A repository with many stars."),
        make_badge("pro", name="Pro", emoji="💎", category="Highlight", rarity="Common",
                   tiers=["Single Tier"], description="GitHub Pro subscriber."),
        make_badge("yolo", name="YOLO", emoji="🤠", rarity="Rare",
                   description="Merge without a review."),
    ]


# ---------------------------------------------------------------------------
# Gemini fake
# ---------------------------------------------------------------------------


class FakeGemini:
    """Records every call and returns canned values; set ``*_error`` to raise."""

    def __init__(self, badges: list[Badge]):
        self.badges = badges
        self.hero = "data:image/png;base64,aGVybw=="
        self.readme = "# Badges\n\n| Badge | Description |\n|---|---|\n| 🦈&nbsp;**Pull Shark** | Merge PRs |\n"
        self.search_answers: dict[str, str] = {}
        self.scan_error: Exception | None = None
        self.draft_error: Exception | None = None
        self.calls: list[tuple] = []

    def fetch_badge_library(self, username=""):
        self.calls.append(("fetch_badge_library", username))
        if self.scan_error:
            raise self.scan_error
        return list(self.badges)

    def search_badge_context(self, prompt_text):
        self.calls.append(("search_badge_context", prompt_text))
        return self.search_answers.get(prompt_text, f"context for: {prompt_text[:30]}")

    def generate_readme_hero(self):
        self.calls.append(("generate_readme_hero",))
        return self.hero

    def generate_readme_text(self, badges, repo_name, hero_image_url):
        self.calls.append(("generate_readme_text", list(badges), repo_name, hero_image_url))
        if self.draft_error:
            raise self.draft_error
        return self.readme

    def generate_readme_from_context(self, config, context, hero_image_url):
        self.calls.append(("generate_readme_from_context", config, context, hero_image_url))
        if self.draft_error:
            raise self.draft_error
        return self.readme

    def called(self, name: str) -> list[tuple]:
        return [c for c in self.calls if c[0] == name]


@pytest.fixture(autouse=True)
def no_pacing(monkeypatch):
    monkeypatch.setattr(settings, "PACING_DELAY_SECONDS", 0)


@pytest.fixture
def fake_gemini(monkeypatch, sample_badges) -> FakeGemini:
    fake = FakeGemini(sample_badges)
    for name in ("fetch_badge_library", "search_badge_context", "generate_readme_hero",
                 "generate_readme_text", "generate_readme_from_context"):
        monkeypatch.setattr(gemini, name, getattr(fake, name))
    return fake


# ---------------------------------------------------------------------------
# Database / API
# ---------------------------------------------------------------------------


@pytest.fixture
def db():
    Base.metadata.create_all(bind=engine)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def store() -> SessionStore:
    return SessionStore()


@pytest.fixture
def client(monkeypatch, db, store, fake_gemini):
    """API client whose background workers run inline, so each call returns after the run."""
    from badgeguide.main import app
    from badgeguide.routers import sessions as sessions_router

    def run_inline(target, *args):
        target(*args)

    monkeypatch.setattr(sessions_router, "_spawn", run_inline)
    app.dependency_overrides[get_store] = lambda: store
    try:
        with TestClient(app) as c:
            yield c
    finally:
        app.dependency_overrides.clear()
