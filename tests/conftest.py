"""Shared fixtures: a temporary SQLite store and a seeder to fill it."""

import json
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

import pytest

from pathways.config.app_config import clear_config_cache
from pathways.db.database import init_store, open_store

FIXED_NOW = datetime(2026, 10, 19, 12, 30, tzinfo=timezone.utc)


class StoreSeeder:
    """Inserts rows into a test store; each call commits on its own."""

    def __init__(self, db_path: Path):
        self.db_path = db_path
        self._positions: dict[str, int] = {}

    def _next_position(self, owner_id: str) -> int:
        position = self._positions.get(owner_id, 0)
        self._positions[owner_id] = position + 1
        return position

    def user(
        self,
        user_id: str,
        name: str,
        email: str | None = None,
        learning_parameters: dict[str, Any] | None = None,
        survey_parameters: dict[str, Any] | None = None,
    ) -> str:
        with open_store(self.db_path) as conn:
            conn.execute(
                "INSERT INTO users VALUES (?, ?, ?, ?, ?)",
                (
                    user_id,
                    name,
                    email,
                    json.dumps(learning_parameters or {}),
                    json.dumps(survey_parameters or {}),
                ),
            )
        return user_id

    def roadmap(
        self,
        roadmap_id: str,
        user_id: str,
        main_topic: str,
        total_progress: float | None = 0,
        status: str = "active",
        description: str | None = None,
        difficulty: str | None = "beginner",
        estimated_duration: str | None = "4 weeks",
        created_at: str = "2026-01-01T00:00:00Z",
    ) -> str:
        with open_store(self.db_path) as conn:
            conn.execute(
                """
                INSERT INTO roadmaps (
                    roadmap_id, user_id, position, main_topic, description,
                    difficulty, estimated_duration, total_progress, status, created_at
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    roadmap_id,
                    user_id,
                    self._next_position(user_id),
                    main_topic,
                    description,
                    difficulty,
                    estimated_duration,
                    total_progress,
                    status,
                    created_at,
                ),
            )
        return roadmap_id

    def checkpoint(
        self,
        checkpoint_id: str,
        roadmap_id: str,
        title: str,
        order: int | None = None,
        status: str = "pending",
        completed_at: str | None = None,
        description: str | None = None,
        resources: list[Any] | None = None,
    ) -> str:
        with open_store(self.db_path) as conn:
            conn.execute(
                """
                INSERT INTO checkpoints (
                    checkpoint_id, roadmap_id, position, title, description,
                    "order", status, completed_at, resources
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    checkpoint_id,
                    roadmap_id,
                    self._next_position(roadmap_id),
                    title,
                    description,
                    order,
                    status,
                    completed_at,
                    json.dumps(resources or []),
                ),
            )
        return checkpoint_id

    def quiz(
        self,
        quiz_id: str,
        title: str,
        topic: str | None,
        domain: str | None = None,
        difficulty: str | None = "easy",
        tags: list[str] | None = None,
        questions: list[Any] | None = None,
        created_at: str = "2026-01-02T00:00:00Z",
    ) -> str:
        with open_store(self.db_path) as conn:
            conn.execute(
                "INSERT INTO quizzes VALUES (?, ?, ?, ?, ?, ?, ?, ?)",
                (
                    quiz_id,
                    title,
                    topic,
                    difficulty,
                    domain,
                    json.dumps(tags or []),
                    json.dumps(questions or []),
                    created_at,
                ),
            )
        return quiz_id

    def attempt(
        self,
        attempt_id: str,
        user_id: str,
        quiz_id: str,
        score: float,
        total_questions: int | None = 10,
        correct_answers: int | None = None,
        completed_at: str | None = "2026-02-01T10:00:00Z",
        time_taken: int | None = 300,
    ) -> str:
        with open_store(self.db_path) as conn:
            conn.execute(
                "INSERT INTO quiz_attempts VALUES (?, ?, ?, ?, ?, ?, ?, ?)",
                (
                    attempt_id,
                    user_id,
                    quiz_id,
                    score,
                    total_questions,
                    correct_answers if correct_answers is not None else score,
                    completed_at,
                    time_taken,
                ),
            )
        return attempt_id


@pytest.fixture(autouse=True)
def _fresh_config():
    """Config is cached per process; start every test from scratch."""
    clear_config_cache()
    yield
    clear_config_cache()


@pytest.fixture
def db_path(tmp_path) -> Path:
    """Empty store with schema."""
    return init_store(tmp_path / "db" / "pathways.db")


@pytest.fixture
def seeder(db_path) -> StoreSeeder:
    return StoreSeeder(db_path)


@pytest.fixture
def ada_store(seeder) -> Path:
    """One learner, one roadmap, one checkpoint, one matching quiz and attempt."""
    seeder.user(
        "u1",
        "Ada",
        email="ada@example.com",
        learning_parameters={"pace": "steady"},
        survey_parameters={"goal": "interviews"},
    )
    seeder.roadmap("r1", "u1", "Algorithms", total_progress=40)
    seeder.checkpoint(
        "c1",
        "r1",
        "Intro",
        order=1,
        status="completed",
        completed_at="2026-03-01T09:00:00Z",
        resources=[{"type": "video", "url": "https://example.com/intro"}],
    )
    seeder.quiz("q1", "Sorting basics", "Intro to Algorithms", domain="cs", tags=["sorting"])
    seeder.attempt("a1", "u1", "q1", score=8, total_questions=10, correct_answers=8)
    return seeder.db_path


@pytest.fixture
def conn(db_path):
    """Read-only connection to the test store."""
    with open_store(db_path, read_only=True) as connection:
        yield connection


@pytest.fixture
def fixed_now() -> datetime:
    return FIXED_NOW
