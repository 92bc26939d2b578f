"""Pydantic schemas for the Web API.

Response models for health, pathway exports and statistics. Field aliases
keep the camelCase keys of the exported JSON documents.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class HealthResponse(BaseModel):
    """Health check response."""

    status: str
    store: str
    version: str
    timestamp: str


# =============================================================================
# PATHWAY SCHEMAS
# =============================================================================


class _CamelModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class CheckpointResponse(_CamelModel):
    checkpoint_id: str = Field(alias="checkpointId")
    title: str
    description: str | None = None
    order: int | None = None
    status: str
    completed_at: str | None = Field(default=None, alias="completedAt")
    resources: list[Any] = Field(default_factory=list)


class QuizResponse(_CamelModel):
    quiz_id: str = Field(alias="quizId")
    title: str
    topic: str | None = None
    difficulty: str | None = None
    domain: str | None = None
    tags: list[str] = Field(default_factory=list)
    questions: list[Any] = Field(default_factory=list)
    created_at: str = Field(alias="createdAt")


class AttemptResponse(_CamelModel):
    attempt_id: str = Field(alias="attemptId")
    quiz_id: str = Field(alias="quizId")
    score: int | float
    total_questions: int | None = Field(default=None, alias="totalQuestions")
    correct_answers: int | None = Field(default=None, alias="correctAnswers")
    completed_at: str | None = Field(default=None, alias="completedAt")
    time_taken: int | None = Field(default=None, alias="timeTaken")


class RoadmapResponse(_CamelModel):
    roadmap_id: str = Field(alias="roadmapId")
    main_topic: str = Field(alias="mainTopic")
    description: str | None = None
    difficulty: str | None = None
    estimated_duration: str | None = Field(default=None, alias="estimatedDuration")
    total_progress: int | float | None = Field(default=None, alias="totalProgress")
    status: str
    created_at: str = Field(alias="createdAt")
    checkpoints: list[CheckpointResponse] = Field(default_factory=list)
    quizzes: list[QuizResponse] = Field(default_factory=list)
    quiz_attempts: list[AttemptResponse] = Field(default_factory=list, alias="quizAttempts")


class UserPathwayEntry(_CamelModel):
    """One user's pathway inside the full export."""

    user_id: str = Field(alias="userId")
    name: str
    email: str | None = None
    learning_parameters: dict[str, Any] = Field(default_factory=dict, alias="learningParameters")
    survey_parameters: dict[str, Any] = Field(default_factory=dict, alias="surveyParameters")
    roadmaps: list[RoadmapResponse] = Field(default_factory=list)


class UserPathwayResponse(UserPathwayEntry):
    """One user's pathway exported on its own."""

    export_date: str = Field(alias="exportDate")


class PathwayListResponse(_CamelModel):
    """Every user's pathway."""

    export_date: str = Field(alias="exportDate")
    total_users: int = Field(alias="totalUsers")
    users: list[UserPathwayEntry]


# =============================================================================
# STATS SCHEMAS
# =============================================================================


class TotalsResponse(_CamelModel):
    users: int
    roadmaps: int
    quizzes: int
    checkpoints: int
    quiz_attempts: int = Field(alias="quizAttempts")


class PerformanceResponse(_CamelModel):
    checkpoint_completion_rate: str = Field(alias="checkpointCompletionRate")
    average_roadmap_progress: str = Field(alias="averageRoadmapProgress")
    average_quiz_score: str = Field(alias="averageQuizScore")


class DomainCountResponse(BaseModel):
    domain: str | None = None
    count: int


class StatsResponse(_CamelModel):
    generated_at: str = Field(alias="generatedAt")
    totals: TotalsResponse
    performance: PerformanceResponse
    domain_distribution: list[DomainCountResponse] = Field(alias="domainDistribution")
