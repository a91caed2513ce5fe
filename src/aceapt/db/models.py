"""ORM models for the quiz schema.

Tables are created by the Alembic migrations in production; the test suite
builds them from this metadata directly.
"""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    DateTime,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
    func,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from aceapt.db.base import Base

OPTIONS = ("A", "B", "C", "D")
DIFFICULTY_LEVELS = ("easy", "medium", "hard")


# ---------------------------------------------------------------------------
# Users
# ---------------------------------------------------------------------------


class User(Base):
    """Maps to the 'users' table. ``coins`` is mutated only by settlement services."""

    __tablename__ = "users"
    __table_args__ = (CheckConstraint("coins >= 0", name="ck_users_coins_non_negative"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    username: Mapped[str] = mapped_column(String(50), unique=True, nullable=False)
    email: Mapped[str] = mapped_column(String(100), unique=True, nullable=False)
    password_hash: Mapped[str] = mapped_column(String(256), nullable=False)
    full_name: Mapped[str | None] = mapped_column(String(100), nullable=True)
    profile_picture: Mapped[str | None] = mapped_column(String(255), nullable=True)
    coins: Mapped[int] = mapped_column(Integer, nullable=False, default=0, server_default="0")
    created_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), server_default=func.now())

    progress: Mapped[list[UserProgress]] = relationship("UserProgress", back_populates="user")
    test_series: Mapped[list[UserTestSeries]] = relationship("UserTestSeries", back_populates="user")


# ---------------------------------------------------------------------------
# Catalog
# ---------------------------------------------------------------------------


class Category(Base):
    """Top-level grouping of topics (e.g. Quantitative, Verbal)."""

    __tablename__ = "categories"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    icon: Mapped[str | None] = mapped_column(String(50), nullable=True)
    color: Mapped[str | None] = mapped_column(String(50), nullable=True)

    topics: Mapped[list[Topic]] = relationship("Topic", back_populates="category")


class Topic(Base):
    __tablename__ = "topics"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    category_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("categories.id", ondelete="CASCADE"), nullable=False
    )
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), server_default=func.now())

    category: Mapped[Category] = relationship("Category", back_populates="topics")
    questions: Mapped[list[Question]] = relationship("Question", back_populates="topic")


class TestSeries(Base):
    """A coin-gated bundle of questions."""

    __tablename__ = "test_series"
    __table_args__ = (CheckConstraint("coin_cost >= 0", name="ck_test_series_cost_non_negative"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    coin_cost: Mapped[int] = mapped_column(Integer, nullable=False, default=0, server_default="0")
    created_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), server_default=func.now())


class Question(Base):
    """Multiple-choice question. ``correct_option`` is fixed after creation."""

    __tablename__ = "questions"
    __table_args__ = (
        CheckConstraint("correct_option IN ('A', 'B', 'C', 'D')", name="ck_questions_correct_option"),
        CheckConstraint("coins_reward >= 0", name="ck_questions_reward_non_negative"),
        CheckConstraint(
            "difficulty_level IN (" + ", ".join(f"'{level}'" for level in DIFFICULTY_LEVELS) + ")",
            name="ck_questions_difficulty_level",
        ),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    topic_id: Mapped[int] = mapped_column(Integer, ForeignKey("topics.id", ondelete="CASCADE"), nullable=False)
    test_series_id: Mapped[int | None] = mapped_column(
        Integer, ForeignKey("test_series.id", ondelete="SET NULL"), nullable=True
    )
    question: Mapped[str] = mapped_column(Text, nullable=False)
    option_a: Mapped[str] = mapped_column(Text, nullable=False)
    option_b: Mapped[str] = mapped_column(Text, nullable=False)
    option_c: Mapped[str] = mapped_column(Text, nullable=False)
    option_d: Mapped[str] = mapped_column(Text, nullable=False)
    correct_option: Mapped[str] = mapped_column(String(1), nullable=False)
    difficulty_level: Mapped[str] = mapped_column(String(10), nullable=False, default="medium", server_default="medium")
    coins_reward: Mapped[int] = mapped_column(Integer, nullable=False, default=1, server_default="1")
    explanation: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), server_default=func.now())

    topic: Mapped[Topic] = relationship("Topic", back_populates="questions")


# ---------------------------------------------------------------------------
# Settlement records
# ---------------------------------------------------------------------------


class UserProgress(Base):
    """One attempt per (user, question). UNIQUE(user_id, question_id) enforces it."""

    __tablename__ = "user_progress"
    __table_args__ = (UniqueConstraint("user_id", "question_id", name="uq_user_progress_user_question"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    question_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("questions.id", ondelete="CASCADE"), nullable=False
    )
    user_answer: Mapped[str] = mapped_column(String(1), nullable=False)
    is_correct: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    coins_earned: Mapped[int] = mapped_column(Integer, nullable=False, default=0, server_default="0")
    attempt_time: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), server_default=func.now())

    user: Mapped[User] = relationship("User", back_populates="progress")


class UserTestSeries(Base):
    """Entitlement to a test series. UNIQUE(user_id, test_series_id) enforces at-most-once."""

    __tablename__ = "user_test_series"
    __table_args__ = (UniqueConstraint("user_id", "test_series_id", name="uq_user_test_series_user_series"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    test_series_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("test_series.id", ondelete="CASCADE"), nullable=False
    )
    purchased_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), server_default=func.now())

    user: Mapped[User] = relationship("User", back_populates="test_series")
