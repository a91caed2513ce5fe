"""Initial schema: users, catalog, and settlement tables.

Creates users, categories, topics, test_series, questions, user_progress and
user_test_series. UNIQUE(user_id, question_id) and UNIQUE(user_id,
test_series_id) back the at-most-once attempt and entitlement rules.

Revision ID: 001_initial_schema
Revises:
Create Date: 2026-10-17
"""

from collections.abc import Sequence

from alembic import op

revision: str = "001_initial_schema"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    # --- Users ---
    op.execute("""
        CREATE TABLE IF NOT EXISTS users (
            id SERIAL PRIMARY KEY,
            username VARCHAR(50) UNIQUE NOT NULL,
            email VARCHAR(100) UNIQUE NOT NULL,
            password_hash VARCHAR(256) NOT NULL,
            full_name VARCHAR(100),
            profile_picture VARCHAR(255),
            coins INTEGER NOT NULL DEFAULT 0,
            created_at TIMESTAMPTZ DEFAULT NOW(),
            CONSTRAINT ck_users_coins_non_negative CHECK (coins >= 0)
        )
    """)
    op.execute("""
        CREATE INDEX IF NOT EXISTS idx_users_coins
        ON users(coins DESC)
    """)

    # --- Categories / Topics ---
    op.execute("""
        CREATE TABLE IF NOT EXISTS categories (
            id SERIAL PRIMARY KEY,
            name VARCHAR(100) NOT NULL,
            description TEXT,
            icon VARCHAR(50),
            color VARCHAR(50)
        )
    """)
    op.execute("""
        CREATE TABLE IF NOT EXISTS topics (
            id SERIAL PRIMARY KEY,
            category_id INTEGER NOT NULL REFERENCES categories(id) ON DELETE CASCADE,
            name VARCHAR(100) NOT NULL,
            description TEXT,
            created_at TIMESTAMPTZ DEFAULT NOW()
        )
    """)
    op.execute("""
        CREATE INDEX IF NOT EXISTS idx_topics_category
        ON topics(category_id)
    """)

    # --- Test Series ---
    op.execute("""
        CREATE TABLE IF NOT EXISTS test_series (
            id SERIAL PRIMARY KEY,
            name VARCHAR(100) NOT NULL,
            description TEXT,
            coin_cost INTEGER NOT NULL DEFAULT 0,
            created_at TIMESTAMPTZ DEFAULT NOW(),
            CONSTRAINT ck_test_series_cost_non_negative CHECK (coin_cost >= 0)
        )
    """)

    # --- Questions ---
    op.execute("""
        CREATE TABLE IF NOT EXISTS questions (
            id SERIAL PRIMARY KEY,
            topic_id INTEGER NOT NULL REFERENCES topics(id) ON DELETE CASCADE,
            test_series_id INTEGER REFERENCES test_series(id) ON DELETE SET NULL,
            question TEXT NOT NULL,
            option_a TEXT NOT NULL,
            option_b TEXT NOT NULL,
            option_c TEXT NOT NULL,
            option_d TEXT NOT NULL,
            correct_option VARCHAR(1) NOT NULL,
            difficulty_level VARCHAR(10) NOT NULL DEFAULT 'medium',
            coins_reward INTEGER NOT NULL DEFAULT 1,
            explanation TEXT,
            created_at TIMESTAMPTZ DEFAULT NOW(),
            CONSTRAINT ck_questions_correct_option CHECK (correct_option IN ('A', 'B', 'C', 'D')),
            CONSTRAINT ck_questions_reward_non_negative CHECK (coins_reward >= 0),
            CONSTRAINT ck_questions_difficulty_level CHECK (difficulty_level IN ('easy', 'medium', 'hard'))
        )
    """)
    op.execute("""
        CREATE INDEX IF NOT EXISTS idx_questions_topic
        ON questions(topic_id)
    """)
    op.execute("""
        CREATE INDEX IF NOT EXISTS idx_questions_test_series
        ON questions(test_series_id)
    """)

    # --- Attempts ---
    op.execute("""
        CREATE TABLE IF NOT EXISTS user_progress (
            id SERIAL PRIMARY KEY,
            user_id INTEGER NOT NULL REFERENCES users(id) ON DELETE CASCADE,
            question_id INTEGER NOT NULL REFERENCES questions(id) ON DELETE CASCADE,
            user_answer VARCHAR(1) NOT NULL,
            is_correct BOOLEAN NOT NULL DEFAULT false,
            coins_earned INTEGER NOT NULL DEFAULT 0,
            attempt_time TIMESTAMPTZ DEFAULT NOW(),
            CONSTRAINT uq_user_progress_user_question UNIQUE (user_id, question_id)
        )
    """)

    # --- Entitlements ---
    op.execute("""
        CREATE TABLE IF NOT EXISTS user_test_series (
            id SERIAL PRIMARY KEY,
            user_id INTEGER NOT NULL REFERENCES users(id) ON DELETE CASCADE,
            test_series_id INTEGER NOT NULL REFERENCES test_series(id) ON DELETE CASCADE,
            purchased_at TIMESTAMPTZ DEFAULT NOW(),
            CONSTRAINT uq_user_test_series_user_series UNIQUE (user_id, test_series_id)
        )
    """)


def downgrade() -> None:
    for table in [
        "user_test_series",
        "user_progress",
        "questions",
        "test_series",
        "topics",
        "categories",
        "users",
    ]:
        op.execute(f"DROP TABLE IF EXISTS {table} CASCADE")  # noqa: S608
