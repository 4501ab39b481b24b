"""SQLite schema for the chorecal record store (code-first approach)."""

TEAM_MEMBERS_TABLE = """
CREATE TABLE IF NOT EXISTS team_members (
    id TEXT PRIMARY KEY,
    name TEXT NOT NULL,
    email TEXT,
    avatar TEXT NOT NULL,
    created_at TEXT NOT NULL,
    updated_at TEXT NOT NULL
)
"""

# recurrence holds the RecurrenceRule as JSON text; only anchors carry one.
CHORES_TABLE = """
CREATE TABLE IF NOT EXISTS chores (
    id TEXT PRIMARY KEY,
    title TEXT NOT NULL,
    description TEXT,
    assignee_id TEXT,
    status TEXT NOT NULL CHECK (status IN ('pending', 'in_progress', 'completed')),
    due_date TEXT NOT NULL,
    recurrence TEXT,
    parent_chore_id TEXT,
    is_recurrence_instance INTEGER NOT NULL DEFAULT 0,
    created_at TEXT NOT NULL,
    updated_at TEXT NOT NULL
)
"""

# One persisted instance per (anchor, date).
CHORE_INSTANCE_INDEX = """
CREATE UNIQUE INDEX IF NOT EXISTS idx_chore_instance
ON chores (parent_chore_id, due_date)
WHERE parent_chore_id IS NOT NULL
"""

CHORE_DUE_DATE_INDEX = "CREATE INDEX IF NOT EXISTS idx_chore_due_date ON chores (due_date)"

SCHEMA_STATEMENTS = [
    TEAM_MEMBERS_TABLE,
    CHORES_TABLE,
    CHORE_INSTANCE_INDEX,
    CHORE_DUE_DATE_INDEX,
]
