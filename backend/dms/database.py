import sqlite3
from pathlib import Path
from sqlalchemy import create_engine, event
from sqlalchemy.orm import DeclarativeBase, sessionmaker

from dms.config import settings


class Base(DeclarativeBase):
    pass


def _set_sqlite_pragmas(dbapi_conn, connection_record):
    cursor = dbapi_conn.cursor()
    cursor.execute("PRAGMA journal_mode=WAL")
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def get_engine(db_path: Path | None = None):
    path = db_path or settings.db_path
    engine = create_engine(
        f"sqlite:///{path}",
        connect_args={"check_same_thread": False},
    )
    event.listen(engine, "connect", _set_sqlite_pragmas)
    return engine


engine = get_engine()
SessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False)


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


SCHEMA_SQL = """\
-- ============================================================
-- AUTH THROTTLE
-- ============================================================
CREATE TABLE IF NOT EXISTS auth_throttle (
    key             TEXT PRIMARY KEY,
    failed_attempts INTEGER NOT NULL,
    last_failed_at  REAL NOT NULL
);

-- ============================================================
-- DEPARTMENTS & USERS
-- ============================================================
CREATE TABLE IF NOT EXISTS departments (
    id         TEXT PRIMARY KEY,
    name       TEXT NOT NULL,
    code       TEXT NOT NULL UNIQUE,
    active     INTEGER NOT NULL DEFAULT 1,
    created_by TEXT,
    created_at TEXT NOT NULL DEFAULT (strftime('%Y-%m-%dT%H:%M:%SZ','now')),
    updated_at TEXT NOT NULL DEFAULT (strftime('%Y-%m-%dT%H:%M:%SZ','now'))
);

CREATE TABLE IF NOT EXISTS users (
    id            TEXT PRIMARY KEY,
    email         TEXT NOT NULL UNIQUE,
    password_hash TEXT NOT NULL,
    first_name    TEXT NOT NULL,
    last_name     TEXT NOT NULL,
    title         TEXT,
    department_id TEXT NOT NULL REFERENCES departments(id),
    active        INTEGER NOT NULL DEFAULT 1,
    last_login_at TEXT,
    created_at    TEXT NOT NULL DEFAULT (strftime('%Y-%m-%dT%H:%M:%SZ','now')),
    updated_at    TEXT NOT NULL DEFAULT (strftime('%Y-%m-%dT%H:%M:%SZ','now'))
);

CREATE INDEX IF NOT EXISTS idx_users_department ON users(department_id);

-- ============================================================
-- ROLES & PERMISSIONS
-- ============================================================
CREATE TABLE IF NOT EXISTS permissions (
    id          TEXT PRIMARY KEY,
    permission  TEXT NOT NULL UNIQUE,
    description TEXT
);

CREATE TABLE IF NOT EXISTS roles (
    id             TEXT PRIMARY KEY,
    name           TEXT NOT NULL UNIQUE,
    code           TEXT NOT NULL UNIQUE,
    description    TEXT,
    is_system_role INTEGER NOT NULL DEFAULT 0,
    is_active      INTEGER NOT NULL DEFAULT 1,
    created_by     TEXT,
    updated_by     TEXT,
    created_at     TEXT NOT NULL DEFAULT (strftime('%Y-%m-%dT%H:%M:%SZ','now')),
    updated_at     TEXT NOT NULL DEFAULT (strftime('%Y-%m-%dT%H:%M:%SZ','now'))
);

CREATE TABLE IF NOT EXISTS role_permissions (
    id            TEXT PRIMARY KEY,
    role_id       TEXT NOT NULL REFERENCES roles(id) ON DELETE CASCADE,
    permission_id TEXT NOT NULL REFERENCES permissions(id) ON DELETE CASCADE,
    scope         TEXT NOT NULL DEFAULT 'global'
                  CHECK(scope IN ('global','department','user','custom')),
    granted_by    TEXT,
    granted_at    TEXT NOT NULL DEFAULT (strftime('%Y-%m-%dT%H:%M:%SZ','now')),
    is_active     INTEGER NOT NULL DEFAULT 1,
    UNIQUE (role_id, permission_id)
);

CREATE TABLE IF NOT EXISTS user_roles (
    id          TEXT PRIMARY KEY,
    user_id     TEXT NOT NULL REFERENCES users(id) ON DELETE CASCADE,
    role_id     TEXT NOT NULL REFERENCES roles(id) ON DELETE CASCADE,
    assigned_by TEXT,
    assigned_at TEXT NOT NULL DEFAULT (strftime('%Y-%m-%dT%H:%M:%SZ','now')),
    is_active   INTEGER NOT NULL DEFAULT 1,
    expires_at  TEXT,
    UNIQUE (user_id, role_id)
);

CREATE INDEX IF NOT EXISTS idx_user_roles_user ON user_roles(user_id);

-- ============================================================
-- CATALOGS
-- ============================================================
CREATE TABLE IF NOT EXISTS document_types (
    id          TEXT PRIMARY KEY,
    name        TEXT NOT NULL UNIQUE,
    description TEXT,
    active      INTEGER NOT NULL DEFAULT 1,
    created_at  TEXT NOT NULL DEFAULT (strftime('%Y-%m-%dT%H:%M:%SZ','now')),
    updated_at  TEXT NOT NULL DEFAULT (strftime('%Y-%m-%dT%H:%M:%SZ','now'))
);

CREATE TABLE IF NOT EXISTS document_actions (
    id            TEXT PRIMARY KEY,
    action_name   TEXT NOT NULL UNIQUE,
    description   TEXT,
    sender_tag    TEXT,
    recipient_tag TEXT,
    action_date   TEXT,
    status        INTEGER NOT NULL DEFAULT 1,
    created_at    TEXT NOT NULL DEFAULT (strftime('%Y-%m-%dT%H:%M:%SZ','now')),
    updated_at    TEXT NOT NULL DEFAULT (strftime('%Y-%m-%dT%H:%M:%SZ','now'))
);

-- ============================================================
-- DOCUMENTS
-- ============================================================
CREATE TABLE IF NOT EXISTS documents (
    id               TEXT PRIMARY KEY,
    document_code    TEXT NOT NULL UNIQUE,
    title            TEXT NOT NULL,
    description      TEXT,
    document_type    TEXT NOT NULL DEFAULT 'General',
    classification   TEXT,
    origin           TEXT,
    status           TEXT NOT NULL DEFAULT 'dispatch'
                     CHECK(status IN ('dispatch','intransit','received','completed',
                                      'canceled','archive','checked_out','deleted')),
    department_id    TEXT REFERENCES departments(id),
    created_by       TEXT NOT NULL REFERENCES users(id),
    remarks          TEXT,
    work_flow        TEXT,
    work_flow_status TEXT,
    received_by      TEXT,
    checked_out_by   TEXT,
    checked_out_at   TEXT,
    signed_at        TEXT,
    signed_by        TEXT,
    blockchain_status TEXT,
    archived_at      TEXT,
    archived_by      TEXT,
    deleted_at       TEXT,
    deleted_by       TEXT,
    created_at       TEXT NOT NULL DEFAULT (strftime('%Y-%m-%dT%H:%M:%SZ','now')),
    updated_at       TEXT NOT NULL DEFAULT (strftime('%Y-%m-%dT%H:%M:%SZ','now'))
);

CREATE INDEX IF NOT EXISTS idx_documents_status ON documents(status);
CREATE INDEX IF NOT EXISTS idx_documents_created_by ON documents(created_by);
CREATE INDEX IF NOT EXISTS idx_documents_department ON documents(department_id);

CREATE TABLE IF NOT EXISTS document_files (
    id                TEXT PRIMARY KEY,
    document_id       TEXT NOT NULL REFERENCES documents(id) ON DELETE CASCADE,
    original_filename TEXT NOT NULL,
    stored_path       TEXT NOT NULL,
    file_hash         TEXT NOT NULL,
    file_size_bytes   INTEGER NOT NULL,
    mime_type         TEXT,
    is_primary        INTEGER NOT NULL DEFAULT 0,
    uploaded_by       TEXT REFERENCES users(id),
    created_at        TEXT NOT NULL DEFAULT (strftime('%Y-%m-%dT%H:%M:%SZ','now'))
);

CREATE INDEX IF NOT EXISTS idx_document_files_document ON document_files(document_id);
CREATE INDEX IF NOT EXISTS idx_document_files_hash ON document_files(file_hash);
CREATE UNIQUE INDEX IF NOT EXISTS idx_document_files_path ON document_files(stored_path);

CREATE TABLE IF NOT EXISTS document_trails (
    id              TEXT PRIMARY KEY,
    document_id     TEXT NOT NULL REFERENCES documents(id) ON DELETE CASCADE,
    action_id       TEXT REFERENCES document_actions(id) ON DELETE SET NULL,
    from_department TEXT REFERENCES departments(id) ON DELETE SET NULL,
    to_department   TEXT REFERENCES departments(id) ON DELETE SET NULL,
    user_id         TEXT REFERENCES users(id) ON DELETE SET NULL,
    status          TEXT NOT NULL,
    remarks         TEXT,
    action_date     TEXT NOT NULL DEFAULT (strftime('%Y-%m-%dT%H:%M:%SZ','now'))
);

CREATE INDEX IF NOT EXISTS idx_trails_document ON document_trails(document_id);

-- ============================================================
-- NOTIFICATIONS & SAVED SEARCHES
-- ============================================================
CREATE TABLE IF NOT EXISTS notifications (
    id             TEXT PRIMARY KEY,
    user_id        TEXT NOT NULL REFERENCES users(id) ON DELETE CASCADE,
    title          TEXT NOT NULL,
    message        TEXT NOT NULL,
    type           TEXT NOT NULL,
    workflow_event TEXT,
    metadata       TEXT,
    is_read        INTEGER NOT NULL DEFAULT 0,
    read_at        TEXT,
    is_deleted     INTEGER NOT NULL DEFAULT 0,
    created_at     TEXT NOT NULL DEFAULT (strftime('%Y-%m-%dT%H:%M:%SZ','now'))
);

CREATE INDEX IF NOT EXISTS idx_notifications_user ON notifications(user_id, is_deleted, is_read);

CREATE TABLE IF NOT EXISTS saved_searches (
    id                 TEXT PRIMARY KEY,
    user_id            TEXT NOT NULL REFERENCES users(id) ON DELETE CASCADE,
    name               TEXT NOT NULL,
    description        TEXT,
    query              TEXT NOT NULL DEFAULT '',
    filters            TEXT,
    last_run           TEXT,
    results_count      INTEGER NOT NULL DEFAULT 0,
    is_favorite        INTEGER NOT NULL DEFAULT 0,
    is_scheduled       INTEGER NOT NULL DEFAULT 0,
    schedule_frequency TEXT,
    created_at         TEXT NOT NULL DEFAULT (strftime('%Y-%m-%dT%H:%M:%SZ','now'))
);

CREATE INDEX IF NOT EXISTS idx_saved_searches_user ON saved_searches(user_id);

-- ============================================================
-- FTS5
-- ============================================================
CREATE VIRTUAL TABLE IF NOT EXISTS documents_fts USING fts5(
    title, description, document_code,
    content='documents', content_rowid='rowid'
);
"""

FTS_TRIGGERS_SQL = """\
CREATE TRIGGER IF NOT EXISTS documents_ai AFTER INSERT ON documents BEGIN
    INSERT INTO documents_fts(rowid, title, description, document_code)
    VALUES (new.rowid, new.title, new.description, new.document_code);
END;

CREATE TRIGGER IF NOT EXISTS documents_ad AFTER DELETE ON documents BEGIN
    INSERT INTO documents_fts(documents_fts, rowid, title, description, document_code)
    VALUES ('delete', old.rowid, old.title, old.description, old.document_code);
END;

CREATE TRIGGER IF NOT EXISTS documents_au AFTER UPDATE OF title, description, document_code ON documents BEGIN
    INSERT INTO documents_fts(documents_fts, rowid, title, description, document_code)
    VALUES ('delete', old.rowid, old.title, old.description, old.document_code);
    INSERT INTO documents_fts(rowid, title, description, document_code)
    VALUES (new.rowid, new.title, new.description, new.document_code);
END;
"""


MIGRATIONS = [
    # v0.2: job title on user profiles
    "ALTER TABLE users ADD COLUMN title TEXT",
    # v0.3: signature metadata
    "ALTER TABLE documents ADD COLUMN signed_by TEXT",
]


def init_db(db_path: Path | None = None):
    path = db_path or settings.db_path
    conn = sqlite3.connect(str(path))
    conn.executescript(SCHEMA_SQL)
    conn.executescript(FTS_TRIGGERS_SQL)
    # ALTER TABLE fails once the column exists, which makes reruns harmless
    for migration in MIGRATIONS:
        try:
            conn.execute(migration)
            conn.commit()
        except sqlite3.OperationalError:
            pass  # already applied
    conn.close()
