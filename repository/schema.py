# repository/schema.py
# Version 1.0.0 dated 20261019
# Centralized database schema definition for repository layer
#
# Single source of truth for the catalog tables, indexes, and constraints.

"""
Catalog schema.

Schema Version: 1.0.0
- pictures: one row per indexed image, keyed by absolute path
- tags: categorized tags, keyed by (case-sensitive) name
- picture_tags: set membership of pictures in tags
- watched_folders: folders registered for repeated indexing
"""

SCHEMA_VERSION = "1.0.0"

TAG_CATEGORIES = ("person", "location", "event", "other")

SCHEMA_SQL = """
-- ============================================================================
-- SCHEMA VERSION TRACKING
-- ============================================================================
CREATE TABLE IF NOT EXISTS schema_version (
    version TEXT PRIMARY KEY,
    applied_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
    description TEXT
);

INSERT OR IGNORE INTO schema_version (version, description)
VALUES ('1.0.0', 'Pictures, categorized tags, tag membership and watched folders');

-- ============================================================================
-- PICTURES
-- ============================================================================

-- mtime_ns is the exact change-detection stamp; created_at/modified_at are
-- ISO-8601 strings for display.
CREATE TABLE IF NOT EXISTS pictures (
    path TEXT PRIMARY KEY,
    filename TEXT NOT NULL,
    size INTEGER NOT NULL DEFAULT 0,
    width INTEGER,
    height INTEGER,
    created_at TEXT,
    modified_at TEXT,
    mtime_ns INTEGER,
    indexed_at TEXT,
    thumbnail_path TEXT
);

-- ============================================================================
-- TAGGING
-- ============================================================================

CREATE TABLE IF NOT EXISTS tags (
    name TEXT PRIMARY KEY,
    category TEXT NOT NULL CHECK (category IN ('person', 'location', 'event', 'other')),
    color TEXT,
    created_at TEXT
);

CREATE TABLE IF NOT EXISTS picture_tags (
    picture_path TEXT NOT NULL,
    tag_name TEXT NOT NULL,
    created_at TEXT,
    PRIMARY KEY (picture_path, tag_name),
    FOREIGN KEY (picture_path) REFERENCES pictures(path),
    FOREIGN KEY (tag_name) REFERENCES tags(name)
);

-- ============================================================================
-- WATCHED FOLDERS
-- ============================================================================

CREATE TABLE IF NOT EXISTS watched_folders (
    path TEXT PRIMARY KEY,
    name TEXT NOT NULL,
    added_at TEXT,
    last_indexed_at TEXT,
    picture_count INTEGER NOT NULL DEFAULT 0,
    auto_reindex INTEGER NOT NULL DEFAULT 0
);

-- ============================================================================
-- INDEXES FOR PERFORMANCE
-- ============================================================================

CREATE INDEX IF NOT EXISTS idx_pictures_modified ON pictures(modified_at);
CREATE INDEX IF NOT EXISTS idx_pictures_filename ON pictures(filename);
CREATE INDEX IF NOT EXISTS idx_tags_category ON tags(category);
CREATE INDEX IF NOT EXISTS idx_picture_tags_tag ON picture_tags(tag_name, picture_path);
"""


def get_schema_sql() -> str:
    """
    Return the complete schema SQL for database initialization.

    Returns:
        str: SQL script containing all CREATE TABLE and CREATE INDEX statements
    """
    return SCHEMA_SQL


def get_schema_version() -> str:
    return SCHEMA_VERSION


def get_expected_tables() -> list[str]:
    """
    Return list of expected table names in the schema.

    Returns:
        list[str]: List of table names that should exist
    """
    return [
        "schema_version",
        "pictures",
        "tags",
        "picture_tags",
        "watched_folders",
    ]


def get_expected_indexes() -> list[str]:
    return [
        "idx_pictures_modified",
        "idx_pictures_filename",
        "idx_tags_category",
        "idx_picture_tags_tag",
    ]
