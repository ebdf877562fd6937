"""Database schema for the vector store."""

SCHEMA = """
-- Documents table: one row per (thread, source)
CREATE TABLE IF NOT EXISTS documents (
    id            INTEGER PRIMARY KEY AUTOINCREMENT,
    source_id     TEXT NOT NULL,
    thread_id     TEXT NOT NULL DEFAULT '',
    title         TEXT NOT NULL DEFAULT '',
    content       TEXT NOT NULL DEFAULT '',
    source_type   TEXT NOT NULL DEFAULT '',
    source_name   TEXT NOT NULL DEFAULT '',
    message_count INTEGER NOT NULL DEFAULT 1,
    metadata      TEXT NOT NULL DEFAULT '{}',   -- JSON object
    created_at    TEXT NOT NULL,                -- RFC 3339, UTC
    updated_at    TEXT NOT NULL,
    indexed_at    TEXT NOT NULL,
    UNIQUE(thread_id, source_name)
);

-- Vectors table: float32 embeddings keyed 1:1 by document id
CREATE TABLE IF NOT EXISTS vectors (
    document_id INTEGER PRIMARY KEY,
    embedding BLOB NOT NULL,
    FOREIGN KEY (document_id) REFERENCES documents(id)
);

-- Metadata table: store-level settings (dimensions, embedding model)
CREATE TABLE IF NOT EXISTS store_metadata (
    key TEXT PRIMARY KEY,
    value TEXT
);

-- Indexes for efficient queries
CREATE INDEX IF NOT EXISTS idx_documents_thread_id ON documents(thread_id);
CREATE INDEX IF NOT EXISTS idx_documents_source_name ON documents(source_name);
CREATE INDEX IF NOT EXISTS idx_documents_source_type ON documents(source_type);
"""
