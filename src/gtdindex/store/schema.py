"""Database schema definitions for gtdindex."""

SCHEMA_VERSION = 1

SCHEMA_SQL = """\
-- Normalized notes and manual documents
CREATE TABLE IF NOT EXISTS documents (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    source_id TEXT UNIQUE,
    title TEXT NOT NULL,
    content TEXT NOT NULL DEFAULT '',
    contexts TEXT NOT NULL DEFAULT '["@inbox"]',
    project TEXT,
    area TEXT,
    status TEXT NOT NULL DEFAULT 'active',
    source_type TEXT NOT NULL DEFAULT 'evernote',
    metadata TEXT NOT NULL DEFAULT '{}',
    embedding BLOB,
    needs_embedding INTEGER NOT NULL DEFAULT 1,
    is_active INTEGER NOT NULL DEFAULT 1,
    created_at TEXT NOT NULL,
    updated_at TEXT NOT NULL
);

-- Inverted index for context filtering
CREATE TABLE IF NOT EXISTS document_contexts (
    document_id INTEGER NOT NULL REFERENCES documents(id) ON DELETE CASCADE,
    context TEXT NOT NULL,
    PRIMARY KEY (document_id, context)
);

-- Full-text index over title and content (rowid = documents.id)
CREATE VIRTUAL TABLE IF NOT EXISTS documents_fts USING fts5(
    title, content,
    tokenize='porter unicode61'
);

-- Decoded resources; bytes live in blob storage
CREATE TABLE IF NOT EXISTS attachments (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    document_id INTEGER NOT NULL REFERENCES documents(id) ON DELETE CASCADE,
    filename TEXT NOT NULL,
    mime_type TEXT NOT NULL,
    byte_size INTEGER NOT NULL DEFAULT 0,
    storage_reference TEXT NOT NULL,
    extracted_text TEXT,
    metadata TEXT NOT NULL DEFAULT '{}',
    created_at TEXT NOT NULL,
    UNIQUE(document_id, storage_reference)
);

-- Documents awaiting vector generation
CREATE TABLE IF NOT EXISTS embedding_queue (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    document_id INTEGER NOT NULL REFERENCES documents(id) ON DELETE CASCADE,
    priority INTEGER NOT NULL DEFAULT 5,
    attempts INTEGER NOT NULL DEFAULT 0,
    last_error TEXT,
    created_at TEXT NOT NULL,
    last_attempt_at TEXT,
    processed_at TEXT,
    claim_token TEXT,
    claimed_at TEXT
);

-- Bulk import progress
CREATE TABLE IF NOT EXISTS migration_jobs (
    job_id TEXT PRIMARY KEY,
    status TEXT NOT NULL DEFAULT 'pending',
    total_items INTEGER NOT NULL DEFAULT 0,
    processed_items INTEGER NOT NULL DEFAULT 0,
    failed_items INTEGER NOT NULL DEFAULT 0,
    error_log TEXT NOT NULL DEFAULT '[]',
    started_at TEXT,
    completed_at TEXT,
    last_checkpoint_at TEXT
);

-- Executed searches, used for suggestions and status
CREATE TABLE IF NOT EXISTS search_history (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    query TEXT NOT NULL,
    filters TEXT NOT NULL DEFAULT '{}',
    result_count INTEGER NOT NULL DEFAULT 0,
    created_at TEXT NOT NULL
);

-- Indexes for performance
CREATE INDEX IF NOT EXISTS idx_documents_project ON documents(project);
CREATE INDEX IF NOT EXISTS idx_documents_area ON documents(area);
CREATE INDEX IF NOT EXISTS idx_documents_active ON documents(is_active);
CREATE INDEX IF NOT EXISTS idx_document_contexts_context ON document_contexts(context);
CREATE INDEX IF NOT EXISTS idx_attachments_document ON attachments(document_id);
CREATE INDEX IF NOT EXISTS idx_embedding_queue_pending
    ON embedding_queue(priority DESC, created_at ASC) WHERE processed_at IS NULL;
CREATE UNIQUE INDEX IF NOT EXISTS uq_embedding_queue_pending_document
    ON embedding_queue(document_id) WHERE processed_at IS NULL;
CREATE INDEX IF NOT EXISTS idx_search_history_created ON search_history(created_at);
"""


def get_schema() -> str:
    """Get the SQL schema string."""
    return SCHEMA_SQL
