SCHEMA_SQL = r"""
-- Batches (one sales period = one batch)
CREATE TABLE IF NOT EXISTS batches (
  id TEXT PRIMARY KEY,                   -- uuid hex
  name TEXT NOT NULL,
  description TEXT,
  active INTEGER NOT NULL DEFAULT 0,     -- 0 / 1
  created_at TEXT NOT NULL               -- ISO datetime (UTC)
);

-- Products: one row per (batch, day, category), at most 12 per batch
CREATE TABLE IF NOT EXISTS products (
  id TEXT PRIMARY KEY,
  batch_id TEXT NOT NULL,
  day INTEGER NOT NULL CHECK (day BETWEEN 1 AND 6),
  category TEXT NOT NULL CHECK (category IN ('M', 'F')),
  display_name TEXT,
  description TEXT,
  stock INTEGER NOT NULL DEFAULT 0 CHECK (stock >= 0),

  -- Unit price when the selection has N distinct days in this category
  price_bracket_1 REAL NOT NULL DEFAULT 0,
  price_bracket_2 REAL NOT NULL DEFAULT 0,
  price_bracket_3 REAL NOT NULL DEFAULT 0,
  price_bracket_4 REAL NOT NULL DEFAULT 0,
  price_bracket_5 REAL NOT NULL DEFAULT 0,
  price_bracket_6 REAL NOT NULL DEFAULT 0,

  UNIQUE (batch_id, day, category),
  FOREIGN KEY (batch_id) REFERENCES batches(id) ON DELETE CASCADE
);

-- Admin accounts for the catalog admin page
CREATE TABLE IF NOT EXISTS admin_users (
  id TEXT PRIMARY KEY,
  email TEXT NOT NULL UNIQUE,
  hashed_password TEXT NOT NULL,
  redirect_target TEXT,
  created_at TEXT NOT NULL
);
"""
