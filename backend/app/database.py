import sqlite3
from pathlib import Path
from sqlalchemy import create_engine, event
from sqlalchemy.orm import DeclarativeBase, sessionmaker

from app.config import settings


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


# Timestamps are stored in SQLAlchemy's SQLite DateTime text format, naive UTC.
SCHEMA_SQL = """\
-- ============================================================
-- ACCOUNTS
-- ============================================================
CREATE TABLE IF NOT EXISTS advertisers (
    id           INTEGER PRIMARY KEY AUTOINCREMENT,
    email        TEXT NOT NULL UNIQUE,
    forename     TEXT,
    surname      TEXT,
    company_name TEXT,
    created_at   TIMESTAMP NOT NULL
);

CREATE TABLE IF NOT EXISTS subusers (
    id            INTEGER PRIMARY KEY AUTOINCREMENT,
    advertiser_id INTEGER NOT NULL REFERENCES advertisers(id) ON DELETE CASCADE,
    email         TEXT NOT NULL,
    forename      TEXT,
    surname       TEXT
);

CREATE INDEX IF NOT EXISTS idx_subusers_advertiser ON subusers(advertiser_id);

-- ============================================================
-- TAXONOMIES (nested sets)
-- ============================================================
CREATE TABLE IF NOT EXISTS categories (
    id   INTEGER PRIMARY KEY AUTOINCREMENT,
    name TEXT NOT NULL,
    lft  INTEGER NOT NULL,
    rgt  INTEGER NOT NULL
);

CREATE TABLE IF NOT EXISTS locations (
    id    INTEGER PRIMARY KEY AUTOINCREMENT,
    name  TEXT NOT NULL,
    state TEXT,
    lft   INTEGER NOT NULL,
    rgt   INTEGER NOT NULL
);

CREATE INDEX IF NOT EXISTS idx_categories_lft ON categories(lft);
CREATE INDEX IF NOT EXISTS idx_locations_lft ON locations(lft);

-- ============================================================
-- ADVERTS
-- ============================================================
CREATE TABLE IF NOT EXISTS adverts (
    id                   INTEGER PRIMARY KEY AUTOINCREMENT,
    reference            TEXT NOT NULL,
    job_title            TEXT NOT NULL,
    job_type             TEXT NOT NULL
                         CHECK(job_type IN ('Permanent','Temporary','Contract')),
    description          TEXT NOT NULL,
    telephone            TEXT NOT NULL,
    submitters_forename  TEXT NOT NULL,
    submitters_surname   TEXT NOT NULL,
    email                TEXT,
    password_digest      TEXT,
    approved             BOOLEAN NOT NULL DEFAULT 0,
    archived             BOOLEAN NOT NULL DEFAULT 0,
    advert_date          TIMESTAMP,
    live_at              TIMESTAMP,
    active_until         TIMESTAMP,
    premium_until        TIMESTAMP,
    advertiser_id        INTEGER REFERENCES advertisers(id) ON DELETE SET NULL,
    subuser_id           INTEGER REFERENCES subusers(id) ON DELETE SET NULL,
    created_at           TIMESTAMP NOT NULL,
    updated_at           TIMESTAMP NOT NULL
);

CREATE INDEX IF NOT EXISTS idx_adverts_active_until ON adverts(active_until);
CREATE INDEX IF NOT EXISTS idx_adverts_premium_until ON adverts(premium_until);
CREATE INDEX IF NOT EXISTS idx_adverts_advert_date ON adverts(advert_date);
CREATE INDEX IF NOT EXISTS idx_adverts_advertiser ON adverts(advertiser_id);

CREATE TABLE IF NOT EXISTS advert_categories (
    advert_id   INTEGER NOT NULL REFERENCES adverts(id) ON DELETE CASCADE,
    category_id INTEGER NOT NULL REFERENCES categories(id) ON DELETE CASCADE,
    PRIMARY KEY (advert_id, category_id)
);

CREATE TABLE IF NOT EXISTS advert_locations (
    advert_id   INTEGER NOT NULL REFERENCES adverts(id) ON DELETE CASCADE,
    location_id INTEGER NOT NULL REFERENCES locations(id) ON DELETE CASCADE,
    PRIMARY KEY (advert_id, location_id)
);

-- ============================================================
-- ORDERS
-- ============================================================
CREATE TABLE IF NOT EXISTS products (
    id     INTEGER PRIMARY KEY AUTOINCREMENT,
    name   TEXT NOT NULL,
    kind   TEXT NOT NULL DEFAULT 'advert',
    action TEXT NOT NULL CHECK(action IN ('advertise','bump','premium'))
);

CREATE TABLE IF NOT EXISTS orders (
    id            INTEGER PRIMARY KEY AUTOINCREMENT,
    advertiser_id INTEGER REFERENCES advertisers(id) ON DELETE SET NULL,
    subuser_id    INTEGER REFERENCES subusers(id) ON DELETE SET NULL,
    company_name  TEXT,
    status        TEXT NOT NULL DEFAULT 'pending'
                  CHECK(status IN ('pending','completed')),
    created_at    TIMESTAMP NOT NULL,
    completed_at  TIMESTAMP
);

CREATE INDEX IF NOT EXISTS idx_orders_subuser ON orders(subuser_id);

CREATE TABLE IF NOT EXISTS order_items (
    id         INTEGER PRIMARY KEY AUTOINCREMENT,
    order_id   INTEGER NOT NULL REFERENCES orders(id) ON DELETE CASCADE,
    product_id INTEGER NOT NULL REFERENCES products(id),
    advert_id  INTEGER NOT NULL REFERENCES adverts(id) ON DELETE CASCADE,
    created_at TIMESTAMP NOT NULL
);

CREATE INDEX IF NOT EXISTS idx_order_items_advert ON order_items(advert_id);
CREATE INDEX IF NOT EXISTS idx_order_items_order ON order_items(order_id);
"""


MIGRATIONS = [
    # v0.2: cached short links
    "ALTER TABLE adverts ADD COLUMN short_url_cache TEXT",
]


def init_db(db_path: Path | None = None):
    path = db_path or settings.db_path
    conn = sqlite3.connect(str(path))
    conn.executescript(SCHEMA_SQL)
    # Run migrations idempotently (ALTER TABLE fails silently if column exists)
    for migration in MIGRATIONS:
        try:
            conn.execute(migration)
            conn.commit()
        except sqlite3.OperationalError:
            pass  # column already exists
    conn.close()
