# conciliador/db_handler.py
# sqlite store for the three source bases, operator overrides/exclusions
# and the activity log. One connection per call.

import sqlite3
import pandas as pd
import json
import logging

from .models import AppState, Source, record_from_row, record_to_row

logger = logging.getLogger(__name__)


class StaleStateError(RuntimeError):
    """Stored state moved on since it was loaded (another writer saved first)."""

    def __init__(self, expected, found):
        self.expected = expected
        self.found = found
        super().__init__(f"State version conflict: expected v{expected}, store has v{found}")


def _dumps(obj) -> str:
    return json.dumps(obj, ensure_ascii=False)


def _connect(db_path):
    return sqlite3.connect(db_path)


def init_db(db_path):
    conn = _connect(db_path)
    c = conn.cursor()

    c.execute('''
        CREATE TABLE IF NOT EXISTS source_rows (
            system    TEXT,
            position  INTEGER,
            row_json  TEXT,
            PRIMARY KEY (system, position)
        )
    ''')

    c.execute('''
        CREATE TABLE IF NOT EXISTS payer_overrides (
            dependent_id TEXT PRIMARY KEY,
            payer_id     TEXT
        )
    ''')

    c.execute('''
        CREATE TABLE IF NOT EXISTS matrix_exclusions (
            doc_id TEXT PRIMARY KEY
        )
    ''')

    c.execute('''
        CREATE TABLE IF NOT EXISTS audit_log (
            id          TEXT PRIMARY KEY,
            user        TEXT,
            action      TEXT,
            details     TEXT,
            timestamp   DATETIME
        )
    ''')

    c.execute('''
        CREATE TABLE IF NOT EXISTS state_meta (
            key   TEXT PRIMARY KEY,
            value TEXT
        )
    ''')
    c.execute("INSERT OR IGNORE INTO state_meta (key, value) VALUES ('version', '0')")

    conn.commit()
    conn.close()


def _stored_version(c):
    row = c.execute("SELECT value FROM state_meta WHERE key='version'").fetchone()
    return int(row[0]) if row else 0


def load_state(db_path):
    conn = _connect(db_path)
    c = conn.cursor()
    records = {}
    for source in Source:
        rows = c.execute(
            "SELECT row_json FROM source_rows WHERE system=? ORDER BY position",
            (source.value,)).fetchall()
        records[source.value] = tuple(record_from_row(source, json.loads(r[0])) for r in rows)
    overrides  = dict(c.execute("SELECT dependent_id, payer_id FROM payer_overrides").fetchall())
    exclusions = frozenset(r[0] for r in c.execute("SELECT doc_id FROM matrix_exclusions"))
    version    = _stored_version(c)
    conn.close()
    return AppState(payer_overrides=overrides, matrix_exclusions=exclusions,
                    version=version, **records)


def save_state(state, db_path, base_version):
    """
    Replaces the whole stored state in one transaction.
    Raises StaleStateError when the store is no longer at base_version.
    """
    conn = _connect(db_path)
    try:
        with conn:
            c = conn.cursor()
            found = _stored_version(c)
            if found != base_version:
                raise StaleStateError(base_version, found)

            c.execute("DELETE FROM source_rows")
            for source in Source:
                c.executemany(
                    "INSERT INTO source_rows (system, position, row_json) VALUES (?,?,?)",
                    [(source.value, pos, _dumps(record_to_row(source, rec)))
                     for pos, rec in enumerate(state.records(source))])

            c.execute("DELETE FROM payer_overrides")
            c.executemany("INSERT INTO payer_overrides (dependent_id, payer_id) VALUES (?,?)",
                          sorted(state.payer_overrides.items()))

            c.execute("DELETE FROM matrix_exclusions")
            c.executemany("INSERT INTO matrix_exclusions (doc_id) VALUES (?)",
                          [(d,) for d in sorted(state.matrix_exclusions)])

            c.execute("UPDATE state_meta SET value=? WHERE key='version'", (str(state.version),))
    finally:
        conn.close()
    logger.debug("Saved state v%d to %s", state.version, db_path)


def log_action(entry, db_path):
    conn = _connect(db_path)
    c = conn.cursor()
    c.execute(
        "INSERT INTO audit_log (id, user, action, details, timestamp) VALUES (?,?,?,?,?)",
        (entry.id, entry.user, entry.action, entry.details, entry.timestamp))
    conn.commit()
    conn.close()


def get_audit_log(db_path):
    conn = _connect(db_path)
    df = pd.read_sql(
        "SELECT timestamp, user, action, details FROM audit_log ORDER BY timestamp DESC, rowid DESC",
        conn)
    conn.close()
    return df
