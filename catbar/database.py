import json
import sqlite3
import time

# Keys renamed since the first release: old name -> new name
_LEGACY_KEYS = {
    'currentCat': 'currentCompanion',
    'unlockedCats': 'unlockedCompanions',
}


class DatabaseManager:
    """Handles SQL persistence to keep the cat 'alive' on disk.

    Values are stored JSON-encoded in a single key-value table. Write
    failures are reported and swallowed: the in-memory state stays
    authoritative and the next save tries again.
    """
    def __init__(self, db_path):
        self.db_path = db_path
        self.conn = sqlite3.connect(db_path)
        self.create_tables()
        self._perform_migrations()

    def create_tables(self):
        self.conn.execute("""
            CREATE TABLE IF NOT EXISTS kv_store (
                key TEXT PRIMARY KEY,
                value TEXT NOT NULL,
                updated REAL
            )
        """)
        self.conn.commit()

    def _perform_migrations(self):
        """Rename keys written by older versions."""
        for old, new in _LEGACY_KEYS.items():
            cursor = self.conn.execute("SELECT value FROM kv_store WHERE key = ?", (old,))
            row = cursor.fetchone()
            if row is None:
                continue
            print(f"Performing migration: Renaming key '{old}' to '{new}'.")
            self.conn.execute("INSERT OR IGNORE INTO kv_store (key, value, updated) VALUES (?, ?, ?)",
                              (new, row[0], time.time()))
            self.conn.execute("DELETE FROM kv_store WHERE key = ?", (old,))
        self.conn.commit()

    def get(self, key, default=None):
        """Returns the decoded value for key, or default when absent or unreadable."""
        try:
            cursor = self.conn.execute("SELECT value FROM kv_store WHERE key = ?", (key,))
            row = cursor.fetchone()
        except sqlite3.Error as e:
            print(f"Warning: failed to read '{key}' from '{self.db_path}': {e}")
            return default
        if row is None:
            return default
        try:
            return json.loads(row[0])
        except (TypeError, ValueError) as e:
            print(f"Warning: malformed value for '{key}': {e}")
            return default

    def set(self, key, value):
        return self.set_many({key: value})

    def set_many(self, values):
        """Writes all values in one transaction. Returns True on success."""
        now = time.time()
        try:
            rows = [(key, json.dumps(value), now) for key, value in values.items()]
            self.conn.executemany(
                "INSERT OR REPLACE INTO kv_store (key, value, updated) VALUES (?, ?, ?)", rows)
            self.conn.commit()
            return True
        except (sqlite3.Error, TypeError, ValueError) as e:
            print(f"Warning: failed to save to '{self.db_path}': {e}")
            try:
                self.conn.rollback()
            except sqlite3.Error:
                pass
            return False

    def keys(self):
        cursor = self.conn.execute("SELECT key FROM kv_store ORDER BY key")
        return [row[0] for row in cursor.fetchall()]

    def close(self):
        self.conn.close()


class MemoryStore:
    """Dict-backed store with the same interface, for tests and as a fallback."""
    def __init__(self, initial=None):
        self.data = {}
        for key, value in (initial or {}).items():
            self.data[_LEGACY_KEYS.get(key, key)] = json.dumps(value)

    def get(self, key, default=None):
        if key not in self.data:
            return default
        return json.loads(self.data[key])

    def set(self, key, value):
        return self.set_many({key: value})

    def set_many(self, values):
        try:
            encoded = {key: json.dumps(value) for key, value in values.items()}
        except (TypeError, ValueError) as e:
            print(f"Warning: failed to save values: {e}")
            return False
        self.data.update(encoded)
        return True

    def keys(self):
        return sorted(self.data)

    def close(self):
        pass


def open_store(db_path):
    """Opens the sqlite store, falling back to memory when the file can't be used."""
    try:
        return DatabaseManager(db_path)
    except sqlite3.Error as e:
        print(f"Warning: could not open '{db_path}', progress will not be saved (Error: {e})")
        return MemoryStore()
