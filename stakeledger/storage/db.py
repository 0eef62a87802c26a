import sqlite3
import threading
from typing import Optional, Tuple, Dict, List

class StorageDB:
    def __init__(self, db_path: str):
        self.conn = sqlite3.connect(db_path, check_same_thread=False)
        self.cursor = self.conn.cursor()
        self._lock = threading.Lock()
        self._init_db()

    def _init_db(self):
        with self._lock:
            # Operations table: one receipt per submitted operation
            self.cursor.execute('''
                CREATE TABLE IF NOT EXISTS operations (
                    seq INTEGER PRIMARY KEY,
                    op_type TEXT,
                    status TEXT,
                    data TEXT
                )
            ''')
            # State table: Key-Value store for ledger state
            self.cursor.execute('''
                CREATE TABLE IF NOT EXISTS state (
                    key TEXT PRIMARY KEY,
                    value TEXT
                )
            ''')
            self.conn.commit()

    def close(self):
        with self._lock:
            self.conn.close()

    # --- Operation Log ---
    def save_operation(self, seq: int, op_type: str, status: str, data: str):
        with self._lock:
            self.cursor.execute('INSERT OR REPLACE INTO operations (seq, op_type, status, data) VALUES (?, ?, ?, ?)',
                                (seq, op_type, status, data))
            self.conn.commit()

    def get_operation(self, seq: int) -> Optional[str]:
        with self._lock:
            self.cursor.execute('SELECT data FROM operations WHERE seq = ?', (seq,))
            row = self.cursor.fetchone()
            return row[0] if row else None

    def get_operations(self, limit: int = 50) -> List[str]:
        """Returns the most recent operation receipts, newest first."""
        with self._lock:
            self.cursor.execute('SELECT data FROM operations ORDER BY seq DESC LIMIT ?', (limit,))
            return [row[0] for row in self.cursor.fetchall()]

    def get_last_seq(self) -> int:
        with self._lock:
            self.cursor.execute('SELECT MAX(seq) FROM operations')
            row = self.cursor.fetchone()
            return row[0] if row and row[0] is not None else -1

    # --- State Methods ---
    def get_state(self, key: str) -> Optional[str]:
        with self._lock:
            self.cursor.execute('SELECT value FROM state WHERE key = ?', (key,))
            row = self.cursor.fetchone()
            return row[0] if row else None

    def set_state(self, key: str, value: str):
        with self._lock:
            self.cursor.execute('INSERT OR REPLACE INTO state (key, value) VALUES (?, ?)', (key, value))
            self.conn.commit()

    def get_state_by_prefix(self, prefix: str) -> Dict[str, str]:
        with self._lock:
            # substr instead of LIKE: addresses may contain '_' or '%'
            self.cursor.execute('SELECT key, value FROM state WHERE substr(key, 1, ?) = ?', (len(prefix), prefix))
            return {row[0]: row[1] for row in self.cursor.fetchall()}

    def replace_state(self, items: Dict[str, str], operation: Optional[Tuple[int, str, str, str]] = None):
        """
        Replaces the whole state table, and optionally logs an operation,
        in a single transaction.
        """
        with self._lock:
            try:
                self.cursor.execute('DELETE FROM state')
                self.cursor.executemany('INSERT INTO state (key, value) VALUES (?, ?)', list(items.items()))
                if operation is not None:
                    self.cursor.execute('INSERT OR REPLACE INTO operations (seq, op_type, status, data) VALUES (?, ?, ?, ?)',
                                        operation)
                self.conn.commit()
            except sqlite3.Error:
                self.conn.rollback()
                raise

    def clear_state(self):
        with self._lock:
            self.cursor.execute('DELETE FROM state')
            self.conn.commit()
