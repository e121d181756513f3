import logging
import os
import sqlite3
from typing import Optional, Tuple
import numpy as np

from face_auth.app.errors import DimensionMismatch
from face_auth.app.utils import deserialize_vector, now_ts, serialize_vector


logger = logging.getLogger(__name__)


def _read_schema() -> str:
    here = os.path.dirname(__file__)
    path = os.path.join(here, "schema.sql")
    with open(path, "r", encoding="utf-8") as f:
        return f.read()


class TemplateStore:
    """Single enrolled template, persisted under one well-known slot."""

    def __init__(self, db_path: str, slot: str = "registeredFaceVector"):
        self.db_path = db_path
        self.slot = slot
        os.makedirs(os.path.dirname(os.path.abspath(db_path)), exist_ok=True)
        self.conn = sqlite3.connect(db_path, check_same_thread=False)
        self._migrate()

    def _migrate(self):
        self.conn.executescript(_read_schema())
        self.conn.commit()

    def execute(self, sql: str, params: Tuple = ()):
        cur = self.conn.execute(sql, params)
        self.conn.commit()
        return cur

    def query(self, sql: str, params: Tuple = ()):
        cur = self.conn.execute(sql, params)
        return cur.fetchall()

    def enroll(self, vector: np.ndarray) -> None:
        vec = np.asarray(vector, dtype=np.float64)
        if vec.ndim != 1 or vec.size == 0:
            raise ValueError(f"template must be a non-empty 1-D vector, got shape {vec.shape}")
        if not np.all(np.isfinite(vec)):
            raise ValueError("template must contain only finite values")
        ts = now_ts()
        self.execute(
            """
            INSERT INTO face_templates (slot,vector,dim,created_at,updated_at)
            VALUES (?,?,?,?,?)
            ON CONFLICT(slot) DO UPDATE SET
                vector=excluded.vector,
                dim=excluded.dim,
                updated_at=excluded.updated_at
            """,
            (self.slot, serialize_vector(vec), int(vec.size), ts, ts),
        )
        logger.debug("Stored %d-dim template in slot %s", vec.size, self.slot)

    def load(self) -> Optional[np.ndarray]:
        rows = self.query("SELECT vector,dim FROM face_templates WHERE slot=?", (self.slot,))
        if not rows:
            return None
        vec = deserialize_vector(rows[0][0])
        if vec.size != int(rows[0][1]):
            raise DimensionMismatch(f"stored template has {vec.size} values, expected {rows[0][1]}")
        return vec

    def clear(self) -> bool:
        cur = self.execute("DELETE FROM face_templates WHERE slot=?", (self.slot,))
        return cur.rowcount > 0

    def close(self):
        self.conn.close()
