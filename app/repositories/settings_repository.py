import json
from typing import Dict, Optional

SETTINGS_ROW_ID = "singleton"


class SettingsRepository:
    def __init__(self, db):
        self.db = db

    def load_document(self) -> Optional[Dict]:
        conn = self.db._get_connection()
        cursor = conn.cursor()
        cursor.execute(
            "SELECT document FROM settings WHERE id = ? LIMIT 1",
            (SETTINGS_ROW_ID,),
        )
        row = cursor.fetchone()
        conn.close()
        if not row:
            return None
        try:
            doc = json.loads(row["document"] or "{}")
        except ValueError:
            return None
        return doc if isinstance(doc, dict) else None

    def save_document(self, document: Dict) -> None:
        conn = self.db._get_connection()
        cursor = conn.cursor()
        cursor.execute(
            """
            INSERT INTO settings (id, document, updated_at)
            VALUES (?, ?, ?)
            ON CONFLICT(id) DO UPDATE SET
                document = excluded.document,
                updated_at = excluded.updated_at
            """,
            (
                SETTINGS_ROW_ID,
                json.dumps(document, ensure_ascii=False),
                document.get("updated_at"),
            ),
        )
        conn.commit()
        conn.close()


class InMemorySettingsRepository:
    """进程内设置存储，与 SettingsRepository 接口一致"""

    def __init__(self, document: Optional[Dict] = None):
        self._document = json.loads(json.dumps(document)) if document is not None else None

    def load_document(self) -> Optional[Dict]:
        if self._document is None:
            return None
        return json.loads(json.dumps(self._document))

    def save_document(self, document: Dict) -> None:
        self._document = json.loads(json.dumps(document))
