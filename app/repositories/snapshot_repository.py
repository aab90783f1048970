import json
from typing import Dict, List, Optional

_SNAPSHOT_COLUMNS = """
    id, taken_at, period, range_start, range_end, banner_title, page_size,
    socials_json, prize_config_json, data_json, image, entry_count
"""


class SnapshotRepository:
    def __init__(self, db):
        self.db = db

    def insert_snapshot(self, snapshot: Dict) -> None:
        data = snapshot.get("data", [])
        conn = self.db._get_connection()
        cursor = conn.cursor()
        cursor.execute(
            """
            INSERT INTO snapshots (
                id, taken_at, period, range_start, range_end, banner_title, page_size,
                socials_json, prize_config_json, data_json, image, entry_count
            ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (
                str(snapshot["id"]),
                str(snapshot["takenAt"]),
                str(snapshot["period"]),
                str(snapshot["range"]["start"]),
                str(snapshot["range"]["end"]),
                str(snapshot.get("bannerTitle", "")),
                int(snapshot.get("pageSize", 0)),
                json.dumps(snapshot.get("socials", []), ensure_ascii=False),
                json.dumps(snapshot.get("prizeConfig", {}), ensure_ascii=False),
                json.dumps(data, ensure_ascii=False),
                snapshot.get("image"),
                len(data),
            ),
        )
        conn.commit()
        conn.close()

    @staticmethod
    def _load_json(raw, default):
        try:
            value = json.loads(raw) if raw else default
        except (TypeError, ValueError):
            return default
        return value if isinstance(value, type(default)) else default

    def _row_to_snapshot(self, row) -> Dict:
        item = dict(row)
        return {
            "id": item["id"],
            "takenAt": item["taken_at"],
            "period": item["period"],
            "range": {"start": item["range_start"], "end": item["range_end"]},
            "bannerTitle": item.get("banner_title") or "",
            "socials": self._load_json(item.get("socials_json"), []),
            "prizeConfig": self._load_json(item.get("prize_config_json"), {}),
            "pageSize": int(item.get("page_size") or 0),
            "data": self._load_json(item.get("data_json"), []),
            "image": item.get("image"),
        }

    def get_snapshot(self, snapshot_id: str) -> Optional[Dict]:
        conn = self.db._get_connection()
        cursor = conn.cursor()
        cursor.execute(
            f"SELECT {_SNAPSHOT_COLUMNS} FROM snapshots WHERE id = ? LIMIT 1",
            (str(snapshot_id),),
        )
        row = cursor.fetchone()
        conn.close()
        if not row:
            return None
        return self._row_to_snapshot(row)

    def list_snapshot_summaries(self, limit: int = 100) -> List[Dict]:
        safe_limit = max(1, min(int(limit), 1000))
        conn = self.db._get_connection()
        cursor = conn.cursor()
        cursor.execute(
            """
            SELECT id, taken_at, period, range_start, range_end, banner_title, image, entry_count
            FROM snapshots
            ORDER BY taken_at DESC, id DESC
            LIMIT ?
            """,
            (safe_limit,),
        )
        rows = cursor.fetchall()
        conn.close()
        return [
            {
                "id": row["id"],
                "takenAt": row["taken_at"],
                "period": row["period"],
                "range": {"start": row["range_start"], "end": row["range_end"]},
                "bannerTitle": row["banner_title"] or "",
                "entryCount": int(row["entry_count"] or 0),
                "hasImage": bool(row["image"]),
                "image": row["image"],
            }
            for row in rows
        ]

    def attach_image(self, snapshot_id: str, image: str) -> bool:
        conn = self.db._get_connection()
        cursor = conn.cursor()
        cursor.execute(
            "UPDATE snapshots SET image = ? WHERE id = ? AND image IS NULL",
            (str(image), str(snapshot_id)),
        )
        updated = cursor.rowcount > 0
        conn.commit()
        conn.close()
        return updated

    def has_snapshot_since(self, taken_at: str) -> bool:
        conn = self.db._get_connection()
        cursor = conn.cursor()
        cursor.execute(
            "SELECT 1 FROM snapshots WHERE taken_at >= ? LIMIT 1",
            (str(taken_at),),
        )
        row = cursor.fetchone()
        conn.close()
        return row is not None
