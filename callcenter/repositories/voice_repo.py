VOICE_FIELDS = (
    "country_code",
    "default_name",
    "concurrent_limit",
    "manual_voice_id",
    "provider",
    "model",
    "stability",
    "similarity_boost",
    "style",
    "use_speaker_boost",
    "speed",
    "optimize_streaming_latency",
    "auto_mode",
)

BOOLEAN_FIELDS = ("use_speaker_boost", "auto_mode")


def _row_to_config(row):
    if not row:
        return None
    config = dict(row)
    for field in BOOLEAN_FIELDS:
        if config[field] is not None:
            config[field] = bool(config[field])
    return config


class VoiceConfigRepository:
    """One row per user; every voice column is optional"""

    def __init__(self, conn):
        self.conn = conn
        self.cursor = conn.cursor()

    def get(self, user_id: str):
        self.cursor.execute(
            "SELECT * FROM voice_config WHERE user_id = ?",
            (user_id,)
        )
        return _row_to_config(self.cursor.fetchone())

    def upsert(self, row_id: str, user_id: str, values: dict, timestamp: str):
        columns = ", ".join(VOICE_FIELDS)
        placeholders = ", ".join("?" for _ in VOICE_FIELDS)
        updates = ",\n                ".join(f"{field} = excluded.{field}" for field in VOICE_FIELDS)

        self.cursor.execute(f"""
            INSERT INTO voice_config
            (id, user_id, {columns}, created_at, updated_at)
            VALUES (?, ?, {placeholders}, ?, ?)
            ON CONFLICT(user_id) DO UPDATE SET
                {updates},
                updated_at = excluded.updated_at
        """, (row_id, user_id, *(values.get(field) for field in VOICE_FIELDS), timestamp, timestamp))
