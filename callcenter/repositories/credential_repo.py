class CredentialRepository:
    """API credentials for the calling platform and telephony trunk settings"""

    def __init__(self, conn):
        self.conn = conn
        self.cursor = conn.cursor()

    # ---------- API KEYS ----------

    def get_api_keys(self, user_id: str):
        self.cursor.execute(
            "SELECT * FROM api_keys WHERE user_id = ?",
            (user_id,)
        )
        row = self.cursor.fetchone()
        return dict(row) if row else None

    def upsert_api_keys(self, row_id, user_id, vapi_api_key, assistant_id, phone_number_id, timestamp):
        self.cursor.execute("""
            INSERT INTO api_keys
            (id, user_id, vapi_api_key, assistant_id, phone_number_id, status, created_at, updated_at)
            VALUES (?, ?, ?, ?, ?, 'active', ?, ?)
            ON CONFLICT(user_id) DO UPDATE SET
                vapi_api_key = excluded.vapi_api_key,
                assistant_id = excluded.assistant_id,
                phone_number_id = excluded.phone_number_id,
                updated_at = excluded.updated_at
        """, (row_id, user_id, vapi_api_key, assistant_id, phone_number_id, timestamp, timestamp))

    def get_owner_by_assistant_id(self, assistant_id: str):
        self.cursor.execute(
            "SELECT user_id FROM api_keys WHERE assistant_id = ? LIMIT 1",
            (assistant_id,)
        )
        row = self.cursor.fetchone()
        return row["user_id"] if row else None

    # ---------- PHONE CONFIG ----------

    def get_phone_config(self, user_id: str):
        self.cursor.execute(
            "SELECT * FROM phone_config WHERE user_id = ?",
            (user_id,)
        )
        row = self.cursor.fetchone()
        return dict(row) if row else None

    def upsert_phone_config(self, row_id, user_id, phone_number, account_sid, auth_token, timestamp):
        self.cursor.execute("""
            INSERT INTO phone_config
            (id, user_id, twilio_phone_number, twilio_account_sid, twilio_auth_token, created_at, updated_at)
            VALUES (?, ?, ?, ?, ?, ?, ?)
            ON CONFLICT(user_id) DO UPDATE SET
                twilio_phone_number = excluded.twilio_phone_number,
                twilio_account_sid = excluded.twilio_account_sid,
                twilio_auth_token = excluded.twilio_auth_token,
                updated_at = excluded.updated_at
        """, (row_id, user_id, phone_number, account_sid, auth_token, timestamp, timestamp))
