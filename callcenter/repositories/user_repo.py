class UserRepository:

    def __init__(self, conn):
        self.conn = conn
        self.cursor = conn.cursor()

    def create_user(self, user_id: str, username: str, password_hash: str, created_at: str):
        self.cursor.execute("""
            INSERT INTO users (id, username, password_hash, created_at, updated_at)
            VALUES (?, ?, ?, ?, ?)
        """, (user_id, username, password_hash, created_at, created_at))

    def get_by_username(self, username: str):
        self.cursor.execute(
            "SELECT * FROM users WHERE username = ?",
            (username,)
        )
        row = self.cursor.fetchone()
        return dict(row) if row else None

    def get_with_password_hash(self, user_id: str):
        self.cursor.execute(
            "SELECT * FROM users WHERE id = ?",
            (user_id,)
        )
        row = self.cursor.fetchone()
        return dict(row) if row else None

    def update_password(self, user_id: str, password_hash: str, updated_at: str):
        self.cursor.execute("""
            UPDATE users
            SET password_hash = ?, updated_at = ?
            WHERE id = ?
        """, (password_hash, updated_at, user_id))

    # ---------- SESSIONS ----------

    def create_session(self, session_id: str, user_id: str, token: str, expires_at: str, created_at: str):
        self.cursor.execute("""
            INSERT INTO user_sessions (id, user_id, session_token, expires_at, created_at)
            VALUES (?, ?, ?, ?, ?)
        """, (session_id, user_id, token, expires_at, created_at))

    def get_session(self, token: str):
        self.cursor.execute("""
            SELECT s.user_id, s.expires_at, u.username
            FROM user_sessions s
            JOIN users u ON u.id = s.user_id
            WHERE s.session_token = ?
        """, (token,))
        row = self.cursor.fetchone()
        return dict(row) if row else None

    def delete_session(self, token: str):
        self.cursor.execute(
            "DELETE FROM user_sessions WHERE session_token = ?",
            (token,)
        )

    def delete_expired_sessions(self, now: str) -> int:
        self.cursor.execute(
            "DELETE FROM user_sessions WHERE expires_at < ?",
            (now,)
        )
        return self.cursor.rowcount
