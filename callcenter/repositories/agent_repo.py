class AgentRepository:

    def __init__(self, conn):
        self.conn = conn
        self.cursor = conn.cursor()

    def create(self, row_id, user_id, agent_id, name, voice, language, created_at):
        self.cursor.execute("""
            INSERT INTO agents (id, user_id, agent_id, name, voice, language, created_at, updated_at)
            VALUES (?, ?, ?, ?, ?, ?, ?, ?)
        """, (row_id, user_id, agent_id, name, voice, language, created_at, created_at))

    def list_by_user(self, user_id: str):
        self.cursor.execute("""
            SELECT * FROM agents
            WHERE user_id = ?
            ORDER BY created_at DESC
        """, (user_id,))
        return [dict(row) for row in self.cursor.fetchall()]

    def get_owned(self, row_id: str, user_id: str):
        self.cursor.execute(
            "SELECT * FROM agents WHERE id = ? AND user_id = ?",
            (row_id, user_id)
        )
        row = self.cursor.fetchone()
        return dict(row) if row else None

    def update(self, row_id, user_id, name, voice, language, updated_at):
        self.cursor.execute("""
            UPDATE agents
            SET name = ?, voice = ?, language = ?, updated_at = ?
            WHERE id = ? AND user_id = ?
        """, (name, voice, language, updated_at, row_id, user_id))
        return self.cursor.rowcount

    def delete(self, row_id: str, user_id: str):
        self.cursor.execute(
            "DELETE FROM agents WHERE id = ? AND user_id = ?",
            (row_id, user_id)
        )
        return self.cursor.rowcount
