class NumberRepository:

    def __init__(self, conn):
        self.conn = conn
        self.cursor = conn.cursor()

    def create(self, number_id, user_id, phone_number, phone_number_id, agent_id, created_at):
        self.cursor.execute("""
            INSERT INTO numbers (id, user_id, phone_number, phone_number_id, agent_id, created_at, updated_at)
            VALUES (?, ?, ?, ?, ?, ?, ?)
        """, (number_id, user_id, phone_number, phone_number_id, agent_id, created_at, created_at))

    def list_by_user(self, user_id: str):
        self.cursor.execute("""
            SELECT * FROM numbers
            WHERE user_id = ?
            ORDER BY created_at DESC
        """, (user_id,))
        return [dict(row) for row in self.cursor.fetchall()]

    def delete(self, number_id: str, user_id: str):
        self.cursor.execute(
            "DELETE FROM numbers WHERE id = ? AND user_id = ?",
            (number_id, user_id)
        )
        return self.cursor.rowcount

    def get_owner_by_phone(self, phone_number: str):
        self.cursor.execute(
            "SELECT user_id FROM numbers WHERE phone_number = ? LIMIT 1",
            (phone_number,)
        )
        row = self.cursor.fetchone()
        return row["user_id"] if row else None
