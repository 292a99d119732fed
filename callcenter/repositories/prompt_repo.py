class PromptRepository:

    def __init__(self, conn):
        self.conn = conn
        self.cursor = conn.cursor()

    def create(self, prompt_id, user_id, prompt_name, first_message, system_prompt, created_at):
        self.cursor.execute("""
            INSERT INTO prompts (id, user_id, prompt_name, first_message, system_prompt, created_at, updated_at)
            VALUES (?, ?, ?, ?, ?, ?, ?)
        """, (prompt_id, user_id, prompt_name, first_message, system_prompt, created_at, created_at))

    def get_owned(self, prompt_id: str, user_id: str):
        self.cursor.execute(
            "SELECT * FROM prompts WHERE id = ? AND user_id = ?",
            (prompt_id, user_id)
        )
        row = self.cursor.fetchone()
        return dict(row) if row else None

    def list_by_user(self, user_id: str):
        self.cursor.execute("""
            SELECT * FROM prompts
            WHERE user_id = ?
            ORDER BY created_at DESC
        """, (user_id,))
        return [dict(row) for row in self.cursor.fetchall()]

    def update(self, prompt_id, user_id, prompt_name, first_message, system_prompt, updated_at):
        self.cursor.execute("""
            UPDATE prompts
            SET prompt_name = ?,
                first_message = ?,
                system_prompt = ?,
                updated_at = ?
            WHERE id = ? AND user_id = ?
        """, (prompt_name, first_message, system_prompt, updated_at, prompt_id, user_id))
        return self.cursor.rowcount

    def delete(self, prompt_id: str, user_id: str):
        self.cursor.execute(
            "DELETE FROM prompts WHERE id = ? AND user_id = ?",
            (prompt_id, user_id)
        )
        return self.cursor.rowcount
