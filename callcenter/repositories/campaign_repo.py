class CampaignRepository:

    def __init__(self, conn):
        self.conn = conn
        self.cursor = conn.cursor()

    def create_campaign(self, campaign_id, user_id, campaign_name, prompt_id, total_numbers, created_at):
        self.cursor.execute("""
                INSERT INTO campaigns
                (id, user_id, campaign_name, prompt_id, status, total_numbers, created_at, updated_at)
                VALUES (?, ?, ?, ?, 'in_progress', ?, ?, ?)
            """, (campaign_id, user_id, campaign_name, prompt_id, total_numbers, created_at, created_at))

    def finalize(self, campaign_id, successful_calls, failed_calls, updated_at):
        self.cursor.execute("""
                UPDATE campaigns
                SET status = 'completed',
                    successful_calls = ?,
                    failed_calls = ?,
                    updated_at = ?
                WHERE id = ?
            """, (successful_calls, failed_calls, updated_at, campaign_id))

    def mark_failed(self, campaign_id, updated_at):
        self.cursor.execute("""
                UPDATE campaigns
                SET status = 'failed',
                    updated_at = ?
                WHERE id = ?
            """, (updated_at, campaign_id))

    def increment_closed(self, campaign_id: str):
        self.cursor.execute("""
                UPDATE campaigns
                SET closed_calls = closed_calls + 1
                WHERE id = ?
            """, (campaign_id,))

    def increment_not_closed(self, campaign_id: str):
        self.cursor.execute("""
                UPDATE campaigns
                SET not_closed_calls = not_closed_calls + 1
                WHERE id = ?
            """, (campaign_id,))

    def get_owner(self, campaign_id: str):
        self.cursor.execute(
                "SELECT user_id FROM campaigns WHERE id = ?",
                (campaign_id,)
            )
        row = self.cursor.fetchone()
        return row["user_id"] if row else None

    def get_by_id(self, campaign_id: str, user_id: str):
        self.cursor.execute("""
                SELECT c.*,
                       p.prompt_name,
                       p.first_message,
                       p.system_prompt
                FROM campaigns c
                LEFT JOIN prompts p ON p.id = c.prompt_id
                WHERE c.id = ? AND c.user_id = ?
            """, (campaign_id, user_id))
        row = self.cursor.fetchone()
        return dict(row) if row else None

    def list_by_user(self, user_id: str):
        self.cursor.execute("""
                SELECT c.*, p.prompt_name
                FROM campaigns c
                LEFT JOIN prompts p ON p.id = c.prompt_id
                WHERE c.user_id = ?
                ORDER BY c.created_at DESC
            """, (user_id,))
        return [dict(row) for row in self.cursor.fetchall()]

    def count_by_user(self, user_id: str) -> int:
        self.cursor.execute(
                "SELECT COUNT(*) AS count FROM campaigns WHERE user_id = ?",
                (user_id,)
            )
        return self.cursor.fetchone()["count"]
