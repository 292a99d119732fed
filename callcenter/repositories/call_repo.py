from callcenter.utils.helper import to_json, from_json

TERMINAL_STATUSES = ("success", "fail")


def _row_to_log(row):
    if not row:
        return None
    log = dict(row)
    log["metadata"] = from_json(log.get("metadata")) or {}
    log["end_of_call_report"] = from_json(log.get("end_of_call_report"))
    return log


class CallLogRepository:

    def __init__(self, conn):
        self.conn = conn
        self.cursor = conn.cursor()

    def insert(self, log: dict):
        self.cursor.execute("""
            INSERT INTO call_logs (
                id, user_id, campaign_id, call_id, vapi_call_id, agent_id,
                phone_number, caller_number, status, start_time, duration,
                metadata, end_of_call_report, created_at, updated_at
            )
            VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
        """, (
            log["id"],
            log["user_id"],
            log.get("campaign_id"),
            log.get("call_id"),
            log.get("vapi_call_id"),
            log.get("agent_id") or "",
            log.get("phone_number"),
            log["caller_number"],
            log["status"],
            log["start_time"],
            log.get("duration"),
            to_json(log.get("metadata")),
            to_json(log.get("end_of_call_report")),
            log["created_at"],
            log["created_at"]
        ))

    def get_by_id(self, log_id: str):
        self.cursor.execute(
            "SELECT * FROM call_logs WHERE id = ?",
            (log_id,)
        )
        return _row_to_log(self.cursor.fetchone())

    def get_by_vapi_call_id(self, vapi_call_id: str, user_id: str):
        self.cursor.execute("""
            SELECT * FROM call_logs
            WHERE vapi_call_id = ? AND user_id = ?
            ORDER BY created_at ASC
            LIMIT 1
        """, (vapi_call_id, user_id))
        return _row_to_log(self.cursor.fetchone())

    def get_by_call_id(self, call_id: str, user_id: str):
        self.cursor.execute("""
            SELECT * FROM call_logs
            WHERE call_id = ? AND user_id = ?
            ORDER BY created_at ASC
            LIMIT 1
        """, (call_id, user_id))
        return _row_to_log(self.cursor.fetchone())

    def apply_end_of_call_report(self, log_id: str, fields: dict, updated_at: str):
        """Move a dispatch-time row to its completed state"""
        self.cursor.execute("""
            UPDATE call_logs
            SET status = ?,
                duration = ?,
                agent_id = COALESCE(NULLIF(?, ''), agent_id),
                call_id = COALESCE(call_id, ?),
                campaign_id = COALESCE(campaign_id, ?),
                metadata = ?,
                end_of_call_report = ?,
                updated_at = ?
            WHERE id = ?
        """, (
            fields["status"],
            fields["duration"],
            fields.get("agent_id") or "",
            fields.get("call_id"),
            fields.get("campaign_id"),
            to_json(fields["metadata"]),
            to_json(fields["end_of_call_report"]),
            updated_at,
            log_id
        ))

    def list_by_user(self, user_id: str, campaign_id=None, status=None, search=None, limit=100):
        query = "SELECT * FROM call_logs WHERE user_id = ?"
        params = [user_id]

        if campaign_id:
            query += " AND campaign_id = ?"
            params.append(campaign_id)

        if status:
            query += " AND status = ?"
            params.append(status)

        if search:
            query += " AND (phone_number LIKE ? OR caller_number LIKE ? OR vapi_call_id LIKE ?)"
            like = f"%{search}%"
            params.extend([like, like, like])

        query += " ORDER BY created_at DESC LIMIT ?"
        params.append(limit)

        self.cursor.execute(query, params)
        return [_row_to_log(row) for row in self.cursor.fetchall()]

    def get_by_campaign(self, campaign_id: str):
        self.cursor.execute("""
            SELECT * FROM call_logs
            WHERE campaign_id = ?
            ORDER BY created_at DESC
        """, (campaign_id,))
        return [_row_to_log(row) for row in self.cursor.fetchall()]

    def count_by_campaign(self, campaign_id: str) -> int:
        self.cursor.execute(
            "SELECT COUNT(*) AS count FROM call_logs WHERE campaign_id = ?",
            (campaign_id,)
        )
        return self.cursor.fetchone()["count"]

    def get_campaign_stats(self, campaign_id: str):
        self.cursor.execute("""
            SELECT
                COUNT(*) AS total,
                SUM(CASE WHEN status = 'success' THEN 1 ELSE 0 END) AS success,
                SUM(CASE WHEN status = 'fail' THEN 1 ELSE 0 END) AS fail,
                SUM(CASE WHEN status = 'failed' THEN 1 ELSE 0 END) AS dispatch_failed,
                SUM(CASE
                    WHEN status NOT IN ('success', 'fail', 'failed')
                    THEN 1 ELSE 0
                END) AS in_flight,
                COALESCE(AVG(CASE WHEN duration > 0 THEN duration END), 0) AS average_duration
            FROM call_logs
            WHERE campaign_id = ?
        """, (campaign_id,))
        row = dict(self.cursor.fetchone())
        return {key: (value or 0) for key, value in row.items()}

    def get_user_stats(self, user_id: str):
        self.cursor.execute("""
            SELECT
                COUNT(*) AS total,
                SUM(CASE WHEN status = 'success' THEN 1 ELSE 0 END) AS success,
                SUM(CASE WHEN status IN ('fail', 'failed') THEN 1 ELSE 0 END) AS failed,
                COALESCE(AVG(CASE WHEN duration > 0 THEN duration END), 0) AS average_duration
            FROM call_logs
            WHERE user_id = ?
        """, (user_id,))
        row = dict(self.cursor.fetchone())
        return {key: (value or 0) for key, value in row.items()}
