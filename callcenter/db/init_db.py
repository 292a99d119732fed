from callcenter.db.database import get_db
from callcenter.config import settings
from callcenter.logger import logger

def init_db():
    """Initialize database with required tables"""
    with get_db() as conn:
        cursor = conn.cursor()

        cursor.execute('''
            CREATE TABLE IF NOT EXISTS users (
                id TEXT PRIMARY KEY,
                username TEXT NOT NULL UNIQUE,
                password_hash TEXT NOT NULL,
                created_at TEXT NOT NULL,
                updated_at TEXT NOT NULL
            )
        ''')

        cursor.execute('''
            CREATE TABLE IF NOT EXISTS user_sessions (
                id TEXT PRIMARY KEY,
                user_id TEXT NOT NULL,
                session_token TEXT NOT NULL UNIQUE,
                expires_at TEXT NOT NULL,
                created_at TEXT NOT NULL,
                FOREIGN KEY (user_id) REFERENCES users(id)
            )
        ''')

        cursor.execute('''
            CREATE TABLE IF NOT EXISTS prompts (
                id TEXT PRIMARY KEY,
                user_id TEXT NOT NULL,
                prompt_name TEXT NOT NULL,
                first_message TEXT NOT NULL,
                system_prompt TEXT NOT NULL,
                created_at TEXT NOT NULL,
                updated_at TEXT NOT NULL,
                FOREIGN KEY (user_id) REFERENCES users(id)
            )
        ''')

        # successful_calls / failed_calls hold call-creation outcomes written
        # once at finalize; closed_calls / not_closed_calls are bumped by
        # end-of-call reports.
        cursor.execute('''
            CREATE TABLE IF NOT EXISTS campaigns (
                id TEXT PRIMARY KEY,
                user_id TEXT NOT NULL,
                campaign_name TEXT NOT NULL,
                prompt_id TEXT,
                status TEXT NOT NULL DEFAULT 'pending',
                total_numbers INTEGER DEFAULT 0,
                successful_calls INTEGER DEFAULT 0,
                failed_calls INTEGER DEFAULT 0,
                closed_calls INTEGER DEFAULT 0,
                not_closed_calls INTEGER DEFAULT 0,
                created_at TEXT NOT NULL,
                updated_at TEXT NOT NULL,
                FOREIGN KEY (user_id) REFERENCES users(id),
                FOREIGN KEY (prompt_id) REFERENCES prompts(id)
            )
        ''')

        cursor.execute('''
            CREATE TABLE IF NOT EXISTS call_logs (
                id TEXT PRIMARY KEY,
                user_id TEXT NOT NULL,
                campaign_id TEXT,
                call_id TEXT,
                vapi_call_id TEXT,
                agent_id TEXT DEFAULT '',
                phone_number TEXT,
                caller_number TEXT NOT NULL,
                status TEXT NOT NULL,
                start_time TEXT NOT NULL,
                duration INTEGER,
                metadata TEXT,
                end_of_call_report TEXT,
                created_at TEXT NOT NULL,
                updated_at TEXT NOT NULL,
                FOREIGN KEY (user_id) REFERENCES users(id),
                FOREIGN KEY (campaign_id) REFERENCES campaigns(id)
            )
        ''')
        cursor.execute('''
            CREATE INDEX IF NOT EXISTS idx_call_logs_vapi_call_id
            ON call_logs (vapi_call_id)
        ''')
        cursor.execute('''
            CREATE INDEX IF NOT EXISTS idx_call_logs_call_id
            ON call_logs (call_id)
        ''')

        cursor.execute('''
            CREATE TABLE IF NOT EXISTS api_keys (
                id TEXT PRIMARY KEY,
                user_id TEXT NOT NULL UNIQUE,
                vapi_api_key TEXT NOT NULL,
                assistant_id TEXT NOT NULL,
                phone_number_id TEXT,
                status TEXT DEFAULT 'active',
                created_at TEXT NOT NULL,
                updated_at TEXT NOT NULL,
                FOREIGN KEY (user_id) REFERENCES users(id)
            )
        ''')

        cursor.execute('''
            CREATE TABLE IF NOT EXISTS phone_config (
                id TEXT PRIMARY KEY,
                user_id TEXT NOT NULL UNIQUE,
                twilio_phone_number TEXT NOT NULL,
                twilio_account_sid TEXT NOT NULL,
                twilio_auth_token TEXT NOT NULL,
                created_at TEXT NOT NULL,
                updated_at TEXT NOT NULL,
                FOREIGN KEY (user_id) REFERENCES users(id)
            )
        ''')

        cursor.execute('''
            CREATE TABLE IF NOT EXISTS numbers (
                id TEXT PRIMARY KEY,
                user_id TEXT NOT NULL,
                phone_number TEXT NOT NULL,
                phone_number_id TEXT NOT NULL DEFAULT '',
                agent_id TEXT NOT NULL DEFAULT '',
                created_at TEXT NOT NULL,
                updated_at TEXT NOT NULL,
                FOREIGN KEY (user_id) REFERENCES users(id)
            )
        ''')

        # Per-user overrides for the assistant voice and dispatch defaults;
        # NULL columns fall back to the assistant config.
        cursor.execute('''
            CREATE TABLE IF NOT EXISTS voice_config (
                id TEXT PRIMARY KEY,
                user_id TEXT NOT NULL UNIQUE,
                country_code TEXT,
                default_name TEXT,
                concurrent_limit INTEGER,
                manual_voice_id TEXT,
                provider TEXT,
                model TEXT,
                stability REAL,
                similarity_boost REAL,
                style REAL,
                use_speaker_boost INTEGER,
                speed REAL,
                optimize_streaming_latency INTEGER,
                auto_mode INTEGER,
                created_at TEXT NOT NULL,
                updated_at TEXT NOT NULL,
                FOREIGN KEY (user_id) REFERENCES users(id)
            )
        ''')

        cursor.execute('''
            CREATE TABLE IF NOT EXISTS agents (
                id TEXT PRIMARY KEY,
                user_id TEXT NOT NULL,
                agent_id TEXT NOT NULL,
                name TEXT NOT NULL,
                voice TEXT,
                language TEXT,
                created_at TEXT NOT NULL,
                updated_at TEXT NOT NULL,
                FOREIGN KEY (user_id) REFERENCES users(id)
            )
        ''')

        conn.commit()
        logger.success(f"Database initialized at {settings.DATABASE_PATH}")
