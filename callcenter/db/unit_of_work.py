from callcenter.db.database import get_db
from callcenter.repositories.user_repo import UserRepository
from callcenter.repositories.prompt_repo import PromptRepository
from callcenter.repositories.campaign_repo import CampaignRepository
from callcenter.repositories.call_repo import CallLogRepository
from callcenter.repositories.credential_repo import CredentialRepository
from callcenter.repositories.number_repo import NumberRepository
from callcenter.repositories.voice_repo import VoiceConfigRepository
from callcenter.repositories.agent_repo import AgentRepository

class UnitOfWork:

    def __enter__(self):
        self.conn_ctx = get_db()
        self.conn = self.conn_ctx.__enter__()

        # Pass SAME connection to repos
        self.users = UserRepository(self.conn)
        self.prompts = PromptRepository(self.conn)
        self.campaigns = CampaignRepository(self.conn)
        self.call_logs = CallLogRepository(self.conn)
        self.credentials = CredentialRepository(self.conn)
        self.numbers = NumberRepository(self.conn)
        self.voice_config = VoiceConfigRepository(self.conn)
        self.agents = AgentRepository(self.conn)

        return self

    def __exit__(self, exc_type, exc, tb):
        if exc_type:
            self.conn.rollback()
        else:
            self.conn.commit()

        self.conn_ctx.__exit__(exc_type, exc, tb)
