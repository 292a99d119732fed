from pydantic import BaseModel, Field
from typing import Optional, Any


class SignUpRequest(BaseModel):
    username: str
    password: str


class LoginRequest(BaseModel):
    username: str
    password: str


class ChangePasswordRequest(BaseModel):
    current_password: str
    new_password: str


class BatchCallRequest(BaseModel):
    """Raw dispatch request, checked field by field in batch_call_service"""
    campaignName: Optional[Any] = None
    promptId: Optional[Any] = None
    phoneNumbers: Optional[Any] = None
    concurrentLimit: Optional[Any] = None


class PromptCreate(BaseModel):
    prompt_name: str = Field(min_length=1)
    first_message: str
    system_prompt: str


class ApiKeysUpdate(BaseModel):
    vapi_api_key: str = Field(min_length=1)
    assistant_id: str = Field(min_length=1)
    phone_number_id: Optional[str] = None


class PhoneConfigUpdate(BaseModel):
    twilio_phone_number: str = Field(min_length=1)
    twilio_account_sid: str = Field(min_length=1)
    twilio_auth_token: str = Field(min_length=1)


class NumberCreate(BaseModel):
    phone_number: str
    phone_number_id: Optional[str] = ""
    agent_id: Optional[str] = ""


class VoiceConfigUpdate(BaseModel):
    """Unset fields fall back to the assistant config defaults"""
    country_code: Optional[str] = Field(default=None, pattern=r"^\+?\d{1,4}$")
    default_name: Optional[str] = None
    concurrent_limit: Optional[int] = Field(default=None, ge=1)
    manual_voice_id: Optional[str] = None
    provider: Optional[str] = None
    model: Optional[str] = None
    stability: Optional[float] = Field(default=None, ge=0, le=1)
    similarity_boost: Optional[float] = Field(default=None, ge=0, le=1)
    style: Optional[float] = Field(default=None, ge=0, le=1)
    use_speaker_boost: Optional[bool] = None
    speed: Optional[float] = Field(default=None, ge=0.7, le=1.2)
    optimize_streaming_latency: Optional[int] = Field(default=None, ge=0, le=4)
    auto_mode: Optional[bool] = None


class AgentCreate(BaseModel):
    name: str = Field(min_length=1)
    voice: str = Field(min_length=1)
    language: str = Field(default="en", min_length=1)
    first_message: Optional[str] = None
    # register an assistant that already exists on the platform
    agent_id: Optional[str] = None


class AgentUpdate(BaseModel):
    name: str = Field(min_length=1)
    voice: str = Field(min_length=1)
    language: str = Field(min_length=1)
