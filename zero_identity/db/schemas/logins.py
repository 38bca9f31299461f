from pydantic import BaseModel, ConfigDict


class UserLoginInfo(BaseModel):
    """External login as exchanged with the identity framework."""

    login_provider: str
    provider_key: str
    model_config = ConfigDict(frozen=True, from_attributes=True)
