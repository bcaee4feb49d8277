from pydantic import BaseModel, Field


class CredentialIn(BaseModel):
    api_key: str = Field(..., description="ControlD API key", min_length=1, max_length=512)
    validate_remote: bool = Field(
        True, description="Check the key against the API before storing it"
    )


class SelectProfileIn(BaseModel):
    profile_id: str = Field(..., min_length=1, max_length=255)
