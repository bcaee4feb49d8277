"""Wire models of the ControlD REST API (only the fields we read)."""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from dnstoggle.domain.entities import Profile


class ProfileData(BaseModel):
    model_config = ConfigDict(extra="ignore")

    PK: str = Field(..., min_length=1)
    name: str
    updated: int = 0
    disable_ttl: Optional[int] = None

    def to_entity(self) -> Profile:
        return Profile(
            id=self.PK,
            name=self.name,
            updated=self.updated,
            disable_until=self.disable_ttl,
        )


class ProfilesBody(BaseModel):
    profiles: list[ProfileData]


class ProfilesResponse(BaseModel):
    model_config = ConfigDict(extra="ignore")

    success: bool = True
    body: ProfilesBody


class UpdateBody(BaseModel):
    model_config = ConfigDict(extra="ignore")

    message: Optional[str] = None


class ProfileUpdateResponse(BaseModel):
    model_config = ConfigDict(extra="ignore")

    success: bool = True
    body: Optional[UpdateBody] = None
    message: Optional[str] = None

    @property
    def server_message(self) -> Optional[str]:
        if self.body and self.body.message:
            return self.body.message
        return self.message
