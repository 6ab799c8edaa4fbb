from typing import Optional, Union

from pydantic import BaseModel, ConfigDict, Field


class VerificationRequest(BaseModel):
    """Body of ``POST /api/verification``; which fields matter depends on ``action``."""

    action: Optional[str] = None
    email: Optional[str] = None
    nickname: Optional[str] = None
    code: Optional[Union[str, int]] = None


class SendLinkRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    email: Optional[str] = None
    nickname: Optional[str] = None
    tournament_id: Optional[Union[str, int]] = Field(default=None, alias="tournamentId")


class UserData(BaseModel):
    email: str
    nickname: str


class SendResponse(BaseModel):
    success: bool = True
    message: str
    # only populated when secrets are exposed (local development)
    code: Optional[str] = None
    token: Optional[str] = None


class VerifyResponse(BaseModel):
    success: bool = True
    message: str = "Verification successful"
    userData: UserData


class VersionResponse(BaseModel):
    v: int
