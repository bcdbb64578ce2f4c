# schemas.py
# Request bodies, validated before anything reaches the ledger.

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, StrictInt


class _Request(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid", str_strip_whitespace=True)


class UserRequest(_Request):
    user_id: str = Field(..., min_length=1, examples=["mock-alex"])
    email: str = Field(..., examples=["alex@campus.edu"])
    display_name: str = Field("", examples=["Alex Chen"])


class AwardRequest(_Request):
    user_id: str = Field(..., min_length=1, examples=["mock-alex"])
    category: str = Field(..., examples=["sustainability"])
    # Sign and range are checked by the ledger so it raises InvalidAwardError
    magnitude: StrictInt = Field(..., examples=[15])
    reason: Optional[str] = Field(None, examples=["Campus clean-up"])


class MoodEntryRequest(_Request):
    user_id: str = Field(..., min_length=1, examples=["mock-alex"])
    mood: str = Field(..., examples=["happy"])
    score: StrictInt = Field(..., examples=[7])
    notes: Optional[str] = Field(None, examples=["Good sleep"])


class WasteEventRequest(_Request):
    user_id: str = Field(..., min_length=1, examples=["mock-alex"])
    type: str = Field(..., examples=["recycling"])
    location: str = Field(..., examples=["Library Block B"])
    weight: Optional[float] = Field(None, examples=[0.4])
    device_id: Optional[str] = Field(None, examples=["bin-07"])
