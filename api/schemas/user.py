"""
Pydantic schemas for user profile lookups.
"""
from pydantic import BaseModel
from typing import Optional


class UserLookupResponse(BaseModel):
    """Public profile fields returned by the lookup endpoint."""
    name: Optional[str] = None
    callsign: Optional[str] = None
    rankTitle: Optional[str] = None
    motto: Optional[str] = None
    sesName: Optional[str] = None
    avatarUrl: Optional[str] = None
