# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Request bodies for the JSON endpoints.

None of the inventory bodies has a ``username`` field: the tenant is always
taken from the session. Unknown keys are ignored.
"""

from __future__ import annotations

from typing import Any, Dict, Optional

from pydantic import BaseModel, Field


class Credentials(BaseModel):
    # Shape rules live in zenbatu.auth.validators, so they run before any store access
    # and produce the same messages for every caller.
    username: str = ""
    password: str = ""


class SessionBody(BaseModel):
    sessionId: Optional[str] = Field(None, description="Session id returned by /login")

    def payload(self) -> Dict[str, Any]:
        return self.model_dump(exclude={"sessionId"}, exclude_none=True)


class AssetLookup(SessionBody):
    id: Optional[str] = None
    name: Optional[str] = None


class AssetIn(SessionBody):
    asset_name: str = Field("", max_length=200)
    category_id: Optional[int] = None
    site_id: Optional[int] = None
    location_id: Optional[int] = None
    purchase_date: Optional[str] = None
    cost: Optional[float] = Field(None, ge=0)
    useful_life: Optional[int] = Field(None, ge=0)
    maintenance_schedule: Optional[str] = None
    last_maintenance_date: Optional[str] = None


class CategoryIn(SessionBody):
    category_name: str = Field("", max_length=50)


class SiteIn(SessionBody):
    site_name: str = Field("", max_length=50)
    location_name: Optional[str] = Field(None, max_length=50)


class LocationIn(SessionBody):
    site_id: Optional[int] = None
    location_name: str = Field("", max_length=50)
