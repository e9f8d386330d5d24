# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

from __future__ import annotations

import logging
from typing import Any, Callable, Dict, List, Optional

from zenbatu.core.ids import generate_id
from zenbatu.errors import RecordNotFound, ValidationError
from zenbatu.infra.inventory_repo import SqlInventoryGateway

logger = logging.getLogger(__name__)

# Keys a client may send that must never reach the gateway.
_CLIENT_ONLY_KEYS = ("username", "sessionId", "session_id")


def _scrub(data: Dict[str, Any]) -> Dict[str, Any]:
    return {k: v for k, v in (data or {}).items() if k not in _CLIENT_ONLY_KEYS}


def _require_text(data: Dict[str, Any], key: str, label: str) -> str:
    v = str(data.get(key) or "").strip()
    if not v:
        raise ValidationError(f"{label} is required.")
    return v


class InventoryService:
    """Asset/category/site operations for one resolved tenant.

    ``username`` is always a keyword argument and always comes from the
    session; anything the client put under ``username`` is dropped.
    """

    def __init__(self, gateway: SqlInventoryGateway, *, id_factory: Callable[[], str] = generate_id) -> None:
        self.gateway = gateway
        self._new_id = id_factory

    async def _run(self, fn, *args, **kwargs):
        return await self.gateway.db.run(fn, *args, **kwargs)

    # --- assets ---

    async def add_assets(self, assets: List[Dict[str, Any]], *, username: str) -> List[str]:
        if not isinstance(assets, list):
            raise ValidationError(f"Expected a list of assets, got {type(assets).__name__} instead.")
        if not assets:
            raise ValidationError("The list of assets is empty.")
        rows = [{**_scrub(a), "asset_id": self._new_id()} for a in assets]
        ids = await self._run(self.gateway.add_assets, rows, username=username)
        logger.info("Added %d asset(s) for %r", len(ids), username)
        return ids

    async def add_asset(self, data: Dict[str, Any], *, username: str) -> Dict[str, Any]:
        """Insert one asset and return its full record, including the generated id."""
        (asset_id,) = await self.add_assets([data], username=username)
        return await self.get_asset(asset_id=asset_id, username=username)

    async def get_asset(
        self, *, username: str, asset_id: Optional[str] = None, name: Optional[str] = None
    ) -> Dict[str, Any]:
        key = asset_id if asset_id is not None else name
        if not key:
            raise ValidationError("An asset id or name is required.")
        row = await self._run(self.gateway.get_asset, key, username=username)
        if row is None:
            raise RecordNotFound(f"Asset {key!r} not found")
        return row

    async def get_full_assets(self, *, username: str) -> List[Dict[str, Any]]:
        return await self._run(self.gateway.get_full_assets, username=username)

    async def delete_assets(self, asset_ids: List[str], *, username: str) -> int:
        return await self._run(self.gateway.delete_assets, asset_ids, username=username)

    # --- categories ---

    async def add_categories(self, categories: List[Dict[str, Any]], *, username: str) -> List[int]:
        if not isinstance(categories, list):
            raise ValidationError(f"Expected a list of categories, got {type(categories).__name__} instead.")
        if not categories:
            raise ValidationError("The list of categories is empty.")
        names = [_require_text(c, "category_name", "The category name") for c in categories]
        return await self._run(self.gateway.add_categories, names, username=username)

    async def add_category(self, data: Dict[str, Any], *, username: str) -> Dict[str, Any]:
        (category_id,) = await self.add_categories([_scrub(data)], username=username)
        return await self.get_category(category_id=category_id, username=username)

    async def get_category(
        self, *, username: str, category_id: Optional[int] = None, name: Optional[str] = None
    ) -> Dict[str, Any]:
        key = category_id if category_id is not None else name
        row = await self._run(self.gateway.get_category, key, username=username)
        if row is None:
            raise RecordNotFound(f"Category {key!r} not found")
        return row

    async def get_all_categories(self, *, username: str) -> List[Dict[str, Any]]:
        return await self._run(self.gateway.get_all_categories, username=username)

    # --- sites & locations ---

    async def add_sites(self, sites: List[Dict[str, Any]], *, username: str) -> List[int]:
        if not isinstance(sites, list):
            raise ValidationError(f"Expected a list of sites, got {type(sites).__name__} instead.")
        if not sites:
            raise ValidationError("The list of sites is empty.")
        rows = [
            {
                "site_name": _require_text(s, "site_name", "The site name"),
                "locations": [str(x).strip() for x in (s.get("locations") or []) if str(x or "").strip()],
            }
            for s in sites
        ]
        return await self._run(self.gateway.add_sites, rows, username=username)

    async def add_site(self, data: Dict[str, Any], *, username: str) -> Dict[str, Any]:
        """Create a site, optionally with its first location (``location_name``)."""
        data = _scrub(data)
        site = {"site_name": data.get("site_name"), "locations": [data.get("location_name")]}
        (site_id,) = await self.add_sites([site], username=username)
        return await self.get_site(site_id=site_id, username=username)

    async def add_location(self, data: Dict[str, Any], *, username: str) -> Dict[str, Any]:
        data = _scrub(data)
        if data.get("site_id") is None:
            raise ValidationError("Location data needs to contain a site_id.")
        name = _require_text(data, "location_name", "The location name")
        try:
            site_id = int(data["site_id"])
        except (TypeError, ValueError) as e:
            raise ValidationError("The site_id must be a number.") from e
        await self._run(self.gateway.add_location, site_id, name, username=username)
        return await self.get_site(site_id=site_id, username=username)

    async def get_site(
        self, *, username: str, site_id: Optional[int] = None, name: Optional[str] = None
    ) -> Dict[str, Any]:
        key = site_id if site_id is not None else name
        row = await self._run(self.gateway.get_site, key, username=username)
        if row is None:
            raise RecordNotFound(f"Site {key!r} not found")
        return row

    async def get_all_sites(self, *, username: str) -> List[Dict[str, Any]]:
        return await self._run(self.gateway.get_all_sites, username=username)

    # --- dashboard ---

    async def get_user_data(self, *, username: str) -> Dict[str, Any]:
        return {
            "assets": await self.get_full_assets(username=username),
            "categories": await self.get_all_categories(username=username),
            "sites": await self.get_all_sites(username=username),
        }
