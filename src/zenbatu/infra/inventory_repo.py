# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Tenant-scoped inventory queries (assets, categories, sites, locations).

Every function takes ``username`` and filters or stamps rows with it
server-side. The username must come from a resolved session, never from the
request payload.
"""

from __future__ import annotations

from typing import Any, Dict, Iterable, List, Optional

from sqlalchemy import or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Query, Session

from zenbatu.errors import RecordNotFound, ValidationError
from zenbatu.infra.database import Database
from zenbatu.infra.models import Asset, Category, Location, Site

ASSET_FIELDS = (
    "asset_name",
    "category_id",
    "site_id",
    "location_id",
    "purchase_date",
    "cost",
    "useful_life",
    "maintenance_schedule",
    "last_maintenance_date",
)

_INT_FIELDS = ("category_id", "site_id", "location_id", "useful_life")


def _require_username(username: str) -> str:
    u = str(username or "").strip()
    if not u:
        raise ValueError("Tenant scope missing: username is required")
    return u


def _as_int(v: Any) -> Optional[int]:
    if v is None or v == "":
        return None
    try:
        return int(v)
    except (TypeError, ValueError):
        return None


def _full_assets(s: Session, username: str) -> Query:
    return (
        s.query(Asset, Category.category_name, Site.site_name, Location.location_name)
        .outerjoin(Category, Category.category_id == Asset.category_id)
        .outerjoin(Site, Site.site_id == Asset.site_id)
        .outerjoin(Location, Location.location_id == Asset.location_id)
        .filter(Asset.username == username)
    )


def _asset_dict(asset: Asset, category_name, site_name, location_name) -> Dict[str, Any]:
    return {
        "asset_id": asset.asset_id,
        "asset_name": asset.asset_name,
        "category_id": asset.category_id,
        "category_name": category_name,
        "site_id": asset.site_id,
        "site_name": site_name,
        "location_id": asset.location_id,
        "location_name": location_name,
        "purchase_date": asset.purchase_date,
        "cost": asset.cost,
        "useful_life": asset.useful_life,
        "maintenance_schedule": asset.maintenance_schedule,
        "last_maintenance_date": asset.last_maintenance_date,
        "added_date": asset.added_date.isoformat(sep=" ", timespec="seconds") if asset.added_date else None,
    }


def _category_dict(c: Category) -> Dict[str, Any]:
    return {"category_id": c.category_id, "category_name": c.category_name}


class SqlInventoryGateway:
    def __init__(self, db: Database) -> None:
        self.db = db

    # --- ownership checks ---

    def _owned(self, s: Session, model, id_col: str, row_id: Any, username: str) -> bool:
        col = getattr(model, id_col)
        return s.query(col).filter(col == row_id, model.username == username).first() is not None

    def _check_refs(self, s: Session, asset: Dict[str, Any], username: str) -> None:
        for model, col in ((Category, "category_id"), (Site, "site_id"), (Location, "location_id")):
            ref = asset.get(col)
            if ref is not None and not self._owned(s, model, col, ref, username):
                raise RecordNotFound(f"{col} {ref} does not exist")
        if asset.get("location_id") is not None and asset.get("site_id") is not None:
            site_id = s.query(Location.site_id).filter(Location.location_id == asset["location_id"]).scalar()
            if site_id is not None and site_id != asset["site_id"]:
                raise ValidationError("The location does not belong to the selected site.")

    # --- assets ---

    def add_assets(self, assets: Iterable[Dict[str, Any]], *, username: str) -> List[str]:
        """Insert assets that already carry an ``asset_id``. Returns the ids in order."""
        u = _require_username(username)
        ids: List[str] = []
        with self.db.session() as s:
            for a in assets:
                if not a.get("asset_id"):
                    raise ValueError("asset_id is required")
                if not str(a.get("asset_name") or "").strip():
                    raise ValidationError("The asset name is required.")
                row = {k: a.get(k) for k in ASSET_FIELDS}
                for k in _INT_FIELDS:
                    row[k] = _as_int(row[k])
                self._check_refs(s, row, u)
                s.add(Asset(asset_id=a["asset_id"], username=u, **row))
                ids.append(a["asset_id"])
        return ids

    def get_asset(self, name_or_id: str, *, username: str) -> Optional[Dict[str, Any]]:
        u = _require_username(username)
        with self.db.session() as s:
            row = (
                _full_assets(s, u)
                .filter(or_(Asset.asset_id == name_or_id, Asset.asset_name == name_or_id))
                .order_by(Asset.added_date)
                .first()
            )
            return _asset_dict(*row) if row is not None else None

    def get_full_assets(self, *, username: str) -> List[Dict[str, Any]]:
        u = _require_username(username)
        with self.db.session() as s:
            rows = _full_assets(s, u).order_by(Asset.added_date, Asset.asset_name).all()
            return [_asset_dict(*r) for r in rows]

    def delete_assets(self, asset_ids: Iterable[str], *, username: str) -> int:
        u = _require_username(username)
        ids = list(asset_ids)
        if not ids:
            return 0
        with self.db.session() as s:
            return (
                s.query(Asset)
                .filter(Asset.username == u, Asset.asset_id.in_(ids))
                .delete(synchronize_session=False)
            )

    # --- categories ---

    def add_categories(self, names: Iterable[str], *, username: str) -> List[int]:
        u = _require_username(username)
        try:
            with self.db.session() as s:
                rows = [Category(category_name=name, username=u) for name in names]
                s.add_all(rows)
                s.flush()
                out = [c.category_id for c in rows]
        except IntegrityError as e:
            raise ValidationError("A category with that name already exists.") from e
        return out

    def get_category(self, name_or_id: Any, *, username: str) -> Optional[Dict[str, Any]]:
        u = _require_username(username)
        with self.db.session() as s:
            row = (
                s.query(Category)
                .filter(
                    Category.username == u,
                    or_(Category.category_id == _as_int(name_or_id), Category.category_name == str(name_or_id)),
                )
                .first()
            )
            return _category_dict(row) if row is not None else None

    def get_all_categories(self, *, username: str) -> List[Dict[str, Any]]:
        u = _require_username(username)
        with self.db.session() as s:
            rows = s.query(Category).filter(Category.username == u).order_by(Category.category_name).all()
            return [_category_dict(c) for c in rows]

    # --- sites & locations ---

    def add_sites(self, sites: Iterable[Dict[str, Any]], *, username: str) -> List[int]:
        """Insert sites; each may carry a ``locations`` list of names."""
        u = _require_username(username)
        out: List[int] = []
        try:
            with self.db.session() as s:
                for site in sites:
                    row = Site(site_name=site["site_name"], username=u)
                    s.add(row)
                    s.flush()
                    for loc in site.get("locations") or []:
                        if loc:
                            s.add(Location(site_id=row.site_id, location_name=loc, username=u))
                    s.flush()
                    out.append(row.site_id)
        except IntegrityError as e:
            raise ValidationError("A site or location with that name already exists.") from e
        return out

    def add_location(self, site_id: int, location_name: str, *, username: str) -> int:
        u = _require_username(username)
        try:
            with self.db.session() as s:
                if not self._owned(s, Site, "site_id", site_id, u):
                    raise RecordNotFound(f"Site {site_id} does not exist")
                row = Location(site_id=site_id, location_name=location_name, username=u)
                s.add(row)
                s.flush()
                location_id = row.location_id
        except IntegrityError as e:
            raise ValidationError("That location already exists on this site.") from e
        return location_id

    def _locations_for(self, s: Session, site_ids: List[int]) -> Dict[int, List[Dict[str, Any]]]:
        out: Dict[int, List[Dict[str, Any]]] = {sid: [] for sid in site_ids}
        if not site_ids:
            return out
        rows = s.query(Location).filter(Location.site_id.in_(site_ids)).order_by(Location.location_name)
        for loc in rows:
            out[loc.site_id].append({"location_id": loc.location_id, "location_name": loc.location_name})
        return out

    def get_site(self, name_or_id: Any, *, username: str) -> Optional[Dict[str, Any]]:
        u = _require_username(username)
        with self.db.session() as s:
            row = (
                s.query(Site)
                .filter(Site.username == u, or_(Site.site_id == _as_int(name_or_id), Site.site_name == str(name_or_id)))
                .first()
            )
            if row is None:
                return None
            return {
                "site_id": row.site_id,
                "site_name": row.site_name,
                "locations": self._locations_for(s, [row.site_id])[row.site_id],
            }

    def get_all_sites(self, *, username: str) -> List[Dict[str, Any]]:
        u = _require_username(username)
        with self.db.session() as s:
            rows = s.query(Site).filter(Site.username == u).order_by(Site.site_name).all()
            locs = self._locations_for(s, [r.site_id for r in rows])
            return [{"site_id": r.site_id, "site_name": r.site_name, "locations": locs[r.site_id]} for r in rows]
