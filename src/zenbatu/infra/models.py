# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Database models for accounts and the per-account inventory.

Every inventory table carries ``username``; rows are always filtered or
stamped with the username of the resolved session.
"""

from datetime import datetime

from sqlalchemy import Column, DateTime, Float, ForeignKey, Integer, String, UniqueConstraint
from sqlalchemy.orm import declarative_base

Base = declarative_base()


# -------------------------------
# Accounts
# -------------------------------

class Account(Base):
    """Username and argon2 hash. Only the credential store reads or writes it."""
    __tablename__ = "accounts"

    username = Column(String(50), primary_key=True)
    password_hash = Column(String, nullable=False)


# -------------------------------
# Inventory
# -------------------------------

class Category(Base):
    __tablename__ = "categories"
    __table_args__ = (UniqueConstraint("username", "category_name"),)

    category_id = Column(Integer, primary_key=True, autoincrement=True)
    category_name = Column(String, nullable=False)
    username = Column(String(50), ForeignKey("accounts.username", ondelete="CASCADE"), nullable=False, index=True)


class Site(Base):
    __tablename__ = "sites"
    __table_args__ = (UniqueConstraint("username", "site_name"),)

    site_id = Column(Integer, primary_key=True, autoincrement=True)
    site_name = Column(String, nullable=False)
    username = Column(String(50), ForeignKey("accounts.username", ondelete="CASCADE"), nullable=False, index=True)


class Location(Base):
    __tablename__ = "locations"
    __table_args__ = (UniqueConstraint("site_id", "location_name"),)

    location_id = Column(Integer, primary_key=True, autoincrement=True)
    site_id = Column(Integer, ForeignKey("sites.site_id", ondelete="CASCADE"), nullable=False)
    location_name = Column(String, nullable=False)
    username = Column(String(50), ForeignKey("accounts.username", ondelete="CASCADE"), nullable=False, index=True)


class Asset(Base):
    __tablename__ = "assets"

    asset_id = Column(String, primary_key=True)
    asset_name = Column(String, nullable=False)
    username = Column(String(50), ForeignKey("accounts.username", ondelete="CASCADE"), nullable=False, index=True)
    category_id = Column(Integer, ForeignKey("categories.category_id", ondelete="SET NULL"))
    site_id = Column(Integer, ForeignKey("sites.site_id", ondelete="SET NULL"))
    location_id = Column(Integer, ForeignKey("locations.location_id", ondelete="SET NULL"))
    purchase_date = Column(String)
    cost = Column(Float)
    useful_life = Column(Integer)
    maintenance_schedule = Column(String)
    last_maintenance_date = Column(String)
    added_date = Column(DateTime, default=datetime.now, nullable=False)
