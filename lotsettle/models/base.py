"""Declarative base and column types shared by the settlement models."""

from datetime import datetime, timezone

from sqlalchemy import BigInteger, Integer, Numeric
from sqlalchemy.orm import DeclarativeBase

from ..db.metadata import metadata_obj

# BigInteger keys on server databases; SQLite only autoincrements INTEGER PRIMARY KEY.
ID_TYPE = BigInteger().with_variant(Integer, "sqlite")

# Stakes, ticket totals and payouts, stored to the cent.
MONEY = Numeric(16, 2)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Base(DeclarativeBase):
    metadata = metadata_obj
