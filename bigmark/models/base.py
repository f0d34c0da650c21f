from sqlalchemy import BigInteger, Integer
from sqlalchemy.orm import DeclarativeBase

from bigmark.db.metadata import metadata_obj

# Primary keys: BIGINT on servers, INTEGER on SQLite so rowid autoincrement works.
ID_TYPE = BigInteger().with_variant(Integer, "sqlite")


class Base(DeclarativeBase):
    metadata = metadata_obj
