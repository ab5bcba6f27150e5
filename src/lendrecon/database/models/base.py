from typing import Annotated, ClassVar

from sqlalchemy import String, Text
from sqlalchemy.orm import DeclarativeBase, mapped_column

Address = Annotated[str, mapped_column(String(42))]


class Base(DeclarativeBase):
    type_annotation_map: ClassVar = {
        # keys must be Python types (native or Annotated)
        # values must be SQLAlchemy types
        str: Text,
    }
