from typing import Annotated

from sqlalchemy import ForeignKey, String
from sqlalchemy.orm import mapped_column

PrimaryKeyInt = Annotated[
    int,
    mapped_column(primary_key=True, autoincrement=True),
]
ForeignKeyReserveId = Annotated[
    int,
    mapped_column(ForeignKey("reserves.id"), index=True),
]
ForeignKeyUserId = Annotated[
    int,
    mapped_column(ForeignKey("users.id"), index=True),
]
RawAmount = Annotated[
    str,
    mapped_column(String(78)),
]
