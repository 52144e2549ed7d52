from datetime import datetime
from uuid import UUID, uuid4

import sqlalchemy as sa
from sqlalchemy.orm import Mapped, declarative_base, mapped_column
from sqlalchemy_utils import UUIDType

# index names line up with the ones the migrations create by hand
NAMING_CONVENTION = {
    "ix": "ix_%(table_name)s_%(column_0_name)s",
}

BaseModel = declarative_base(
    metadata=sa.MetaData(naming_convention=NAMING_CONVENTION),
    type_annotation_map={UUID: UUIDType(binary=False)},
)


class Base(BaseModel):
    """Every row is keyed by a random UUID, which is also what the API exposes."""

    __abstract__ = True

    uuid: Mapped[UUID] = mapped_column(primary_key=True, default=uuid4)

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.uuid}>"


class TimeStamp(BaseModel):
    __abstract__ = True

    created_at: Mapped[datetime] = mapped_column(
        sa.DateTime(timezone=True),
        server_default=sa.func.now(),
        nullable=False,
    )
    updated_at: Mapped[datetime] = mapped_column(
        sa.DateTime(timezone=True),
        server_default=sa.func.now(),
        onupdate=sa.func.now(),
        nullable=False,
    )
