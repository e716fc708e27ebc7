from enum import Enum

from pydantic import BaseModel, Field


class SourceMode(str, Enum):
    LOCAL = "local"
    REMOTE = "remote"


class DataSource(BaseModel):
    """Where the projector reads tasks from.

    ``owner_id`` is only meaningful in remote mode; a remote source without an
    owner yields an empty task list.
    """

    mode: SourceMode = Field(default=SourceMode.LOCAL, description="Data source mode.")
    owner_id: str | None = Field(default=None, description="Authenticated owner id.")

    @classmethod
    def local(cls) -> "DataSource":
        return cls(mode=SourceMode.LOCAL)

    @classmethod
    def remote(cls, owner_id: str | None) -> "DataSource":
        return cls(mode=SourceMode.REMOTE, owner_id=owner_id)
