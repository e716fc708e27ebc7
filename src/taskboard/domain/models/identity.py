from pydantic import BaseModel, ConfigDict, Field


class Identity(BaseModel):
    uid: str = Field(description="Stable user identifier used as task owner id.")
    email: str = Field(description="Email the user signed in with.")

    model_config = ConfigDict(frozen=True)
