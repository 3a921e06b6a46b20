"""User identity as seen by the rest of the app."""

from pydantic import BaseModel, ConfigDict, Field


class User(BaseModel):
    """
    The signed-in user.

    Identity itself lives with the hosted login provider; this is only the
    part of it the app needs (records are scoped by `id`).
    """

    model_config = ConfigDict(str_strip_whitespace=True, frozen=True)

    id: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1)
    email: str = ""

    @property
    def first_name(self) -> str:
        return self.name.split(" ")[0]

    @property
    def initial(self) -> str:
        return self.name[0].upper()
