"""User record model."""

from pydantic import BaseModel, ConfigDict, Field


class User(BaseModel):
    """A user profile as returned by the users endpoint."""

    model_config = ConfigDict(extra="allow")

    id: int | str = Field(description="Stable identity used to key rendered rows")
    name: str = ""
    username: str = ""
    email: str = ""

    @property
    def row_key(self) -> str:
        """Key for rendered rows."""
        return f"card_{self.id}"

    def to_row(self) -> tuple[str, str, str]:
        """Convert to the (name, username, email) display tuple."""
        return (self.name, self.username, self.email)
