from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class AuthUser(BaseModel):
    """
    Represents the caller identified by a bearer token.
    """

    model_config = ConfigDict(populate_by_name=True)

    user_id: str = Field(..., alias="sub")
    email: Optional[str] = None
    name: Optional[str] = None
    role: str = "staff"

    @property
    def is_admin(self) -> bool:
        return self.role == "admin"
