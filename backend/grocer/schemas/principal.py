"""
grocer/schemas/principal.py
The caller behind a request: Firebase UID plus storefront role.
"""
from typing import Literal, Optional

from pydantic import BaseModel, Field

# guest: anonymous sign-in, may browse and read its own orders but not check out
Role = Literal["guest", "user", "admin"]


class Principal(BaseModel):
    uid: str = Field(..., description="Firebase UID")
    role: Role = Field(..., description="guest | user | admin")
    email: Optional[str] = Field(None, description="Email from the ID token, if any")
    display_name: Optional[str] = Field(None, description="Display name from the ID token, if any")

    @property
    def is_admin(self) -> bool:
        return self.role == "admin"

    @property
    def is_guest(self) -> bool:
        return self.role == "guest"

    def can_view_orders_of(self, user_id: str) -> bool:
        """Customers see their own orders; admins see everyone's."""
        return self.is_admin or self.uid == user_id
