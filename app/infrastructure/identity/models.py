"""Console user identity."""

from typing import Any, Dict, Optional

from pydantic import BaseModel, Field

ADMIN_ROLE = "admin"


class User(BaseModel):
    """Authenticated console user.

    The user id doubles as the tenant key (``repairer_id``) on tenant-owned
    rows.
    """

    id: str = Field(..., description="Backend auth user id")
    email: Optional[str] = Field(default=None, description="User's email address")
    role: str = Field(default="user", description="Role from app metadata")
    metadata: Dict[str, Any] = Field(default_factory=dict)

    @property
    def is_admin(self) -> bool:
        return self.role == ADMIN_ROLE

    @classmethod
    def from_auth_payload(cls, payload: Dict[str, Any]) -> "User":
        """Build a User from the backend's ``/auth/v1/user`` response."""
        app_metadata = payload.get("app_metadata") or {}
        return cls(
            id=payload["id"],
            email=payload.get("email"),
            role=app_metadata.get("role") or "user",
            metadata=payload.get("user_metadata") or {},
        )
