from pydantic import BaseModel
from typing import Optional


class CallerIdentity(BaseModel):
    """Authenticated caller, passed explicitly into every data-access call."""
    id: str
    user_type: str = "member"
    email: Optional[str] = None
    username: Optional[str] = None
    full_name: Optional[str] = None

    @property
    def is_admin(self) -> bool:
        return self.user_type == "admin"

    def can_access(self, user_id: str) -> bool:
        """Users may read and write their own rows; admins may touch anyone's."""
        return self.id == user_id or self.is_admin
