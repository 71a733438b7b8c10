"""Authentication schemas for token handling."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict


class TokenData(BaseModel):
    """Data extracted from a JWT token.

    Attributes:
        user_id: The principal's UUID
        exp: Token expiration time
        role: Optional role hint issued by the identity provider
        type: Token type
    """

    user_id: UUID
    exp: datetime
    role: str | None = None
    type: str = "access"


class Principal(BaseModel):
    """Authenticated actor attached to ``request.state.principal``.

    The role hint is informational only; authorization always resolves
    roles from the assignment store.
    """

    model_config = ConfigDict(frozen=True)

    id: UUID
    role_hint: str | None = None
