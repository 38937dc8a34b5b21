"""Registration session models.

A session is a tagged union keyed by ``state``: each state carries exactly the
draft fields collected so far, so a session can never hold a quantity before
it holds a name.
"""

from datetime import date, datetime
from enum import StrEnum
from typing import Annotated, Any, Literal

from pydantic import BaseModel, Field, TypeAdapter

from stockpile.domain.stock import Category


class SessionState(StrEnum):
    """Registration flow states."""

    IDLE = "idle"
    SELECTING_CATEGORY = "selecting_category"
    ENTERING_NAME = "entering_name"
    ENTERING_QUANTITY = "entering_quantity"
    ENTERING_EXPIRY = "entering_expiry"
    CONFIRMING = "confirming"


class _SessionBase(BaseModel):
    user_id: str
    last_activity: datetime

    @property
    def draft(self) -> dict[str, Any]:
        """Draft fields populated in this state."""
        return self.model_dump(exclude={"user_id", "state", "last_activity"})


class IdleSession(_SessionBase):
    state: Literal[SessionState.IDLE] = SessionState.IDLE


class SelectingCategorySession(_SessionBase):
    state: Literal[SessionState.SELECTING_CATEGORY] = SessionState.SELECTING_CATEGORY


class EnteringNameSession(_SessionBase):
    state: Literal[SessionState.ENTERING_NAME] = SessionState.ENTERING_NAME
    category: Category


class EnteringQuantitySession(_SessionBase):
    state: Literal[SessionState.ENTERING_QUANTITY] = SessionState.ENTERING_QUANTITY
    category: Category
    name: str


class EnteringExpirySession(_SessionBase):
    state: Literal[SessionState.ENTERING_EXPIRY] = SessionState.ENTERING_EXPIRY
    category: Category
    name: str
    quantity: int = Field(..., ge=1)


class ConfirmingSession(_SessionBase):
    state: Literal[SessionState.CONFIRMING] = SessionState.CONFIRMING
    category: Category
    name: str
    quantity: int = Field(..., ge=1)
    expiry_date: date


Session = Annotated[
    IdleSession
    | SelectingCategorySession
    | EnteringNameSession
    | EnteringQuantitySession
    | EnteringExpirySession
    | ConfirmingSession,
    Field(discriminator="state"),
]

session_adapter: TypeAdapter[Session] = TypeAdapter(Session)


def build_session(*, user_id: str, state: SessionState, last_activity: datetime, draft: dict[str, Any]) -> Session:
    """Build the variant for ``state``. Draft keys the state does not carry are dropped."""
    return session_adapter.validate_python(
        {**draft, "user_id": user_id, "state": state, "last_activity": last_activity}
    )
