from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict

FailureReason = Literal["backend", "connect"]


class DispatchOutcome(BaseModel):
    """Result of a single dispatch attempt.

    Either a success, or a failure tagged with a :data:`FailureReason`:

    ``"backend"``
        The endpoint answered with a status outside ``[200, 300)``.

    ``"connect"``
        The request never got an answer (refused, timed out, DNS, ...).
    """

    model_config = ConfigDict(frozen=True)

    ok: bool
    reason: Optional[FailureReason] = None
    status_code: Optional[int] = None
    detail: str = ""

    @classmethod
    def success(cls, status_code: int) -> "DispatchOutcome":
        return cls(ok=True, status_code=status_code)

    @classmethod
    def failure(
        cls,
        reason: FailureReason,
        detail: str = "",
        status_code: Optional[int] = None,
    ) -> "DispatchOutcome":
        return cls(ok=False, reason=reason, detail=detail, status_code=status_code)
