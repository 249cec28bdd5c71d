"""Result contract between GraphService and its adapters.

:class:`kgmem.services.graph.GraphService` folds every store outcome,
including store exceptions, into a ServiceResult. The CLI renders it
through :mod:`kgmem.output`; the MCP tools return :meth:`ServiceResult.payload`.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field, model_validator


class ServiceError(BaseModel):
    """Error code, message, and operation-specific detail.

    ``detail`` keys use wire names: ``entityName`` for a missing entity,
    ``line`` and ``errors`` for a rejected record, ``path`` for I/O.
    """

    model_config = {"frozen": True}

    code: str
    message: str
    detail: dict[str, Any] = Field(default_factory=dict)


class ServiceResult(BaseModel):
    """Outcome of one graph operation.

    ``error`` is set exactly when ``ok`` is False.
    """

    model_config = {"frozen": True}

    ok: bool
    op: str
    data: dict[str, Any] = Field(default_factory=dict)
    error: ServiceError | None = None

    @model_validator(mode="after")
    def _error_iff_failed(self) -> ServiceResult:
        if self.ok == (self.error is not None):
            msg = "error must be set if and only if ok is False"
            raise ValueError(msg)
        return self

    @classmethod
    def success(cls, op: str, data: dict[str, Any]) -> ServiceResult:
        return cls(ok=True, op=op, data=data)

    @classmethod
    def failure(
        cls, op: str, code: str, message: str, detail: dict[str, Any] | None = None
    ) -> ServiceResult:
        error = ServiceError(code=code, message=message, detail=detail or {})
        return cls(ok=False, op=op, error=error)

    def payload(self) -> dict[str, Any]:
        """Plain dict for tool responses: ``data`` on success, full ``error`` on failure."""
        if self.error is None:
            return {"ok": True, "op": self.op, "data": self.data}
        return {"ok": False, "op": self.op, "error": self.error.model_dump()}
