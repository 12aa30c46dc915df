"""Error taxonomy shared by the core services and the HTTP layer.

Every error here is recoverable: the caller can retry or abandon the action
that raised it. Nothing in the core treats them as fatal.
"""
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse


class PosError(Exception):
    status_code = 400

    def __init__(self, detail: str):
        super().__init__(detail)
        self.detail = detail


class ValidationError(PosError):
    """Input or precondition rejected; no state was mutated."""
    status_code = 422


class PersistenceError(PosError):
    """The data store failed a read or write; in-memory drafts are intact."""
    status_code = 503


class NotFoundError(PosError):
    status_code = 404


class ConfirmationRequired(PosError):
    """A destructive action (clear, exit with unsaved changes) needs an explicit confirm."""
    status_code = 409


async def _pos_error_handler(request: Request, exc: PosError):
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.detail, "error": type(exc).__name__})


def install_handlers(app: FastAPI) -> None:
    app.add_exception_handler(PosError, _pos_error_handler)
