"""Uniform response envelope for driver actions."""

from typing import Any, Dict, Optional

from pydantic import BaseModel

from .errors import DriverError


class ActionResponse(BaseModel):
    """Outcome of one successful action: a log line plus an optional value."""

    log: str
    value: Optional[Any] = None

    def to_dict(self) -> Dict[str, Any]:
        content = [{"text": self.log}]
        if self.value is not None:
            content.append({"json": self.value})
        return {"status": "success", "content": content}


def empty_with_log(message: str) -> ActionResponse:
    return ActionResponse(log=message)


def value_with_log(message: str, value: Any) -> ActionResponse:
    return ActionResponse(log=message, value=value)


def error_response(error: Exception, code: Optional[str] = None) -> Dict[str, Any]:
    if code is None:
        code = error.code if isinstance(error, DriverError) else "INTERNAL_ERROR"
    return {"status": "error", "code": code, "content": [{"text": str(error)}]}
