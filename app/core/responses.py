from typing import Any

from fastapi import status
from fastapi.responses import ORJSONResponse


def success(data: Any, status_code: int = status.HTTP_200_OK) -> ORJSONResponse:
    """Wrap a payload in the success envelope."""
    return ORJSONResponse(status_code=status_code, content={"ok": True, "data": data})
