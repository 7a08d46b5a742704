# pharmalink/errors.py
from __future__ import annotations

from typing import Any, Dict

from fastapi import HTTPException


class UpstreamError(Exception):
    """A collaborator call failed or answered with something we cannot use.

    Always fatal to the request that triggered it.
    """

    def __init__(self, source: str, detail: Any):
        self.source = source
        self.detail = str(detail)
        super().__init__(f"{source}: {self.detail}")

    def to_payload(self) -> Dict[str, Any]:
        return {
            "error": f"Error communicating with {self.source}",
            "source": self.source,
            "detail": self.detail,
        }


class BadRequest(HTTPException):
    def __init__(self, detail: str = "400 Bad Request"):
        super().__init__(status_code=400, detail=detail)
