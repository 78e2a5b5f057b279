"""
API error type rendered as {"error": ..., "details"?: ...}.

Routes raise APIError for client-facing failures; app.main registers the
handler that turns it into a JSON response.
"""

from typing import Any, Dict, Optional

from pydantic import ValidationError


class APIError(Exception):
    def __init__(self, status_code: int, error: str, details: Optional[Any] = None):
        super().__init__(error)
        self.status_code = status_code
        self.error = error
        self.details = details

    def to_content(self) -> Dict[str, Any]:
        content: Dict[str, Any] = {"error": self.error}
        if self.details is not None:
            content["details"] = self.details
        return content


async def read_model_body(request, model):
    """
    Parse a JSON request body into `model`.

    Malformed JSON and validation failures both become 400s; validation
    errors carry pydantic's error list as details.
    """
    try:
        body = await request.json()
    except ValueError:
        raise APIError(400, "Invalid JSON body")
    try:
        return model.model_validate(body)
    except ValidationError as e:
        raise APIError(400, "Invalid Request", details=e.errors(include_url=False, include_context=False))
