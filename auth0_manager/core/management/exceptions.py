"""Management API specific exceptions."""
from ..errors import UpstreamFailure


class ManagementAPIError(UpstreamFailure):
    """HTTP error from the Auth0 Management API.

    Attributes:
        status_code: HTTP status code
        detail: Error message from response body
        endpoint: API endpoint that failed
    """

    def __init__(self, status_code: int, message: str, endpoint: str):
        self.status_code = status_code
        self.endpoint = endpoint
        self.detail = message
        super().__init__(f"[{status_code}] {endpoint}: {message}")
