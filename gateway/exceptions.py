"""
GATEWAY EXCEPTIONS
==================

Every failure a caller can see has a stable machine-readable `code` and a
human-readable `detail`. The API layer renders them as "<code>: <detail>".

  GatewayError
    ValidationError          - bad request (empty message/model)
      UnknownModelError      - model id not in the registry
    ProviderError            - the backend call failed
      ProviderTransportError - timeout / connection failure
      ProviderResponseError  - non-200 status or malformed response body

None of these are retried.
"""

from typing import Optional


class GatewayError(Exception):
    """Base class for all errors surfaced to gateway callers."""

    code = "gateway_error"

    def __init__(self, detail: str):
        super().__init__(detail)
        self.detail = detail

    def __str__(self) -> str:
        return f"{self.code}: {self.detail}"


class ValidationError(GatewayError):
    """The request itself is invalid. Raised before any provider is contacted."""

    code = "validation_error"


class UnknownModelError(ValidationError):
    """The requested model id has no registry entry."""

    code = "unsupported_model"

    def __init__(self, model: str):
        super().__init__(f"Unsupported model: {model}")
        self.model = model


class ProviderError(GatewayError):
    """A provider call failed. Nothing is written to conversation memory."""

    code = "provider_error"

    def __init__(self, provider: str, detail: str):
        super().__init__(detail)
        self.provider = provider


class ProviderTransportError(ProviderError):
    """The request never produced an HTTP response (timeout, DNS, refused connection)."""

    code = "provider_transport_error"

    def __init__(self, provider: str, detail: str, timeout: bool = False):
        super().__init__(provider, detail)
        self.timeout = timeout


class ProviderResponseError(ProviderError):
    """The provider answered, but not with a usable chat completion."""

    code = "provider_response_error"

    # Bodies can be whole HTML error pages; keep the message readable.
    BODY_PREVIEW_CHARS = 500

    def __init__(self, provider: str, detail: str, status_code: Optional[int] = None, body: str = ""):
        if body:
            detail = f"{detail} - {body[:self.BODY_PREVIEW_CHARS]}"
        super().__init__(provider, detail)
        self.status_code = status_code
        self.body = body
