"""Configuration loading from environment variables and files."""

import logging
import os

from dotenv import load_dotenv
from pydantic import BaseModel, Field, HttpUrl, TypeAdapter, field_validator

from surge.ports.settings import METHOD_TOKEN

__all__ = ["Settings", "load_settings"]

load_dotenv()

logger = logging.getLogger(__name__)
_http_url_adapter = TypeAdapter(HttpUrl)


class Settings(BaseModel):
    """Runtime configuration for one load test.

    Attributes:
        target_url: HTTP(S) endpoint that receives the load.
        http_method: Explicit method (upper-cased), or "" to auto-detect.
        request_body: Payload sent with POST/PUT/PATCH.
        request_body_file_path: Optional file whose text replaces request_body.
        duration_in_sec: Length of the run in seconds.
        workers: Number of concurrent workers.
        requests_per_sec: Dispatch ticks per second.
    """

    target_url: str = Field(..., description="HTTP(S) endpoint that receives the load.")
    http_method: str = Field(
        default="",
        description="Explicit HTTP method; empty means auto-detect.",
    )
    request_body: str = Field(default="", description="Body sent with POST/PUT/PATCH.")
    request_body_file_path: str | None = Field(
        default=None,
        description="Optional file whose content is used as the request body.",
    )
    duration_in_sec: int = Field(..., gt=0, description="Length of the run in seconds.")
    workers: int = Field(..., gt=0, description="Number of concurrent workers.")
    requests_per_sec: int = Field(..., gt=0, description="Dispatch ticks per second.")

    @field_validator("target_url")
    @classmethod
    def validate_target_url(cls, v: str) -> str:
        """Validate that the target is a valid HTTP(S) URL.

        Args:
            v: Target URL to validate.

        Returns:
            The validated URL, stripped of surrounding whitespace.

        Raises:
            ValueError: If URL is invalid or not http/https.
        """
        v = v.strip()
        try:
            url = _http_url_adapter.validate_python(v)
            if url.scheme not in ("http", "https"):
                raise ValueError("Only http:// and https:// targets allowed")
        except Exception as e:
            raise ValueError(f"Invalid target URL: {e}") from e
        return v

    @field_validator("http_method")
    @classmethod
    def validate_http_method(cls, v: str) -> str:
        """Normalize the method to upper case and check it is an HTTP token.

        Args:
            v: Method as configured (case-insensitive).

        Returns:
            Upper-cased method, or "" for auto-detection.

        Raises:
            ValueError: If the method contains characters not allowed in a token.
        """
        v = v.strip().upper()
        if v and not METHOD_TOKEN.fullmatch(v):
            raise ValueError(f"Invalid HTTP method: {v!r}")
        return v

    def load_body(self) -> None:
        """Replace request_body with the content of request_body_file_path, if set.

        Raises:
            ValueError: If the file cannot be read.
        """
        if not self.request_body_file_path:
            return
        try:
            with open(self.request_body_file_path, encoding="utf-8") as f:
                self.request_body = f.read().strip()
        except OSError as e:
            raise ValueError(f"Request body file not readable: {self.request_body_file_path}") from e

        logger.debug(
            f"Loaded {len(self.request_body)} body characters from {self.request_body_file_path}"
        )


def _positive_int(name: str) -> int:
    """Read a required positive integer environment variable.

    Raises:
        RuntimeError: If missing, not an integer, or not positive.
    """
    try:
        raw = os.environ[name]
    except KeyError as e:
        raise RuntimeError(f"Missing required environment variable: {e.args[0]}") from e

    try:
        value = int(raw)
        if value <= 0:
            raise ValueError("Must be positive")
    except ValueError as e:
        raise RuntimeError(f"{name} must be a positive integer (got: {raw})") from e
    return value


def load_settings() -> Settings:
    """Load and validate settings from environment and files.

    Required environment variables:
    - TARGET_URL: Valid HTTP(S) URL of the target.
    - DURATION_IN_SECONDS: Positive integer.
    - WORKERS: Positive integer.
    - REQUESTS_PER_SECOND: Positive integer.

    Optional:
    - HTTP_METHOD: Explicit method; empty or unset to auto-detect.
    - REQUEST_BODY: Payload for POST/PUT/PATCH.
    - REQUEST_BODY_FILE_PATH: File whose content replaces REQUEST_BODY.

    Returns:
        Validated Settings object.

    Raises:
        RuntimeError: If required env vars missing or invalid.
        ValueError: If configuration is invalid.
    """
    try:
        target_url = os.environ["TARGET_URL"]
    except KeyError as e:
        raise RuntimeError(f"Missing required environment variable: {e.args[0]}") from e

    settings = Settings(
        target_url=target_url,
        http_method=os.getenv("HTTP_METHOD", ""),
        request_body=os.getenv("REQUEST_BODY", ""),
        request_body_file_path=os.getenv("REQUEST_BODY_FILE_PATH") or None,
        duration_in_sec=_positive_int("DURATION_IN_SECONDS"),
        workers=_positive_int("WORKERS"),
        requests_per_sec=_positive_int("REQUESTS_PER_SECOND"),
    )

    settings.load_body()

    logger.info(
        f"Load test configured: target={settings.target_url}, "
        f"method={settings.http_method or '<auto>'}, "
        f"duration={settings.duration_in_sec}s, "
        f"workers={settings.workers}, "
        f"rps={settings.requests_per_sec}"
    )

    return settings
