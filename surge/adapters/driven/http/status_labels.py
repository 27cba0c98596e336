"""Human-readable labels for HTTP status codes."""

from http import HTTPStatus

__all__ = ["STATUS_LABELS", "UNKNOWN_STATUS_LABEL", "label_for"]

UNKNOWN_STATUS_LABEL = "Unknown Status"

STATUS_LABELS: dict[int, str] = {status.value: status.phrase for status in HTTPStatus}


def label_for(status_code: int) -> str:
    """Map a status code to its label, falling back to UNKNOWN_STATUS_LABEL."""
    return STATUS_LABELS.get(status_code, UNKNOWN_STATUS_LABEL)
