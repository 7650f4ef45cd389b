"""Response classification for upstream inventory responses.

A raw (status, body) pair is classified into one of three verdicts:

- SUCCESS: a structurally valid inventory document
- SOFT_FAILURE: receivable but unusable (blocked page, empty, malformed,
  wrong shape); the fetcher falls back to the next strategy
- HARD_FAILURE: a non-2xx status after the retry budget was spent
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from enum import Enum

from steamvault.services.upstream.inventory_models import InventoryDocument
from steamvault.shared.constants import FailureReasons, HTTPStatusCodes, ResponseMarkers

logger = logging.getLogger(__name__)


class Verdict(Enum):
    """Validator verdicts."""

    SUCCESS = "success"
    SOFT_FAILURE = "soft_failure"
    HARD_FAILURE = "hard_failure"


@dataclass(frozen=True)
class ValidationResult:
    """Outcome of validating one response.

    ``document`` is set only for SUCCESS; ``reason`` only for failures.
    """

    verdict: Verdict
    document: InventoryDocument | None = None
    reason: str | None = None

    @property
    def is_success(self) -> bool:
        return self.verdict is Verdict.SUCCESS

    @classmethod
    def success(cls, document: InventoryDocument) -> ValidationResult:
        return cls(Verdict.SUCCESS, document=document)

    @classmethod
    def soft(cls, reason: str) -> ValidationResult:
        return cls(Verdict.SOFT_FAILURE, reason=reason)

    @classmethod
    def hard(cls, reason: str) -> ValidationResult:
        return cls(Verdict.HARD_FAILURE, reason=reason)


class ResponseValidator:
    """Classifies raw upstream responses.

    Args:
        blocked_markup: Lower-cased substrings that identify interstitial
            or login pages
    """

    def __init__(
        self,
        blocked_markup: tuple[str, ...] = ResponseMarkers.BLOCKED_MARKUP,
    ) -> None:
        self.blocked_markup = blocked_markup

    def validate(
        self,
        http_status: int,
        body_text: str | None,
        *,
        envelope_field: str | None = None,
        source: str | None = None,
    ) -> ValidationResult:
        """Classify one response.

        Args:
            http_status: Final HTTP status of the attempt
            body_text: Response body as text
            envelope_field: JSON field a relay wraps the upstream body in
            source: Strategy label to tag a successful document with

        Returns:
            ValidationResult with the verdict and either the document or a reason
        """
        if not HTTPStatusCodes.is_success(http_status):
            return ValidationResult.hard(FailureReasons.HTTP_STATUS.format(status=http_status))

        return self._validate_body(body_text, envelope_field=envelope_field, source=source)

    def _validate_body(
        self,
        body_text: str | None,
        *,
        envelope_field: str | None,
        source: str | None,
    ) -> ValidationResult:
        if self._is_blocked_or_empty(body_text):
            return ValidationResult.soft(FailureReasons.BLOCKED_OR_EMPTY)

        try:
            parsed = json.loads(body_text)  # type: ignore[arg-type]
        except (json.JSONDecodeError, TypeError):
            return ValidationResult.soft(FailureReasons.MALFORMED)

        if envelope_field is not None:
            if not isinstance(parsed, dict) or not isinstance(parsed.get(envelope_field), str):
                return ValidationResult.soft(FailureReasons.UNEXPECTED_SHAPE)
            return self._validate_body(parsed[envelope_field], envelope_field=None, source=source)

        if parsed is None:
            return ValidationResult.soft(FailureReasons.BLOCKED_OR_EMPTY)

        if not InventoryDocument.has_asset_collection(parsed):
            return ValidationResult.soft(FailureReasons.UNEXPECTED_SHAPE)

        try:
            document = InventoryDocument.from_raw(parsed, source=source)
        except (TypeError, ValueError) as e:
            logger.debug("Inventory document rejected from %s: %s", source, e)
            return ValidationResult.soft(FailureReasons.UNEXPECTED_SHAPE)

        return ValidationResult.success(document)

    def _is_blocked_or_empty(self, body_text: str | None) -> bool:
        if body_text is None:
            return True
        stripped = body_text.strip()
        if not stripped or stripped == ResponseMarkers.NULL_LITERAL:
            return True
        # Item descriptions inside a JSON payload may mention login text
        if stripped[0] in "{[":
            return False
        lowered = stripped.lower()
        return any(marker in lowered for marker in self.blocked_markup)
