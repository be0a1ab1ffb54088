"""
Transaction Input Validation

DESIGN DECISION: Drafts are validated locally, before any remote call.
The remote store validates too, but a bad title should never cost a
network round-trip, and the user should get the same wording either way.

The schema itself lives on TransactionDraft (pydantic). This module turns
pydantic's structured errors into short, human-readable messages and a
single exception type the store can record and re-raise.

IMPORTANT: Validation only normalizes what the record invariants say
(trim text, default the category). It never guesses at intent.
"""

from typing import Any, Mapping, Union

from pydantic import ValidationError

from finance_tracker.models.transaction import (
    CATEGORY_MAX_LENGTH,
    TITLE_MAX_LENGTH,
    TransactionDraft,
    ValidationIssue,
)
from finance_tracker.services.ledger.interface import LedgerError


# pydantic reports aliased fields under their alias
FIELD_NAMES = {
    "type": "kind",
    "date": "occurred_at",
}


class TransactionValidationError(LedgerError):
    """Input violates a transaction invariant. Raised before any remote call."""

    def __init__(self, issues: list[ValidationIssue]):
        self.issues = issues
        super().__init__(", ".join(issue.message for issue in issues) or "Invalid transaction")


class TransactionValidator:
    """Validates create/update input against the transaction invariants."""

    def validate(
        self,
        data: Union[TransactionDraft, Mapping[str, Any]],
    ) -> TransactionDraft:
        """
        Validate a draft (or raw form data) and return a clean TransactionDraft.

        Raises:
            TransactionValidationError: With one issue per violated invariant
        """
        if isinstance(data, TransactionDraft):
            # Drafts are mutable; re-check what they hold now
            raw = data.model_dump(exclude_none=True)
        else:
            raw = dict(data)

        try:
            return TransactionDraft.model_validate(raw)
        except ValidationError as e:
            raise TransactionValidationError(self._to_issues(e)) from e

    def _to_issues(self, error: ValidationError) -> list[ValidationIssue]:
        issues = []
        seen = set()
        for err in error.errors():
            field = str(err["loc"][0]) if err["loc"] else "draft"
            field = FIELD_NAMES.get(field, field)
            issue = self._describe(field, err["type"])
            key = (issue.field, issue.message)
            if key not in seen:
                seen.add(key)
                issues.append(issue)
        return issues

    def _describe(self, field: str, error_type: str) -> ValidationIssue:
        """Map a pydantic error to the wording the dashboard shows."""
        if error_type == "extra_forbidden":
            return ValidationIssue(
                field=field,
                issue_type="unknown_field",
                message=f"Unknown field: {field}.",
            )

        if field == "title":
            if error_type in ("missing", "string_too_short"):
                return ValidationIssue(field=field, issue_type="missing", message="Title is required.")
            if error_type == "string_too_long":
                return ValidationIssue(
                    field=field,
                    issue_type="too_long",
                    message=f"Title must be {TITLE_MAX_LENGTH} characters or less.",
                )
            return ValidationIssue(field=field, issue_type="invalid_value", message="Title must be text.")

        if field == "amount":
            issue_type = "missing" if error_type == "missing" else "invalid_value"
            return ValidationIssue(field=field, issue_type=issue_type, message="Amount must be a number > 0.")

        if field == "kind":
            issue_type = "missing" if error_type == "missing" else "invalid_value"
            return ValidationIssue(field=field, issue_type=issue_type, message="Type must be income or expense.")

        if field == "category":
            if error_type == "string_too_long":
                return ValidationIssue(
                    field=field,
                    issue_type="too_long",
                    message=f"Category must be {CATEGORY_MAX_LENGTH} characters or less.",
                )
            return ValidationIssue(field=field, issue_type="invalid_value", message="Category must be text.")

        if field == "occurred_at":
            return ValidationIssue(
                field=field,
                issue_type="invalid_value",
                message="Date must be a valid date and time.",
            )

        return ValidationIssue(field=field, issue_type="invalid_value", message=f"Invalid value for {field}.")
