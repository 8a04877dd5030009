"""
Expense Validation

DESIGN DECISION: The settlement engine accepts any well-typed expense and
never refuses to compute. The checks that keep expenses sensible live here,
and run when an expense is created or edited:

ERRORS (block saving):
- No participants / no payers
- Total paid does not match the expense amount
- Explicit shares exceed the amount while equal-split participants remain
- The same person listed twice as participant or as payer

WARNINGS (shown, do not block):
- Every share is explicit and they do not add up to the amount
  (the difference would not be attributed to anyone)
- A payer who paid nothing

IMPORTANT: Validation NEVER silently fixes issues.
It reports them for the user to correct.
"""

from collections import Counter
from decimal import Decimal
from typing import Optional

from giftwise.audit import get_logger
from giftwise.config import SettlementSettings, get_settings
from giftwise.models.expense import Expense
from giftwise.models.validation import ValidationIssue, ValidationResult
from giftwise.settlement.money import format_money

logger = get_logger(__name__)


class ExpenseValidationError(Exception):
    """Raised by ensure_valid when an expense has error-level issues."""
    
    def __init__(self, result: ValidationResult):
        self.result = result
        messages = [i.message for i in result.issues if i.severity == "error"]
        super().__init__("; ".join(messages))


class ExpenseValidator:
    """Checks a single expense before it is saved."""
    
    def __init__(self, settings: Optional[SettlementSettings] = None):
        """
        Initialize validator.
        
        Args:
            settings: Settlement settings. If None, the configured ones are used.
        """
        self._settings = settings or get_settings().settlement
    
    def _money(self, amount: Decimal) -> str:
        return format_money(amount, self._settings.currency_symbol)
    
    def _check_people(self, expense: Expense) -> list[ValidationIssue]:
        """Participants and payers must be present and unique."""
        issues = []
        
        if not expense.participants:
            issues.append(ValidationIssue(
                field="participants",
                issue_type="missing",
                message="Please add at least one participant",
                severity="error",
                suggested_fix="Add everyone who shares this cost",
            ))
        
        if not expense.payers:
            issues.append(ValidationIssue(
                field="payers",
                issue_type="missing",
                message="Please add at least one payer",
                severity="error",
                suggested_fix="Add the person who paid",
            ))
        
        for field, people in (
            ("participants", expense.participants),
            ("payers", expense.payers),
        ):
            counts = Counter(p.person_id for p in people)
            for person_id, count in counts.items():
                if count > 1:
                    issues.append(ValidationIssue(
                        field=field,
                        issue_type="duplicate",
                        message=f"{person_id} is listed {count} times in {field}",
                        severity="error",
                        suggested_fix="Combine the entries into one",
                    ))
        
        return issues
    
    def _check_payments(self, expense: Expense) -> list[ValidationIssue]:
        """What was paid must add up to the amount."""
        issues = []
        
        if expense.payers:
            total_paid = expense.total_paid
            if abs(total_paid - expense.total_amount) > self._settings.payment_tolerance:
                issues.append(ValidationIssue(
                    field="payers",
                    issue_type="mismatch",
                    message=(
                        f"Total paid ({self._money(total_paid)}) must equal "
                        f"expense amount ({self._money(expense.total_amount)})"
                    ),
                    severity="error",
                    suggested_fix="Adjust the amounts paid",
                ))
        
        for payer in expense.payers:
            if payer.amount_paid == 0:
                issues.append(ValidationIssue(
                    field="payers",
                    issue_type="zero_payment",
                    message=f"{payer.person_id} is listed as payer but paid nothing",
                    severity="warning",
                    suggested_fix="Remove the payer or enter the amount paid",
                ))
        
        return issues
    
    def _check_shares(self, expense: Expense) -> list[ValidationIssue]:
        """Explicit shares must fit inside the amount."""
        issues = []
        
        if not expense.participants:
            return issues
        
        explicit_total = expense.explicit_share_total
        remainder = expense.total_amount - explicit_total
        has_equal_split = any(p.is_equal_split for p in expense.participants)
        
        if has_equal_split and remainder < 0:
            issues.append(ValidationIssue(
                field="participants",
                issue_type="overcommitted",
                message="Custom shares exceed total amount",
                severity="error",
                suggested_fix="Lower the custom shares or raise the amount",
            ))
        elif not has_equal_split and abs(remainder) > self._settings.payment_tolerance:
            issues.append(ValidationIssue(
                field="participants",
                issue_type="unallocated",
                message=(
                    f"Custom shares ({self._money(explicit_total)}) do not add up "
                    f"to the expense amount ({self._money(expense.total_amount)})"
                ),
                severity="warning",
                suggested_fix="Leave one share empty to split the rest equally",
            ))
        
        return issues
    
    def validate(self, expense: Expense) -> ValidationResult:
        """
        Run every check on an expense.
        
        Returns:
            ValidationResult with all issues found
        """
        all_issues = []
        all_issues.extend(self._check_people(expense))
        all_issues.extend(self._check_payments(expense))
        all_issues.extend(self._check_shares(expense))
        
        warnings = [i.message for i in all_issues if i.severity == "warning"]
        is_valid = not any(i.severity == "error" for i in all_issues)
        
        if not is_valid:
            logger.info(
                "expense_validation_failed",
                expense_id=expense.id,
                issues=[i.issue_type for i in all_issues],
            )
        
        return ValidationResult(
            expense_id=expense.id,
            is_valid=is_valid,
            issues=all_issues,
            warnings=warnings,
        )
    
    def ensure_valid(self, expense: Expense) -> ValidationResult:
        """
        Validate and raise on errors.
        
        Raises:
            ExpenseValidationError: If any error-level issue was found
        """
        result = self.validate(expense)
        if not result.is_valid:
            raise ExpenseValidationError(result)
        return result
    
    def get_user_friendly_summary(
        self,
        result: ValidationResult,
    ) -> str:
        """
        Generate a user-friendly summary of validation results.
        
        This is what we show on the expense form.
        """
        if result.is_valid and not result.warnings:
            return "✅ All checks passed!"
        
        lines = []
        
        if result.has_errors:
            lines.append("❌ This expense can't be saved yet:")
            for issue in result.issues:
                if issue.severity == "error":
                    lines.append(f"   • {issue.message}")
                    if issue.suggested_fix:
                        lines.append(f"     💡 {issue.suggested_fix}")
        
        if result.warnings:
            if lines:
                lines.append("")
            lines.append("⚠️ Please verify the following:")
            for warning in result.warnings:
                lines.append(f"   • {warning}")
        
        return "\n".join(lines)
