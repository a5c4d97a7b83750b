"""Manual-approval policies applied when a claim is requested."""

from __future__ import annotations

from decimal import Decimal
from typing import Optional, Protocol

from ..config import settings
from ..settlement.engine import SettlementSummary


class ApprovalPolicy(Protocol):
    def requires_approval(self, summary: SettlementSummary) -> bool:
        ...


class AlwaysRequireApproval:
    """Every claim waits in ``pending_approval`` for an approver."""

    def requires_approval(self, summary: SettlementSummary) -> bool:
        return True


class NeverRequireApproval:
    """Claims are paid as soon as they are requested."""

    def requires_approval(self, summary: SettlementSummary) -> bool:
        return False


class ThresholdApprovalPolicy:
    """Payouts at or above ``threshold`` need manual approval."""

    def __init__(self, threshold: Decimal) -> None:
        self.threshold = Decimal(str(threshold))

    def requires_approval(self, summary: SettlementSummary) -> bool:
        return summary.total_payout >= self.threshold


def policy_from_settings(
    mode: Optional[str] = None, threshold: Optional[Decimal] = None
) -> ApprovalPolicy:
    """Build the policy selected by ``CLAIM_APPROVAL_MODE``."""
    mode = (mode or settings.CLAIM_APPROVAL_MODE).strip().lower()
    if mode == "always":
        return AlwaysRequireApproval()
    if mode == "never":
        return NeverRequireApproval()
    if mode == "threshold":
        return ThresholdApprovalPolicy(
            threshold if threshold is not None else settings.CLAIM_APPROVAL_THRESHOLD
        )
    raise ValueError(f"Unknown claim approval mode '{mode}'")


__all__ = [
    "AlwaysRequireApproval",
    "ApprovalPolicy",
    "NeverRequireApproval",
    "ThresholdApprovalPolicy",
    "policy_from_settings",
]
