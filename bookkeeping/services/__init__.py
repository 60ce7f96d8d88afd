"""Business logic services."""

from bookkeeping.services.rule_catalog import RuleCatalog
from bookkeeping.services.organization_service import OrganizationService
from bookkeeping.services.period_service import PeriodService
from bookkeeping.services.classifier import Classifier, ClassificationResult
from bookkeeping.services.journal_generator import JournalGenerator
from bookkeeping.services.ledger_service import LedgerService
from bookkeeping.services.trial_balance import TrialBalanceAggregator
from bookkeeping.services.reprocessor import Reprocessor, PeriodLockRegistry

__all__ = [
    "RuleCatalog",
    "OrganizationService",
    "PeriodService",
    "Classifier",
    "ClassificationResult",
    "JournalGenerator",
    "LedgerService",
    "TrialBalanceAggregator",
    "Reprocessor",
    "PeriodLockRegistry",
]
