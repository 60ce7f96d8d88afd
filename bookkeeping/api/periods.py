"""
Fiscal period endpoints: statement import, classification,
journal generation, processing and reporting.

The API layer is thin. Processing, reprocessing and overrides in a
PROCESSED period commit inside the Reprocessor; every other
mutating endpoint commits here.
"""

from fastapi import APIRouter, Depends
from sqlalchemy import select
from sqlalchemy.orm import Session

from bookkeeping.api.errors import http_error
from bookkeeping.errors import ValidationError
from bookkeeping.models.base import get_db
from bookkeeping.models.enums import PeriodStatus
from bookkeeping.models.journal_entry import JournalEntry
from bookkeeping.services.classifier import Classifier
from bookkeeping.services.journal_generator import JournalGenerator
from bookkeeping.services.ledger_service import LedgerService
from bookkeeping.services.period_service import PeriodService
from bookkeeping.services.reprocessor import Reprocessor
from bookkeeping.services.trial_balance import TrialBalanceAggregator
from bookkeeping.schemas.journal import GenerationResult, JournalEntryResponse
from bookkeeping.schemas.ledger import (
    AccountBalance,
    AccountLedger,
    ReconciliationResult,
    TrialBalance,
)
from bookkeeping.schemas.period import FiscalPeriodCreate, FiscalPeriodResponse
from bookkeeping.schemas.transaction import (
    BankTransactionCreate,
    BankTransactionResponse,
    ClassificationRunResult,
    ClassificationSummary,
    ImportResult,
    ManualClassificationRequest,
)

router = APIRouter(
    prefix="/organizations/{organization_id}/periods",
    tags=["Periods"],
)


# --- Periods ---

@router.post("", response_model=FiscalPeriodResponse, status_code=201)
def create_period(
    organization_id: int,
    request: FiscalPeriodCreate,
    db: Session = Depends(get_db),
):
    service = PeriodService(db)
    try:
        period = service.create_period(organization_id, request)
        db.commit()
        return period
    except ValueError as e:
        db.rollback()
        raise http_error(e)


@router.get("", response_model=list[FiscalPeriodResponse])
def list_periods(
    organization_id: int,
    db: Session = Depends(get_db),
):
    try:
        return PeriodService(db).list_periods(organization_id)
    except ValueError as e:
        raise http_error(e)


@router.get("/{period_id}", response_model=FiscalPeriodResponse)
def get_period(
    organization_id: int,
    period_id: int,
    db: Session = Depends(get_db),
):
    try:
        return PeriodService(db).get_period(organization_id, period_id)
    except ValueError as e:
        raise http_error(e)


# --- Transactions ---

@router.post(
    "/{period_id}/transactions",
    response_model=ImportResult,
    status_code=201,
)
def import_transactions(
    organization_id: int,
    period_id: int,
    transactions: list[BankTransactionCreate],
    db: Session = Depends(get_db),
):
    """Import parsed statement lines. The batch is all-or-nothing."""
    service = PeriodService(db)
    try:
        created = service.import_transactions(
            organization_id, period_id, transactions
        )
        db.commit()
        return ImportResult(fiscal_period_id=period_id, imported=len(created))
    except ValueError as e:
        db.rollback()
        raise http_error(e)


@router.get(
    "/{period_id}/transactions",
    response_model=list[BankTransactionResponse],
)
def list_transactions(
    organization_id: int,
    period_id: int,
    unclassified_only: bool = False,
    db: Session = Depends(get_db),
):
    try:
        return PeriodService(db).list_transactions(
            organization_id, period_id, unclassified_only=unclassified_only
        )
    except ValueError as e:
        raise http_error(e)


# --- Classification ---

@router.post("/{period_id}/classify", response_model=ClassificationRunResult)
def classify_period(
    organization_id: int,
    period_id: int,
    db: Session = Depends(get_db),
):
    """Classify every unclassified transaction in the period by rule."""
    classifier = Classifier(db)
    try:
        result = classifier.auto_classify_period(organization_id, period_id)
        db.commit()
        return result
    except ValueError as e:
        db.rollback()
        raise http_error(e)


@router.put(
    "/{period_id}/transactions/{transaction_id}/classification",
    response_model=BankTransactionResponse,
)
def classify_manually(
    organization_id: int,
    period_id: int,
    transaction_id: int,
    request: ManualClassificationRequest,
    db: Session = Depends(get_db),
):
    """
    Override a transaction's account by hand.

    In an OPEN period the override is stored and committed here. In a
    PROCESSED period the reprocessor applies it and rebuilds the
    period in the same commit.
    """
    classifier = Classifier(db)
    try:
        period = classifier.periods.get_period(organization_id, period_id)
        if period.status == PeriodStatus.PROCESSED:
            return Reprocessor(db).classify_manually(
                organization_id, period_id, transaction_id,
                request.account_code, request.user,
            )

        txn = classifier.periods.get_transaction(organization_id, transaction_id)
        if txn.fiscal_period_id != period_id:
            raise ValidationError(
                f"Bank transaction {transaction_id} is not in period {period_id}"
            )
        txn = classifier.classify_manually(
            organization_id, transaction_id, request.account_code, request.user
        )
        db.commit()
        return txn
    except ValueError as e:
        db.rollback()
        raise http_error(e)


@router.get(
    "/{period_id}/classification-summary",
    response_model=ClassificationSummary,
)
def classification_summary(
    organization_id: int,
    period_id: int,
    db: Session = Depends(get_db),
):
    try:
        return Classifier(db).summary(organization_id, period_id)
    except ValueError as e:
        raise http_error(e)


# --- Journal ---

@router.post("/{period_id}/journal-entries", response_model=GenerationResult)
def generate_journal_entries(
    organization_id: int,
    period_id: int,
    db: Session = Depends(get_db),
):
    """Generate entries for classified transactions that have none."""
    generator = JournalGenerator(db)
    try:
        result = generator.generate_for_period(organization_id, period_id)
        db.commit()
        return result
    except ValueError as e:
        db.rollback()
        raise http_error(e)


@router.get(
    "/{period_id}/journal-entries",
    response_model=list[JournalEntryResponse],
)
def list_journal_entries(
    organization_id: int,
    period_id: int,
    db: Session = Depends(get_db),
):
    try:
        PeriodService(db).get_period(organization_id, period_id)
    except ValueError as e:
        raise http_error(e)
    entries = db.execute(
        select(JournalEntry)
        .where(
            JournalEntry.organization_id == organization_id,
            JournalEntry.fiscal_period_id == period_id,
        )
        .order_by(JournalEntry.entry_date, JournalEntry.id)
    ).scalars().all()
    return [JournalEntryResponse.from_entry(entry) for entry in entries]


# --- Processing ---

@router.post("/{period_id}/process", response_model=FiscalPeriodResponse)
def process_period(
    organization_id: int,
    period_id: int,
    db: Session = Depends(get_db),
):
    """Classify, generate and aggregate an OPEN period."""
    try:
        return Reprocessor(db).process(organization_id, period_id)
    except ValueError as e:
        raise http_error(e)


@router.post("/{period_id}/reprocess", response_model=FiscalPeriodResponse)
def reprocess_period(
    organization_id: int,
    period_id: int,
    db: Session = Depends(get_db),
):
    """Rebuild a PROCESSED period atomically."""
    try:
        return Reprocessor(db).reprocess(organization_id, period_id)
    except ValueError as e:
        raise http_error(e)


# --- Reports ---

@router.get("/{period_id}/trial-balance", response_model=TrialBalance)
def get_trial_balance(
    organization_id: int,
    period_id: int,
    db: Session = Depends(get_db),
):
    try:
        return TrialBalanceAggregator(db).trial_balance(organization_id, period_id)
    except ValueError as e:
        raise http_error(e)


@router.get("/{period_id}/balances", response_model=list[AccountBalance])
def get_account_balances(
    organization_id: int,
    period_id: int,
    db: Session = Depends(get_db),
):
    try:
        return LedgerService(db).account_balances(organization_id, period_id)
    except ValueError as e:
        raise http_error(e)


@router.get("/{period_id}/ledger/{account_code}", response_model=AccountLedger)
def get_account_ledger(
    organization_id: int,
    period_id: int,
    account_code: str,
    db: Session = Depends(get_db),
):
    """General ledger for one account with a running balance."""
    try:
        return LedgerService(db).account_ledger(
            organization_id, account_code, period_id
        )
    except ValueError as e:
        raise http_error(e)


@router.get("/{period_id}/reconciliation", response_model=ReconciliationResult)
def get_reconciliation(
    organization_id: int,
    period_id: int,
    db: Session = Depends(get_db),
):
    try:
        return LedgerService(db).reconcile(organization_id, period_id)
    except ValueError as e:
        raise http_error(e)
