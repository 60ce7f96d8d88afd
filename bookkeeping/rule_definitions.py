"""
System classification rule templates.

This module is the only place literal description patterns live.
RuleCatalog copies these templates into each organization's
mapping_rules table as SYSTEM rows; the classifier only ever reads
the persisted rows.

Priority bands:

    10  fees and very specific phrases that would otherwise be
        swallowed by a broader pattern further down
     9  payroll, statutory and loan movements
     8  common operating expenses and income
     5  broad catch-alls

Within a band, rules are evaluated in the order they appear here.
"""

from dataclasses import dataclass

from bookkeeping.models.enums import MatchType


@dataclass(frozen=True)
class RuleDefinition:
    name: str
    pattern: str
    account_code: str
    priority: int
    match_type: MatchType = MatchType.CONTAINS
    description: str = ""


SYSTEM_RULES: tuple[RuleDefinition, ...] = (
    # --- Priority 10: specific phrases ---
    RuleDefinition(
        "Immediate Payment Fees", "FEE IMMEDIATE PAYMENT", "9600", 10,
        description="Bank fee charged on an immediate payment",
    ),
    RuleDefinition(
        "Excess Interest", "EXCESS INTEREST", "9500", 10,
        description="Excess interest charged on overdrawn balances",
    ),
    RuleDefinition(
        "Bond Repayment", "BANK BOND", "4000", 10,
        description="Home loan or bond repayments",
    ),
    RuleDefinition(
        "Vehicle Tracking", "CARTRACK", "8500-001", 10,
        description="Vehicle tracking service fees",
    ),
    RuleDefinition(
        "Credit Interest", "CREDIT INTEREST", "7000", 10,
        description="Interest earned on the bank balance",
    ),
    RuleDefinition(
        "Balance Brought Forward", "BALANCE BROUGHT FORWARD", "5100", 10,
        match_type=MatchType.STARTS_WITH,
        description="Balance line carried over from a previous statement",
    ),

    # --- Priority 9: payroll, statutory and loans ---
    RuleDefinition(
        "PAYE Payments", "PAYE-PAY-AS-", "9820", 9,
        description="PAYE paid over to the revenue authority",
    ),
    RuleDefinition(
        "VAT Payments", "SARS VAT", "9800", 9,
        description="VAT paid over to the revenue authority",
    ),
    RuleDefinition(
        "Pension Contributions", "PENSION FUND", "9900", 9,
        description="Employer pension fund contributions",
    ),
    RuleDefinition(
        "Salaries", "SALARY", "8100", 9,
        description="Salary and wage payments",
    ),
    RuleDefinition(
        "Director Remuneration", "DIRECTOR FEE", "8100-001", 9,
        description="Remuneration paid to directors",
    ),
    RuleDefinition(
        "Director Reimbursements", "REIMBURSE", "4000", 9,
        description="Director expense reimbursements booked against loans",
    ),
    RuleDefinition(
        "Loan Repayments", "LOAN REPAYMENT", "4000", 9,
        description="Repayments on long-term loans",
    ),
    RuleDefinition(
        "Staff Loans", "STAFF LOAN", "1000-001", 9,
        description="Loans advanced to staff",
    ),
    RuleDefinition(
        "Loan Received", "IB PAYMENT FROM", "2000-001", 9,
        description="Loans received from directors or associates",
    ),

    # --- Priority 8: common operating items ---
    RuleDefinition(
        "Employee Instant Money", "IB INSTANT MONEY CASH TO", "8100", 8,
        description="E-wallet payments to part-time employees",
    ),
    RuleDefinition(
        "Employee Immediate Payment",
        r"IMMEDIATE PAYMENT \d+ [A-Z]+ [A-Z]+", "8100", 8,
        match_type=MatchType.REGEX,
        description="Immediate payment to a named individual",
    ),
    RuleDefinition(
        "Office Rent", "OFFICE RENT", "8200", 8,
        description="Rent for office premises",
    ),
    RuleDefinition(
        "Rent", "RENTAL", "8200", 8,
        description="Rent for other premises and facilities",
    ),
    RuleDefinition(
        "Electricity", "ELECTRICITY", "8300", 8,
        description="Electricity purchases",
    ),
    RuleDefinition(
        "Municipal Utilities", "MUNICIPAL", "8300", 8,
        description="Municipal water and rates",
    ),
    RuleDefinition(
        "Telephone", "TELEPHONE", "8400", 8,
        description="Telephone and communication",
    ),
    RuleDefinition(
        "Internet", "INTERNET", "8400", 8,
        description="Internet and data services",
    ),
    RuleDefinition(
        "Fuel", "FUEL", "8600-001", 8,
        description="Fuel purchases",
    ),
    RuleDefinition(
        "Fuel Card", r"(ENGEN|SHELL|SASOL|CALTEX|BP )", "8600-001", 8,
        match_type=MatchType.REGEX,
        description="Fuel purchased at branded service stations",
    ),
    RuleDefinition(
        "Vehicle Expenses", "TRANSPORT", "8500", 8,
        description="Transport and vehicle running costs",
    ),
    RuleDefinition(
        "Insurance Premiums", "INSURANCE", "8800", 8,
        description="Business insurance premiums",
    ),
    RuleDefinition(
        "Accounting Fees", "ACCOUNTING", "8700", 8,
        description="Accounting and audit fees",
    ),
    RuleDefinition(
        "Legal Fees", "ATTORNEY", "8700", 8,
        description="Legal fees",
    ),
    RuleDefinition(
        "Training", "TRAINING", "8730", 8,
        description="Training and education costs",
    ),
    RuleDefinition(
        "Recruitment", "RECRUITMENT", "8720", 8,
        description="Recruitment and HR services",
    ),
    RuleDefinition(
        "Software", "SOFTWARE", "9100", 8,
        description="Software subscriptions and licenses",
    ),
    RuleDefinition(
        "Stationery", "STATIONERY", "9000", 8,
        description="Office stationery",
    ),
    RuleDefinition(
        "Advertising", "ADVERTISING", "9200", 8,
        description="Marketing and advertising",
    ),
    RuleDefinition(
        "Repairs", "REPAIRS", "8900", 8,
        description="Repairs and maintenance",
    ),
    RuleDefinition(
        "Customer Payments", "CREDIT TRANSFER", "6100", 8,
        match_type=MatchType.STARTS_WITH,
        description="Customer payments received by credit transfer",
    ),
    RuleDefinition(
        "Customer Deposits", "DEPOSIT", "6000", 8,
        description="Deposits from customers",
    ),

    # --- Priority 5: catch-alls ---
    RuleDefinition(
        "Supplier Payments", "SUPPLIER", "8710", 5,
        description="Payments to suppliers and vendors",
    ),
    RuleDefinition(
        "Internal Transfers", "IB TRANSFER", "1100-001", 5,
        description="Transfers between the organization's own accounts",
    ),
    RuleDefinition(
        "Cash Withdrawals", "CASH WITHDRAWAL", "1000", 5,
        description="Cash drawn for petty cash",
    ),
    RuleDefinition(
        "Returned Debits", "RTD-", "8800", 5,
        match_type=MatchType.STARTS_WITH,
        description="Returned debit orders offset against insurance",
    ),
    RuleDefinition(
        "Bank Fees", "FEE", "9600", 5,
        description="Any other bank fee",
    ),
    RuleDefinition(
        "Service Charges", "SERVICE CHARGE", "9600", 5,
        match_type=MatchType.ENDS_WITH,
        description="Monthly account service charges",
    ),
)
