"""
Standard chart of accounts.

This is the authoritative list of account categories and accounts
created for every organization. Codes are partitioned by range:

    1000-2999  assets
    3000-4999  liabilities
    5000-5999  equity
    6000-7999  revenue and other income
    8000-9999  expenses

Every sub-account the classifier may ever target is enumerated
here. Classification only looks accounts up; it never creates them.
"""

from dataclasses import dataclass

from bookkeeping.models.enums import AccountType, BalanceSide, NORMAL_BALANCE


@dataclass(frozen=True)
class CategoryDefinition:
    key: str
    name: str
    account_type: AccountType

    @property
    def normal_balance(self) -> BalanceSide:
        return NORMAL_BALANCE[self.account_type]


@dataclass(frozen=True)
class AccountDefinition:
    code: str
    name: str
    description: str
    category_key: str
    is_bank_account: bool = False


CATEGORIES: tuple[CategoryDefinition, ...] = (
    CategoryDefinition("CURRENT_ASSETS", "Current Assets", AccountType.ASSET),
    CategoryDefinition("NON_CURRENT_ASSETS", "Non-Current Assets", AccountType.ASSET),
    CategoryDefinition("CURRENT_LIABILITIES", "Current Liabilities", AccountType.LIABILITY),
    CategoryDefinition("NON_CURRENT_LIABILITIES", "Non-Current Liabilities", AccountType.LIABILITY),
    CategoryDefinition("EQUITY", "Owner's Equity", AccountType.EQUITY),
    CategoryDefinition("OPERATING_REVENUE", "Operating Revenue", AccountType.REVENUE),
    CategoryDefinition("OTHER_INCOME", "Other Income", AccountType.REVENUE),
    CategoryDefinition("OPERATING_EXPENSES", "Operating Expenses", AccountType.EXPENSE),
    CategoryDefinition("ADMINISTRATIVE_EXPENSES", "Administrative Expenses", AccountType.EXPENSE),
    CategoryDefinition("FINANCE_COSTS", "Finance Costs", AccountType.EXPENSE),
)


ACCOUNTS: tuple[AccountDefinition, ...] = (
    # Current assets
    AccountDefinition("1000", "Petty Cash", "Cash on hand for small expenses", "CURRENT_ASSETS"),
    AccountDefinition("1000-001", "Loans Receivable - Staff", "Loans advanced to employees", "CURRENT_ASSETS"),
    AccountDefinition("1000-002", "Loans Receivable - Other", "Other loan receivables", "CURRENT_ASSETS"),
    AccountDefinition("1100", "Bank - Current Account", "Primary business current account", "CURRENT_ASSETS", is_bank_account=True),
    AccountDefinition("1100-001", "Bank Transfers", "Internal transfers between own accounts", "CURRENT_ASSETS"),
    AccountDefinition("1101", "Bank - Savings Account", "Business savings account", "CURRENT_ASSETS", is_bank_account=True),
    AccountDefinition("1102", "Bank - Foreign Currency", "Foreign currency accounts", "CURRENT_ASSETS", is_bank_account=True),
    AccountDefinition("1200", "Accounts Receivable", "Money owed by customers", "CURRENT_ASSETS"),
    AccountDefinition("1300", "Inventory", "Stock and inventory items", "CURRENT_ASSETS"),
    AccountDefinition("1400", "Prepaid Expenses", "Expenses paid in advance", "CURRENT_ASSETS"),
    AccountDefinition("1500", "VAT Input", "VAT paid on purchases", "CURRENT_ASSETS"),
    # Non-current assets
    AccountDefinition("2000", "Property, Plant & Equipment", "Fixed assets at cost", "NON_CURRENT_ASSETS"),
    AccountDefinition("2000-001", "Director Loan Account", "Amounts advanced to directors", "NON_CURRENT_ASSETS"),
    AccountDefinition("2100", "Accumulated Depreciation", "Depreciation of fixed assets", "NON_CURRENT_ASSETS"),
    AccountDefinition("2200", "Investments", "Long-term investments", "NON_CURRENT_ASSETS"),
    # Current liabilities
    AccountDefinition("3000", "Accounts Payable", "Money owed to suppliers", "CURRENT_LIABILITIES"),
    AccountDefinition("3100", "VAT Output", "VAT collected on sales", "CURRENT_LIABILITIES"),
    AccountDefinition("3200", "PAYE Payable", "Employee income tax withheld", "CURRENT_LIABILITIES"),
    AccountDefinition("3300", "UIF Payable", "Unemployment insurance contributions payable", "CURRENT_LIABILITIES"),
    AccountDefinition("3400", "SDL Payable", "Skills development levy payable", "CURRENT_LIABILITIES"),
    AccountDefinition("3500", "Accrued Expenses", "Expenses incurred but not yet paid", "CURRENT_LIABILITIES"),
    # Non-current liabilities
    AccountDefinition("4000", "Long-term Loans", "Long-term debt obligations", "NON_CURRENT_LIABILITIES"),
    # Equity
    AccountDefinition("5000", "Share Capital", "Issued share capital", "EQUITY"),
    AccountDefinition("5100", "Retained Earnings", "Accumulated profits", "EQUITY"),
    AccountDefinition("5200", "Current Year Earnings", "Current year profit or loss", "EQUITY"),
    AccountDefinition("5300", "Opening Balance Equity", "Counterpart of derived bank opening balances", "EQUITY"),
    # Operating revenue
    AccountDefinition("6000", "Sales Revenue", "Revenue from sales", "OPERATING_REVENUE"),
    AccountDefinition("6100", "Service Revenue", "Revenue from services", "OPERATING_REVENUE"),
    AccountDefinition("6200", "Other Operating Revenue", "Other operating income", "OPERATING_REVENUE"),
    # Other income
    AccountDefinition("7000", "Interest Income", "Interest earned on balances and investments", "OTHER_INCOME"),
    AccountDefinition("7100", "Dividend Income", "Dividends received", "OTHER_INCOME"),
    AccountDefinition("7200", "Gain on Asset Disposal", "Profit from asset sales", "OTHER_INCOME"),
    # Operating expenses
    AccountDefinition("8000", "Cost of Goods Sold", "Direct costs of products sold", "OPERATING_EXPENSES"),
    AccountDefinition("8100", "Employee Costs", "Salaries, wages and benefits", "OPERATING_EXPENSES"),
    AccountDefinition("8100-001", "Director Remuneration", "Director remuneration", "OPERATING_EXPENSES"),
    AccountDefinition("8200", "Rent Expense", "Office and facility rent", "OPERATING_EXPENSES"),
    AccountDefinition("8300", "Utilities", "Electricity, water and gas", "OPERATING_EXPENSES"),
    AccountDefinition("8400", "Communication", "Telephone, internet and postage", "OPERATING_EXPENSES"),
    AccountDefinition("8500", "Motor Vehicle Expenses", "Vehicle running costs", "OPERATING_EXPENSES"),
    AccountDefinition("8500-001", "Vehicle Tracking", "Vehicle tracking service fees", "OPERATING_EXPENSES"),
    AccountDefinition("8600", "Travel & Entertainment", "Business travel and entertainment", "OPERATING_EXPENSES"),
    AccountDefinition("8600-001", "Fuel Expenses", "Fuel purchases", "OPERATING_EXPENSES"),
    AccountDefinition("8700", "Professional Services", "Legal, accounting and consulting", "OPERATING_EXPENSES"),
    AccountDefinition("8710", "Suppliers Expense", "Payments to suppliers and vendors", "OPERATING_EXPENSES"),
    AccountDefinition("8720", "HR Management Expense", "Human resources and recruitment", "OPERATING_EXPENSES"),
    AccountDefinition("8730", "Education & Training", "Education fees and training costs", "OPERATING_EXPENSES"),
    AccountDefinition("8800", "Insurance", "Business insurance premiums", "OPERATING_EXPENSES"),
    AccountDefinition("8900", "Repairs & Maintenance", "Equipment and facility maintenance", "OPERATING_EXPENSES"),
    # Administrative expenses
    AccountDefinition("9000", "Office Supplies", "Stationery and office materials", "ADMINISTRATIVE_EXPENSES"),
    AccountDefinition("9100", "Computer Expenses", "Software licenses and IT costs", "ADMINISTRATIVE_EXPENSES"),
    AccountDefinition("9200", "Marketing & Advertising", "Promotional and marketing costs", "ADMINISTRATIVE_EXPENSES"),
    AccountDefinition("9400", "Depreciation", "Depreciation of fixed assets", "ADMINISTRATIVE_EXPENSES"),
    # Finance costs
    AccountDefinition("9500", "Interest Expense", "Interest on loans and overdrafts", "FINANCE_COSTS"),
    AccountDefinition("9600", "Bank Charges", "Bank fees and transaction costs", "FINANCE_COSTS"),
    AccountDefinition("9700", "Foreign Exchange Loss", "Loss on currency conversion", "FINANCE_COSTS"),
    AccountDefinition("9800", "VAT Payments", "VAT paid over to the revenue authority", "FINANCE_COSTS"),
    AccountDefinition("9820", "PAYE Expense", "PAYE paid over to the revenue authority", "FINANCE_COSTS"),
    AccountDefinition("9900", "Pension Expenses", "Pension fund contributions", "FINANCE_COSTS"),
)


def category_for(key: str) -> CategoryDefinition:
    for category in CATEGORIES:
        if category.key == key:
            return category
    raise KeyError(key)


def account_codes() -> set[str]:
    return {account.code for account in ACCOUNTS}


def bank_account_codes() -> set[str]:
    """Codes an organization may designate as its bank account."""
    return {account.code for account in ACCOUNTS if account.is_bank_account}
