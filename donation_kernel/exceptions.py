"""
Typed Exception Hierarchy for the Donation Kernel.

===============================================================================
WHY TYPED EXCEPTIONS
===============================================================================

Payment webhooks retry. Operators re-trigger calculations by hand. Upstream
code must be able to tell "try again later" from "a human has to fix the
percentage table" without parsing message strings.

Every error here:
  1. Has its own class (catch by type, not message)
  2. Has a CODE class attribute (machine-readable, API-safe)
  3. Has a RETRYABLE class attribute (safe to retry automatically?)
  4. Carries structured attributes instead of only a message

Example - WRONG way to handle errors:
    try:
        service.calculate_for_paid_transaction(tx_id)
    except Exception as e:
        if "not paid" in str(e):  # FRAGILE
            ...

Example - RIGHT way:
    try:
        service.calculate_for_paid_transaction(tx_id)
    except TransactionNotPaidError as e:
        return {"error": e.code, "payment_status": e.payment_status}

===============================================================================
EXCEPTION HIERARCHY
===============================================================================

    DonationKernelError (base)
    |
    +-- TransactionError
    |   +-- TransactionNotFoundError
    |   +-- TransactionNotPaidError
    |
    +-- PostingError
    |   +-- EmptyEntryError
    |   +-- InvalidLineError
    |   +-- UnbalancedEntryError
    |
    +-- AccountError
    |   +-- AccountNotFoundError
    |   +-- AccountInactiveError
    |
    +-- RevenueShareError
    |   +-- DeductionsExceedAmilError
    |   +-- NegativeAmilNetError
    |
    +-- ConfigurationError
    |   +-- InvalidPercentageError
    |
    +-- ConcurrencyError
    |   +-- EntryNumberExhaustedError
    |
    +-- ImmutabilityError
        +-- ImmutabilityViolationError

===============================================================================
ERROR CODES - QUICK REFERENCE
===============================================================================

Category        | Code                        | When Raised
----------------|-----------------------------|-----------------------------------------
Transaction     | TRANSACTION_NOT_FOUND       | Transaction ID doesn't exist
                | TRANSACTION_NOT_PAID        | Payment status is not "paid"
----------------|-----------------------------|-----------------------------------------
Posting         | EMPTY_ENTRY                 | Entry has no lines
                | INVALID_LINE                | Negative debit/credit or blank code
                | UNBALANCED_ENTRY            | Debits != Credits
----------------|-----------------------------|-----------------------------------------
Account         | ACCOUNT_NOT_FOUND           | Account code doesn't exist
                | ACCOUNT_INACTIVE            | Account is deactivated
----------------|-----------------------------|-----------------------------------------
Revenue share   | DEDUCTIONS_EXCEED_AMIL      | developer+fundraiser+mitra % > amil %
                | NEGATIVE_AMIL_NET           | Deductions exceed the amil amount
----------------|-----------------------------|-----------------------------------------
Configuration   | INVALID_PERCENTAGE          | Percentage outside 0..100
----------------|-----------------------------|-----------------------------------------
Concurrency     | ENTRY_NUMBER_EXHAUSTED      | Entry number collisions kept happening
----------------|-----------------------------|-----------------------------------------
Immutability    | IMMUTABILITY_VIOLATION      | Modifying a posted/calculated record

===============================================================================
HANDLING PATTERNS
===============================================================================

1. IDEMPOTENT NO-OPS ARE NOT ERRORS:

    result = service.calculate_for_paid_transaction(tx_id)
    if result.status is CalculationStatus.SKIPPED:
        ...  # wakaf/fidyah, admin-fee entry, zero admin fee

2. RETRY ONLY WHAT IS RETRYABLE:

    except DonationKernelError as e:
        if e.retryable:
            schedule_retry()
        else:
            alert_operator(e.code)  # misconfigured percentages must not loop

===============================================================================
"""


class DonationKernelError(Exception):
    """
    Base exception for all donation kernel errors.

    All subclasses must have a `code` class attribute for machine-readable
    error identification.
    """

    code: str = "DONATION_KERNEL_ERROR"
    retryable: bool = False


# Transaction-related exceptions


class TransactionError(DonationKernelError):
    """Base exception for transaction preconditions."""

    code: str = "TRANSACTION_ERROR"


class TransactionNotFoundError(TransactionError):
    """Transaction with given ID was not found."""

    code: str = "TRANSACTION_NOT_FOUND"

    def __init__(self, transaction_id: str):
        self.transaction_id = transaction_id
        super().__init__(f"Transaction not found: {transaction_id}")


class TransactionNotPaidError(TransactionError):
    """Revenue sharing can only be calculated for paid transactions."""

    code: str = "TRANSACTION_NOT_PAID"

    def __init__(self, transaction_id: str, payment_status: str):
        self.transaction_id = transaction_id
        self.payment_status = payment_status
        super().__init__(
            f"Transaction {transaction_id} is not paid "
            f"(payment_status={payment_status})"
        )


# Posting-related exceptions


class PostingError(DonationKernelError):
    """Base exception for ledger posting errors."""

    code: str = "POSTING_ERROR"


class EmptyEntryError(PostingError):
    """A ledger entry must have at least one line."""

    code: str = "EMPTY_ENTRY"

    def __init__(self, ref_type: str, ref_id: str):
        self.ref_type = ref_type
        self.ref_id = ref_id
        super().__init__(f"Ledger entry for {ref_type} {ref_id} has no lines")


class InvalidLineError(PostingError):
    """A ledger line is malformed."""

    code: str = "INVALID_LINE"

    def __init__(self, line_seq: int, reason: str):
        self.line_seq = line_seq
        self.reason = reason
        super().__init__(f"Invalid ledger line #{line_seq}: {reason}")


class UnbalancedEntryError(PostingError):
    """Ledger entry debits do not equal credits."""

    code: str = "UNBALANCED_ENTRY"

    def __init__(self, debits: int, credits: int):
        self.debits = debits
        self.credits = credits
        super().__init__(
            f"Ledger entry not balanced: debit={debits}, credit={credits}"
        )


# Account-related exceptions


class AccountError(DonationKernelError):
    """Base exception for ledger account errors."""

    code: str = "ACCOUNT_ERROR"


class AccountNotFoundError(AccountError):
    """Ledger account code does not exist."""

    code: str = "ACCOUNT_NOT_FOUND"

    def __init__(self, account_code: str):
        self.account_code = account_code
        super().__init__(f"Ledger account not found: {account_code}")


class AccountInactiveError(AccountError):
    """Ledger account is not active for posting."""

    code: str = "ACCOUNT_INACTIVE"

    def __init__(self, account_code: str):
        self.account_code = account_code
        super().__init__(f"Ledger account is inactive: {account_code}")


# Revenue share exceptions


class RevenueShareError(DonationKernelError):
    """Base exception for revenue share calculation errors."""

    code: str = "REVENUE_SHARE_ERROR"


class DeductionsExceedAmilError(RevenueShareError):
    """Developer, fundraiser and mitra percentages exceed the amil percentage."""

    code: str = "DEDUCTIONS_EXCEED_AMIL"

    def __init__(self, transaction_id: str, deduction_percentage: str, amil_percentage: str):
        self.transaction_id = transaction_id
        self.deduction_percentage = deduction_percentage
        self.amil_percentage = amil_percentage
        super().__init__(
            f"Total deductions {deduction_percentage}% exceed amil share "
            f"{amil_percentage}% for transaction {transaction_id}"
        )


class NegativeAmilNetError(RevenueShareError):
    """Deduction amounts exceed the amil amount."""

    code: str = "NEGATIVE_AMIL_NET"

    def __init__(self, transaction_id: str, amil_total_amount: int, amil_net_amount: int):
        self.transaction_id = transaction_id
        self.amil_total_amount = amil_total_amount
        self.amil_net_amount = amil_net_amount
        super().__init__(
            f"Deductions exceed the amil amount for transaction {transaction_id}: "
            f"amil_total={amil_total_amount}, amil_net={amil_net_amount}"
        )


# Configuration exceptions


class ConfigurationError(DonationKernelError):
    """Base exception for configuration errors."""

    code: str = "CONFIGURATION_ERROR"


class InvalidPercentageError(ConfigurationError):
    """A configured percentage is outside 0..100."""

    code: str = "INVALID_PERCENTAGE"

    def __init__(self, key: str, value: str):
        self.key = key
        self.value = value
        super().__init__(f"Setting {key} must be between 0 and 100, got {value}")


# Concurrency exceptions


class ConcurrencyError(DonationKernelError):
    """Base exception for concurrency-related errors."""

    code: str = "CONCURRENCY_ERROR"
    retryable: bool = True


class EntryNumberExhaustedError(ConcurrencyError):
    """Could not allocate a unique entry number."""

    code: str = "ENTRY_NUMBER_EXHAUSTED"

    def __init__(self, attempts: int):
        self.attempts = attempts
        super().__init__(
            f"Could not allocate a unique ledger entry number after {attempts} attempts"
        )


# Immutability exceptions


class ImmutabilityError(DonationKernelError):
    """Base exception for immutability-related errors."""

    code: str = "IMMUTABILITY_ERROR"


class ImmutabilityViolationError(ImmutabilityError):
    """
    Attempted to modify or delete an immutable record.

    LedgerEntry, LedgerLine and RevenueShare rows are write-once.
    """

    code: str = "IMMUTABILITY_VIOLATION"

    def __init__(self, entity_type: str, entity_id: str, reason: str):
        self.entity_type = entity_type
        self.entity_id = entity_id
        self.reason = reason
        super().__init__(
            f"Immutability violation on {entity_type} {entity_id}: {reason}"
        )
