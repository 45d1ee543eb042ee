class LedgerError(Exception):
    """Base class for a transaction that could not be applied to an account."""


class MissingAmountError(LedgerError):
    pass


class AccountLockedError(LedgerError):
    pass


class InsufficientFundsError(LedgerError):
    pass


class UnknownDepositError(LedgerError):
    pass


class UnknownDisputeError(LedgerError):
    pass


class WrongClientError(LedgerError):
    pass


class NotADepositError(LedgerError):
    pass


class NotADisputeError(LedgerError):
    pass
