from __future__ import annotations


class WalletAgentError(Exception):
    def __init__(self, message: str, error_code: str | None = None) -> None:
        self.message = message
        self.error_code = error_code or self.__class__.__name__
        super().__init__(self.message)


class InvalidInputError(WalletAgentError):
    def __init__(self, message: str, field: str | None = None) -> None:
        error_code = f"INVALID_INPUT_{field.upper()}" if field else "INVALID_INPUT"
        super().__init__(message=message, error_code=error_code)
        self.field = field


class NoEligibleMethodError(WalletAgentError):
    def __init__(self, message: str = "No eligible payment method to recommend") -> None:
        super().__init__(message=message, error_code="NO_ELIGIBLE_METHOD")


class CatalogFormatError(WalletAgentError):
    def __init__(self, message: str) -> None:
        super().__init__(message=message, error_code="CATALOG_FORMAT")
