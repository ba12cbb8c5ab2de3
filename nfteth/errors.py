"""
nfteth.errors: typed failures raised by the custody contract.

Every public operation either applies all of its effects or raises one of the
exceptions below with no state change (the journal restores the pre-call
state). Errors carry a short, stable ``code`` (the revert name callers match
on), a human-readable ``message`` and an optional ``context`` mapping that is
kept JSON-friendly for logs and CLI output.

Hierarchy
---------
CustodyError (base)
 ├─ AuthorizationError
 │   ├─ NotAdministratorError  : caller is not the administrator   ("OnlyOwner")
 │   └─ NotHolderError         : caller does not hold the certificate ("OnlyNftOwner")
 ├─ UnacceptedAssetError       : token is not whitelisted          ("UnacceptedToken")
 ├─ InvalidAmountError         : non-positive or out-of-range amount
 ├─ InvalidAddressError        : empty / malformed address
 ├─ InsufficientBalanceError   : depositor balance below amount    ("NotEnoughBalance")
 ├─ InsufficientAllowanceError : allowance to custody below amount ("NotEnoughAllowance")
 ├─ NoSuchCertificateError     : id never minted or already burned ("NonexistentToken")
 └─ InvariantViolationError    : custody balance moved by a different amount than recorded

TokenError (base for failures signalled by token libraries)
 ├─ TransferRejected           : a fungible transfer was refused
 └─ UnknownContractError       : no contract deployed at an address

``TokenError`` is deliberately *not* a ``CustodyError``: collaborator failures
propagate unchanged through the core and must stay distinguishable.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional


@dataclass
class CustodyError(Exception):
    """
    Structured custody failure.

    Attributes:
        code:    stable machine-readable code (e.g. ``"UnacceptedToken"``)
        message: human-readable explanation
        context: extra fields for debugging / CLI output
    """

    code: str
    message: str
    context: Dict[str, Any]

    default_code = "CustodyError"
    default_message = "custody operation failed"

    def __init__(
        self,
        message: Optional[str] = None,
        *,
        code: Optional[str] = None,
        context: Optional[Mapping[str, Any]] = None,
    ) -> None:
        msg = message if message is not None else self.default_message
        super().__init__(msg)
        object.__setattr__(self, "code", code or self.default_code)
        object.__setattr__(self, "message", msg)
        object.__setattr__(self, "context", dict(context or {}))

    def __str__(self) -> str:
        if self.context:
            return f"{self.code}: {self.message} ({self.context})"
        return f"{self.code}: {self.message}"

    def to_dict(self) -> Dict[str, Any]:
        return {"code": self.code, "message": self.message, "context": dict(self.context)}


class AuthorizationError(CustodyError):
    """Wrong caller for a guarded operation. Raised only through a subclass."""

    default_code = "Unauthorized"
    default_message = "caller is not authorized"


class NotAdministratorError(AuthorizationError):
    default_code = "OnlyOwner"
    default_message = "only administrator"


class NotHolderError(AuthorizationError):
    default_code = "OnlyNftOwner"
    default_message = "only certificate holder"


class UnacceptedAssetError(CustodyError):
    default_code = "UnacceptedToken"
    default_message = "token is not accepted for deposit"


class InvalidAmountError(CustodyError):
    default_code = "InvalidAmount"
    default_message = "amount must be a positive integer"


class InvalidAddressError(CustodyError):
    default_code = "InvalidAddress"
    default_message = "address must be non-empty bytes"


class InsufficientBalanceError(CustodyError):
    default_code = "NotEnoughBalance"
    default_message = "balance is lower than the requested amount"


class InsufficientAllowanceError(CustodyError):
    default_code = "NotEnoughAllowance"
    default_message = "allowance is lower than the requested amount"


class NoSuchCertificateError(CustodyError):
    default_code = "NonexistentToken"
    default_message = "invalid token ID"


class InvariantViolationError(CustodyError):
    default_code = "CustodyInvariant"
    default_message = "custody balance does not match the recorded amount"


class TokenError(Exception):
    """Failure signalled by a fungible or non-fungible token library."""

    code = "TokenError"

    def __init__(self, message: str = "token operation failed", **context: Any) -> None:
        super().__init__(message)
        self.message = message
        self.context = context

    def to_dict(self) -> Dict[str, Any]:
        return {"code": self.code, "message": self.message, "context": dict(self.context)}


class TransferRejected(TokenError):
    code = "TransferRejected"


class UnknownContractError(TokenError):
    code = "UnknownContract"


__all__ = [
    "CustodyError",
    "AuthorizationError",
    "NotAdministratorError",
    "NotHolderError",
    "UnacceptedAssetError",
    "InvalidAmountError",
    "InvalidAddressError",
    "InsufficientBalanceError",
    "InsufficientAllowanceError",
    "NoSuchCertificateError",
    "InvariantViolationError",
    "TokenError",
    "TransferRejected",
    "UnknownContractError",
]
