"""
nfteth.adapter: boundary to the fungible-token and certificate libraries.

The adapter holds no state of its own. It turns custody intents into calls on
the collaborating contracts:

- ``pull_in(token, sender, amount)``    sender -> custody (uses the allowance)
- ``push_out(token, recipient, amount)`` custody -> recipient
- ``mint_certificate(to, id)`` / ``burn_certificate(id)``
- ``owner_of(id)`` -> holder, or ``None`` when the id does not exist

Whatever a collaborator raises propagates unchanged. A transfer primitive that
reports failure by returning ``False`` is turned into
:class:`~nfteth.errors.TransferRejected` so it cannot be silently ignored.
"""

from __future__ import annotations

from typing import Callable, Optional, Protocol, runtime_checkable

from .errors import NoSuchCertificateError, TransferRejected


@runtime_checkable
class FungibleTokenLike(Protocol):
    def balance_of(self, addr: bytes) -> int: ...

    def allowance(self, owner: bytes, spender: bytes) -> int: ...

    def transfer(self, caller: bytes, to: bytes, amount: int) -> bool: ...

    def transfer_from(self, caller: bytes, owner: bytes, to: bytes, amount: int) -> bool: ...


@runtime_checkable
class CertificateRegistryLike(Protocol):
    def mint(self, to: bytes, token_id: int) -> None: ...

    def burn(self, token_id: int) -> None: ...

    def owner_of(self, token_id: int) -> bytes: ...


TokenResolver = Callable[[bytes], FungibleTokenLike]


class AssetTransferAdapter:
    def __init__(self, custody: bytes, certificates: CertificateRegistryLike, resolve_token: TokenResolver) -> None:
        self.custody = bytes(custody)
        self.certificates = certificates
        self._resolve = resolve_token

    def token(self, token: bytes) -> FungibleTokenLike:
        return self._resolve(token)

    # --- reads ---------------------------------------------------------------

    def balance_of(self, token: bytes, holder: bytes) -> int:
        return int(self.token(token).balance_of(holder))

    def allowance(self, token: bytes, holder: bytes) -> int:
        """Allowance ``holder`` granted to the custody contract."""
        return int(self.token(token).allowance(holder, self.custody))

    def held_balance(self, token: bytes) -> int:
        return int(self.token(token).balance_of(self.custody))

    def owner_of(self, certificate_id: int) -> Optional[bytes]:
        try:
            return self.certificates.owner_of(certificate_id)
        except NoSuchCertificateError:
            return None

    # --- transfers -----------------------------------------------------------

    def pull_in(self, token: bytes, sender: bytes, amount: int) -> None:
        ok = self.token(token).transfer_from(self.custody, sender, self.custody, amount)
        if ok is False:
            raise TransferRejected("transfer_from returned false", token=token.hex())

    def push_out(self, token: bytes, recipient: bytes, amount: int) -> None:
        ok = self.token(token).transfer(self.custody, recipient, amount)
        if ok is False:
            raise TransferRejected("transfer returned false", token=token.hex())

    def mint_certificate(self, to: bytes, certificate_id: int) -> None:
        self.certificates.mint(to, certificate_id)

    def burn_certificate(self, certificate_id: int) -> None:
        self.certificates.burn(certificate_id)


__all__ = [
    "AssetTransferAdapter",
    "FungibleTokenLike",
    "CertificateRegistryLike",
    "TokenResolver",
]
