"""
Multi-token transfer transaction envelope.

The body is serialized canonically (sorted-key JSON) so every party signs the
same bytes. Signatures are secp256k1 signatures over the body, keyed by the
signer's address; the ledger maps accounts to those addresses.
"""

import hashlib
import json
from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

from eth_account import Account
from eth_account.messages import encode_defunct
from eth_account.signers.local import LocalAccount
from eth_keys.exceptions import BadSignature, ValidationError as KeyValidationError

from poolkeeper.core.exceptions import ValidationError
from poolkeeper.core.timing import to_epoch_ms, to_utc


@dataclass(frozen=True)
class TokenTransfer:
    """One leg of a transfer: negative amounts debit, positive amounts credit."""

    token_id: str
    account_id: str
    amount: int


@dataclass
class TransferTransaction:
    """Unsigned or partially signed multi-token transfer."""

    transaction_id: str
    payer_account_id: str
    transfers: list[TokenTransfer]
    memo: str = ""
    max_fee: int = 0
    valid_start_ms: int = 0
    valid_duration_s: int = 120
    signatures: dict[str, str] = field(default_factory=dict)

    @classmethod
    def create(
        cls,
        payer_account_id: str,
        valid_start: datetime,
        memo: str = "",
        max_fee: int = 0,
        valid_duration_s: int = 120,
    ) -> "TransferTransaction":
        """Start an empty transfer with id `<payer>@<seconds>.<nanos>`."""
        start = to_utc(valid_start)
        seconds = to_epoch_ms(start) // 1000
        nanos = start.microsecond * 1000
        return cls(
            transaction_id=f"{payer_account_id}@{seconds}.{nanos:09d}",
            payer_account_id=payer_account_id,
            transfers=[],
            memo=memo,
            max_fee=max_fee,
            valid_start_ms=to_epoch_ms(start),
            valid_duration_s=valid_duration_s,
        )

    def add_token_transfer(self, token_id: str, account_id: str, amount: int) -> "TransferTransaction":
        if self.signatures:
            raise ValidationError("Cannot modify a signed transaction")
        self.transfers.append(TokenTransfer(token_id=token_id, account_id=account_id, amount=int(amount)))
        return self

    def move(self, token_id: str, from_account: str, to_account: str, amount: int) -> "TransferTransaction":
        """Add the debit and credit legs for one token movement."""
        self.add_token_transfer(token_id, from_account, -amount)
        self.add_token_transfer(token_id, to_account, amount)
        return self

    @property
    def expires_at_ms(self) -> int:
        return self.valid_start_ms + self.valid_duration_s * 1000

    def net_by_token(self) -> dict[str, int]:
        net: dict[str, int] = {}
        for leg in self.transfers:
            net[leg.token_id] = net.get(leg.token_id, 0) + leg.amount
        return net

    def debited_accounts(self) -> set[str]:
        return {leg.account_id for leg in self.transfers if leg.amount < 0}

    def body(self) -> dict:
        return {
            "transactionId": self.transaction_id,
            "payerAccountId": self.payer_account_id,
            "transfers": [
                {"tokenId": t.token_id, "accountId": t.account_id, "amount": t.amount}
                for t in self.transfers
            ],
            "memo": self.memo,
            "maxFee": self.max_fee,
            "validStartMs": self.valid_start_ms,
            "validDurationS": self.valid_duration_s,
        }

    def body_bytes(self) -> bytes:
        return json.dumps(self.body(), sort_keys=True, separators=(",", ":")).encode("utf-8")

    def body_hash(self) -> str:
        return hashlib.sha256(self.body_bytes()).hexdigest()

    def sign(self, key: LocalAccount) -> "TransferTransaction":
        """Add (or replace) the signature of `key` over the body."""
        signed = key.sign_message(encode_defunct(primitive=self.body_bytes()))
        self.signatures[key.address] = bytes(signed.signature).hex()
        return self

    def signer_addresses(self) -> set[str]:
        """
        Addresses whose signatures verify against the body.

        Raises ValidationError if any signature does not recover to the
        address it is filed under.
        """
        message = encode_defunct(primitive=self.body_bytes())
        verified = set()
        for address, signature in self.signatures.items():
            try:
                recovered = Account.recover_message(message, signature=bytes.fromhex(signature))
            except (ValueError, TypeError, BadSignature, KeyValidationError) as exc:
                raise ValidationError(f"Malformed signature for {address}") from exc
            if recovered.lower() != address.lower():
                raise ValidationError(f"Signature does not match signer {address}")
            verified.add(recovered)
        return verified

    def verify_signatures(self) -> None:
        """Raise ValidationError unless every attached signature verifies."""
        self.signer_addresses()

    def is_signed_by(self, address: Optional[str]) -> bool:
        if not address:
            return False
        return address.lower() in {a.lower() for a in self.signer_addresses()}

    def to_bytes(self) -> bytes:
        envelope = {"body": self.body(), "signatures": dict(sorted(self.signatures.items()))}
        return json.dumps(envelope, sort_keys=True, separators=(",", ":")).encode("utf-8")

    @classmethod
    def from_bytes(cls, data: bytes) -> "TransferTransaction":
        try:
            envelope = json.loads(data.decode("utf-8"))
            body = envelope["body"]
            tx = cls(
                transaction_id=str(body["transactionId"]),
                payer_account_id=str(body["payerAccountId"]),
                transfers=[
                    TokenTransfer(
                        token_id=str(t["tokenId"]),
                        account_id=str(t["accountId"]),
                        amount=int(t["amount"]),
                    )
                    for t in body["transfers"]
                ],
                memo=str(body.get("memo", "")),
                max_fee=int(body.get("maxFee", 0)),
                valid_start_ms=int(body["validStartMs"]),
                valid_duration_s=int(body["validDurationS"]),
                signatures={str(k): str(v) for k, v in (envelope.get("signatures") or {}).items()},
            )
        except (UnicodeDecodeError, ValueError, KeyError, TypeError) as exc:
            raise ValidationError(f"Malformed transaction bytes: {exc}") from exc
        return tx
