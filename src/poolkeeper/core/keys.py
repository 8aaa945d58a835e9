"""Private key parsing and the in-memory key store."""

import json
import re
from pathlib import Path
from typing import Optional

from eth_account import Account
from eth_account.signers.local import LocalAccount

from poolkeeper.core.exceptions import ValidationError

_HEX_KEY = re.compile(r"^[0-9a-fA-F]{64}$")


def parse_private_key(raw: Optional[str], label: str = "key") -> LocalAccount:
    """
    Parse a secp256k1 private key.

    Accepts 64 hex characters with an optional 0x prefix. Quotes left over
    from copy/paste are stripped.
    """
    key = str(raw or "").strip()
    if len(key) >= 2 and key[0] == key[-1] and key[0] in ("'", '"'):
        key = key[1:-1].strip()
    if key[:2] in ("0x", "0X"):
        key = key[2:]
    if not key:
        raise ValidationError(f"Missing {label}")
    if not _HEX_KEY.match(key):
        raise ValidationError(f"Invalid {label}: expected 64 hex characters")
    return Account.from_key("0x" + key.lower())


class KeyStore:
    """
    Holds the keys the service signs with: the operator key and one
    custodial key per pool. Keys are never persisted by the service.
    """

    def __init__(
        self,
        operator_key: Optional[LocalAccount] = None,
        pool_keys: Optional[dict[str, LocalAccount]] = None,
    ):
        self._operator_key = operator_key
        self._pool_keys = dict(pool_keys or {})

    @classmethod
    def from_settings(cls, settings) -> "KeyStore":
        """Build a key store from settings (operator key + pool secrets file)."""
        operator_key = None
        if settings.operator_key:
            operator_key = parse_private_key(settings.operator_key, "OPERATOR_KEY")
        pool_keys: dict[str, LocalAccount] = {}
        if settings.pool_secrets_path:
            pool_keys = load_pool_secrets(Path(settings.pool_secrets_path))
        return cls(operator_key=operator_key, pool_keys=pool_keys)

    @property
    def operator_key(self) -> LocalAccount:
        if self._operator_key is None:
            raise ValidationError("Missing OPERATOR_KEY. Check the environment or .env file.")
        return self._operator_key

    def pool_key(self, pool_key: str) -> LocalAccount:
        key = self._pool_keys.get(pool_key)
        if key is None:
            raise ValidationError(f"Missing custodial key for pool {pool_key}")
        return key

    def has_pool_key(self, pool_key: str) -> bool:
        return pool_key in self._pool_keys


def load_pool_secrets(path: Path) -> dict[str, LocalAccount]:
    """Load `{"pools": {"<poolKey>": {"poolKeyHex": "..."}}}`."""
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, ValueError) as exc:
        raise ValidationError(f"Missing/invalid pool secrets file: {path} ({exc})") from exc

    keys = {}
    for pool_key, entry in (data.get("pools") or {}).items():
        keys[pool_key] = parse_private_key(entry.get("poolKeyHex"), f"poolKeyHex for {pool_key}")
    return keys
