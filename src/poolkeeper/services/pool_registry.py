"""Pool and token registry."""

import json
import logging
from pathlib import Path

from sqlalchemy.orm import Session

from poolkeeper.core.exceptions import IntegrityError, ValidationError
from poolkeeper.domain.models import Pool, SwapDirection, Token
from poolkeeper.repositories.protocols import PoolRepository
from poolkeeper.repositories.sqlalchemy.database import atomic

logger = logging.getLogger(__name__)


class PoolRegistryService:
    """
    Service for the pools this instance serves and their tokens.

    The registry is loaded from a JSON deployment file:

        {"tokens": {"hUSD": {"tokenId": "0.0.1001", "decimals": 6}, ...},
         "pools": [{"poolKey": "hUSD-hEUR", "poolAccountId": "0.0.2001",
                    "tokenA": "hUSD", "tokenB": "hEUR", "feeBps": 30}]}
    """

    def __init__(
        self,
        pool_repo: PoolRepository,
        session: Session,
        default_fee_bps: int = 30,
        default_token_decimals: int = 6,
    ):
        self._repo = pool_repo
        self._session = session
        self._default_fee_bps = default_fee_bps
        self._default_decimals = default_token_decimals

    def load_registry(self, path: Path) -> list[Pool]:
        """Load a registry file. Raises ValidationError for unreadable files."""
        try:
            data = json.loads(Path(path).read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            raise ValidationError(f"Cannot read registry {path}: {e}") from e
        return self.load_registry_data(data)

    def load_registry_data(self, data: dict) -> list[Pool]:
        """
        Upsert tokens and pools from a registry document.

        A pool's token pair is fixed: reloading a known pool with a different
        pair raises IntegrityError and nothing from the document is stored.
        """
        if not isinstance(data, dict):
            raise ValidationError("Registry must be a JSON object")

        tokens: dict[str, Token] = {}
        for symbol, info in (data.get("tokens") or {}).items():
            info = info or {}
            token_id = str(info.get("tokenId") or "").strip()
            if not token_id:
                raise ValidationError(f"Token {symbol} has no tokenId")
            tokens[symbol] = Token(
                symbol=symbol,
                token_id=token_id,
                decimals=int(info.get("decimals", self._default_decimals)),
            )

        pools: list[Pool] = []
        for raw in data.get("pools") or []:
            pools.append(self._parse_pool(raw, tokens))

        with atomic(self._session):
            for token in tokens.values():
                self._repo.upsert_token(token)
            for pool in pools:
                existing = self._repo.get_pool(pool.pool_key)
                if existing is not None and (
                    existing.token_a.symbol != pool.token_a.symbol
                    or existing.token_b.symbol != pool.token_b.symbol
                ):
                    raise IntegrityError(
                        f"Pool {pool.pool_key} is registered for "
                        f"{existing.token_a.symbol}/{existing.token_b.symbol}, "
                        f"cannot change to {pool.token_a.symbol}/{pool.token_b.symbol}"
                    )
                self._repo.upsert_pool(pool)

        logger.info("Registry loaded: %s token(s), %s pool(s)", len(tokens), len(pools))
        return self.list_pools()

    def _parse_pool(self, raw: dict, tokens: dict[str, Token]) -> Pool:
        pool_key = str(raw.get("poolKey") or "").strip()
        if not pool_key:
            raise ValidationError("Registry pool without poolKey")
        symbol_a = raw.get("tokenA")
        symbol_b = raw.get("tokenB")
        if symbol_a == symbol_b:
            raise ValidationError(f"Pool {pool_key} needs two different tokens")
        token_a = tokens.get(symbol_a) or self._repo.get_token(symbol_a)
        token_b = tokens.get(symbol_b) or self._repo.get_token(symbol_b)
        if token_a is None or token_b is None:
            raise ValidationError(f"Pool {pool_key} references an unknown token")
        fee_bps = int(raw.get("feeBps", self._default_fee_bps))
        if not 0 <= fee_bps <= 10_000:
            raise ValidationError(f"Pool {pool_key} fee must be within 0..10000 bps")
        account_id = str(raw.get("poolAccountId") or "").strip()
        if not account_id:
            raise ValidationError(f"Pool {pool_key} has no poolAccountId")
        return Pool(
            pool_key=pool_key,
            pool_account_id=account_id,
            token_a=token_a,
            token_b=token_b,
            fee_bps=fee_bps,
        )

    def list_pools(self) -> list[Pool]:
        return self._repo.list_pools()

    def get_pool(self, pool_key: str) -> Pool:
        """Get a pool by key. Unknown keys are a validation error."""
        if not pool_key:
            raise ValidationError("Missing pool key")
        pool = self._repo.get_pool(pool_key)
        if pool is None:
            raise ValidationError(f"Unknown pool: {pool_key}")
        return pool

    def list_tokens(self) -> list[Token]:
        return self._repo.list_tokens()

    def resolve_direction(self, pool: Pool, from_symbol: str, to_symbol: str) -> SwapDirection:
        direction = pool.direction(from_symbol, to_symbol)
        if direction is None:
            raise ValidationError(
                f"Unsupported pair {from_symbol}->{to_symbol} for pool {pool.pool_key}"
            )
        return direction
