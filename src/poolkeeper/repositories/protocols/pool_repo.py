"""Pool/token registry repository protocol."""

from typing import Protocol, Optional

from poolkeeper.domain.models import Pool, Token


class PoolRepository(Protocol):
    """Interface for the pool and token registry."""

    def upsert_token(self, token: Token) -> Token:
        """Insert or update a token by symbol."""
        ...

    def get_token(self, symbol: str) -> Optional[Token]:
        """Retrieve a token by symbol."""
        ...

    def list_tokens(self) -> list[Token]:
        """List all tokens, ordered by symbol."""
        ...

    def upsert_pool(self, pool: Pool) -> Pool:
        """Insert or update a pool by key."""
        ...

    def get_pool(self, pool_key: str) -> Optional[Pool]:
        """Retrieve a pool by key."""
        ...

    def list_pools(self) -> list[Pool]:
        """List all pools, ordered by key."""
        ...
