"""SQLAlchemy implementation of PoolRepository."""

from typing import Optional

from sqlalchemy.orm import Session

from poolkeeper.domain.models import Pool, Token
from poolkeeper.repositories.sqlalchemy.orm_models import PoolORM, TokenORM


class SqlAlchemyPoolRepository:
    """SQLAlchemy-backed pool/token registry."""

    def __init__(self, db: Session):
        self._db = db

    def upsert_token(self, token: Token) -> Token:
        """Insert or update a token by symbol."""
        orm_token = self._db.get(TokenORM, token.symbol)
        if orm_token:
            orm_token.token_id = token.token_id
            orm_token.decimals = token.decimals
        else:
            orm_token = TokenORM(
                symbol=token.symbol,
                token_id=token.token_id,
                decimals=token.decimals,
            )
            self._db.add(orm_token)
        self._db.flush()
        return self._token_to_domain(orm_token)

    def get_token(self, symbol: str) -> Optional[Token]:
        """Retrieve a token by symbol."""
        orm_token = self._db.get(TokenORM, symbol)
        return self._token_to_domain(orm_token) if orm_token else None

    def list_tokens(self) -> list[Token]:
        """List all tokens."""
        orm_tokens = self._db.query(TokenORM).order_by(TokenORM.symbol).all()
        return [self._token_to_domain(t) for t in orm_tokens]

    def upsert_pool(self, pool: Pool) -> Pool:
        """Insert or update a pool by key."""
        orm_pool = self._db.get(PoolORM, pool.pool_key)
        if orm_pool:
            orm_pool.pool_account_id = pool.pool_account_id
            orm_pool.token_a_symbol = pool.token_a.symbol
            orm_pool.token_b_symbol = pool.token_b.symbol
            orm_pool.fee_bps = pool.fee_bps
        else:
            orm_pool = PoolORM(
                pool_key=pool.pool_key,
                pool_account_id=pool.pool_account_id,
                token_a_symbol=pool.token_a.symbol,
                token_b_symbol=pool.token_b.symbol,
                fee_bps=pool.fee_bps,
            )
            self._db.add(orm_pool)
        self._db.flush()
        self._db.refresh(orm_pool)
        return self._pool_to_domain(orm_pool)

    def get_pool(self, pool_key: str) -> Optional[Pool]:
        """Retrieve a pool by key."""
        orm_pool = self._db.get(PoolORM, pool_key)
        return self._pool_to_domain(orm_pool) if orm_pool else None

    def list_pools(self) -> list[Pool]:
        """List all pools."""
        orm_pools = self._db.query(PoolORM).order_by(PoolORM.pool_key).all()
        return [self._pool_to_domain(p) for p in orm_pools]

    @staticmethod
    def _token_to_domain(orm: TokenORM) -> Token:
        return Token(symbol=orm.symbol, token_id=orm.token_id, decimals=orm.decimals)

    @classmethod
    def _pool_to_domain(cls, orm: PoolORM) -> Pool:
        return Pool(
            pool_key=orm.pool_key,
            pool_account_id=orm.pool_account_id,
            token_a=cls._token_to_domain(orm.token_a),
            token_b=cls._token_to_domain(orm.token_b),
            fee_bps=orm.fee_bps,
        )
