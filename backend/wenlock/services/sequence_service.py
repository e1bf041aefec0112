from sqlalchemy.ext.asyncio import AsyncSession

from wenlock.database import upsert
from wenlock.models.counter import Counter


class SequenceCounter:
    """
    Monotonic per-key counter.

    next_sequence() is one INSERT ... ON CONFLICT DO UPDATE ... RETURNING
    statement, so the row is created at 1 on first use and concurrent callers
    for the same key can never observe the same value. There is no decrement.
    The caller owns the transaction.
    """

    async def next_sequence(self, db: AsyncSession, key: str) -> int:
        stmt = (
            upsert(db, Counter)
            .values(key=key, seq=1)
            .on_conflict_do_update(index_elements=[Counter.key], set_={"seq": Counter.seq + 1})
            .returning(Counter.seq)
        )
        result = await db.execute(stmt)
        return result.scalar_one()
