import asyncio

from wenlock.services.sequence_service import SequenceCounter


async def test_first_use_starts_at_one_and_increments(session_factory):
    counter = SequenceCounter()
    async with session_factory() as session:
        values = [await counter.next_sequence(session, "PHA") for _ in range(3)]
        await session.commit()
    assert values == [1, 2, 3]


async def test_keys_are_independent(session_factory):
    counter = SequenceCounter()
    async with session_factory() as session:
        assert await counter.next_sequence(session, "PHA") == 1
        assert await counter.next_sequence(session, "CAR") == 1
        assert await counter.next_sequence(session, "PHA") == 2
        await session.commit()


async def test_concurrent_callers_never_share_a_value(session_factory):
    counter = SequenceCounter()

    async def take():
        async with session_factory() as session:
            value = await counter.next_sequence(session, "OPD")
            await session.commit()
            return value

    values = await asyncio.gather(*(take() for _ in range(10)))
    assert sorted(values) == list(range(1, 11))


async def test_uncommitted_increment_is_not_kept(session_factory):
    counter = SequenceCounter()
    async with session_factory() as session:
        await counter.next_sequence(session, "ENT")
        await session.rollback()
    async with session_factory() as session:
        assert await counter.next_sequence(session, "ENT") == 1
        await session.commit()
