import asyncio

from attendance_engine.locks import KeyedLock


def test_same_key_is_serialized():
    locks = KeyedLock()
    trace = []

    async def worker(name):
        async with locks.hold("k"):
            trace.append(f"{name}-in")
            await asyncio.sleep(0.01)
            trace.append(f"{name}-out")

    async def scenario():
        await asyncio.gather(worker("a"), worker("b"))

    asyncio.run(scenario())
    assert trace == ["a-in", "a-out", "b-in", "b-out"]
    assert len(locks) == 0


def test_different_keys_run_concurrently():
    locks = KeyedLock()
    inside = []

    async def worker(key):
        async with locks.hold(key):
            inside.append(key)
            await asyncio.sleep(0.01)
            assert locks.locked(key)
            return len(inside)

    async def scenario():
        return await asyncio.gather(worker("x"), worker("y"))

    counts = asyncio.run(scenario())
    assert counts == [2, 2]
    assert not locks.locked("x")
