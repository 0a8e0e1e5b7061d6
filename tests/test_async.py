import asyncio
import inspect

import pytest

from timetree import Timer


@pytest.mark.asyncio
async def test_async_with_ends_timer() -> None:
    root = Timer("root")

    async with root.split("phase") as phase:
        await asyncio.sleep(0.01)

    assert phase.duration is not None
    assert phase.duration > 0
    assert root.duration is None


@pytest.mark.asyncio
async def test_measure_coroutine_function(ticker) -> None:
    root = Timer("root", clock=ticker.clock)

    @root.measure("fetch")
    async def fetch(x: int) -> int:
        ticker.advance(x)
        await asyncio.sleep(0)
        return x + 1

    assert inspect.iscoroutinefunction(fetch)
    assert await fetch(5) == 6
    assert root.get_sub_timer("fetch").duration == 5


@pytest.mark.asyncio
async def test_overlapping_children() -> None:
    root = Timer("example")
    task = root.split("task3", {"actions": 3})

    async def lookup(item: int) -> str:
        async with task.split(f"item{item}"):
            await asyncio.sleep(0.01 * item)
        return f"Some Data about {item}"

    data = await asyncio.gather(*(lookup(i) for i in (1, 2, 3)))
    task.end()
    root.end()

    assert data == [f"Some Data about {i}" for i in (1, 2, 3)]
    result = root.get_result()
    children = result["timers"][0]["timers"]
    assert [c["name"] for c in children] == ["item1", "item2", "item3"]
    assert all(c["duration"] is not None for c in children)
    assert result["timers"][0]["context"] == {"actions": 3}


@pytest.mark.asyncio
async def test_measure_coroutine_error_ends_child(ticker) -> None:
    root = Timer("root", clock=ticker.clock)

    @root.measure()
    async def fail() -> None:
        ticker.advance(1)
        raise ValueError

    with pytest.raises(ValueError):
        await fail()

    assert root.get_sub_timer("fail").duration == 1


def test_async_context_methods_are_documented() -> None:
    assert Timer.__aenter__.__doc__
    assert Timer.__aexit__.__doc__
