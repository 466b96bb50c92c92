"""
Concurrency tests.

Requests are driven through httpx's ASGI transport inside the test's event
loop, so handlers of concurrent requests can rendezvous with each other.
"""

import asyncio
import textwrap
import threading

import httpx
import pytest

from blockapi.config.provider import DEFAULT_ENDPOINTS_DIR
from blockapi.main import create_app

pytestmark = pytest.mark.integration


@pytest.fixture
def asgi_app(config_provider):
    return create_app(config_provider)


def async_client(app) -> httpx.AsyncClient:
    return httpx.AsyncClient(transport=httpx.ASGITransport(app=app), base_url="http://test")


@pytest.mark.asyncio
async def test_requests_to_different_opcodes_overlap(asgi_app, make_definition):
    """Each handler waits for the other to start; sequential dispatch would time out."""
    registry = asgi_app.state.services.registry
    first_started = asyncio.Event()
    second_started = asyncio.Event()
    timeline = []

    async def first(context):
        timeline.append("first:start")
        first_started.set()
        await second_started.wait()
        timeline.append("first:end")
        return "first"

    async def second(context):
        timeline.append("second:start")
        second_started.set()
        await first_started.wait()
        timeline.append("second:end")
        return "second"

    registry.upsert("first", make_definition("first", handler=first))
    registry.upsert("second", make_definition("second", handler=second))

    async with async_client(asgi_app) as client:
        responses = await asyncio.wait_for(
            asyncio.gather(client.get("/first"), client.get("/second")),
            timeout=5,
        )

    assert [response.json() for response in responses] == ["first", "second"]
    # Both handlers started before either finished
    assert timeline.index("second:start") < timeline.index("first:end")
    assert timeline.index("first:start") < timeline.index("second:end")


@pytest.mark.asyncio
async def test_blocking_sync_handlers_overlap(asgi_app, make_definition):
    """Both sync handlers must be inside the barrier at once or it breaks."""
    registry = asgi_app.state.services.registry
    barrier = threading.Barrier(2, timeout=5)
    threads = []

    def blocking(context):
        threads.append(threading.current_thread())
        barrier.wait()
        return context.opcode

    registry.upsert("left", make_definition("left", handler=blocking))
    registry.upsert("right", make_definition("right", handler=blocking))

    async with async_client(asgi_app) as client:
        responses = await asyncio.wait_for(
            asyncio.gather(client.get("/left"), client.get("/right")),
            timeout=10,
        )

    assert [response.json() for response in responses] == ["left", "right"]
    assert threading.main_thread() not in threads


@pytest.mark.asyncio
async def test_blocked_handler_does_not_stall_others(asgi_app, make_definition):
    registry = asgi_app.state.services.registry
    release = threading.Event()

    def stuck(context):
        release.wait(timeout=5)
        return "released"

    registry.upsert("stuck", make_definition("stuck", handler=stuck))
    registry.upsert("quick", make_definition("quick", handler=lambda context: "quick"))

    async with async_client(asgi_app) as client:
        pending = asyncio.ensure_future(client.get("/stuck"))
        try:
            quick = await asyncio.wait_for(client.get("/quick"), timeout=3)
            assert quick.json() == "quick"
            assert not pending.done()
        finally:
            release.set()
        assert (await pending).json() == "released"


@pytest.mark.asyncio
async def test_concurrent_hot_registrations(asgi_app):
    loader = asgi_app.state.services.loader
    registry = asgi_app.state.services.registry

    def source(index):
        return textwrap.dedent(f"""
            from blockapi.modules.capability import Block, Capability

            endpoint = Capability(
                block=Block(opcode="concurrent{index}", kind="reporter", text="concurrent {index}"),
                handler=lambda context: {index},
                auth_required=False,
            )
        """)

    results = await asyncio.gather(*(loader.register_source(source(index)) for index in range(5)))

    assert all(result.success for result in results)
    assert {f"concurrent{index}" for index in range(5)} <= {definition.opcode for definition in registry.list()}

    async with async_client(asgi_app) as client:
        for index in range(5):
            assert (await client.get(f"/concurrent{index}")).json() == index


@pytest.mark.asyncio
async def test_registration_during_traffic(asgi_app, make_definition, admin_token):
    """Requests keep being served while new endpoints are registered."""
    services = asgi_app.state.services
    registry = services.registry
    await registry.load_from_directory(DEFAULT_ENDPOINTS_DIR, services.loader)
    registry.upsert("steady", make_definition("steady", handler=lambda context: "ok"))
    headers = {"Authorization": f"Bearer {admin_token}"}

    new_source = textwrap.dedent("""
        from blockapi.modules.capability import Block, Capability

        late = Capability(
            block=Block(opcode="late", kind="reporter", text="late"),
            handler=lambda context: "late",
            auth_required=False,
        )
    """)

    async with async_client(asgi_app) as client:
        traffic = [client.get("/steady") for _ in range(10)]
        registration = client.post("/registerEndpoint", json={"source": new_source}, headers=headers)
        *responses, registered = await asyncio.gather(*traffic, registration)

        assert all(response.json() == "ok" for response in responses)
        assert registered.json()["success"] is True
        assert (await client.get("/late")).json() == "late"
