import asyncio
import json

from fks_client.core.errors import WebSocketError
from fks_client.repositories import SignalRepository
from fks_client.viewmodels.websocket import WebSocketViewModel


class _BrokenStream:
    """Signal repository whose stream fails after the given messages"""

    def __init__(self, messages, error):
        self.messages = messages
        self.error = error

    async def connect_signal_stream(self):
        for message in self.messages:
            yield message
        raise self.error


class _EndlessStream:
    def __init__(self):
        self.opened = 0

    async def connect_signal_stream(self):
        self.opened += 1
        while True:
            await asyncio.sleep(3600)
            yield "never"


async def _drain(view_model):
    await view_model.connect()
    await view_model.task


def test_buffer_keeps_latest_signals(fake_client, make_signal):
    fake_client.ws_messages = [json.dumps(make_signal(f"S{i}")) for i in range(60)]
    view_model = WebSocketViewModel(SignalRepository(fake_client))

    asyncio.run(_drain(view_model))
    state = view_model.current
    assert view_model.get_update_count() == 50
    assert state.signal_updates[0].symbol == "S10"
    assert state.signal_updates[-1].symbol == "S59"
    assert state.latest_signal.symbol == "S59"
    # stream ended normally
    assert not state.is_connected
    assert state.error is None


def test_custom_buffer_size(fake_client, make_signal):
    fake_client.ws_messages = [json.dumps(make_signal(f"S{i}")) for i in range(5)]
    view_model = WebSocketViewModel(SignalRepository(fake_client), buffer_size=2)

    asyncio.run(_drain(view_model))
    assert [s.symbol for s in view_model.current.signal_updates] == ["S3", "S4"]


def test_unparsable_message_keeps_stream_open(fake_client, make_signal):
    fake_client.ws_messages = [
        json.dumps(make_signal("A")),
        "{not json",
        json.dumps({"type": "heartbeat"}),
        json.dumps(make_signal("B")),
    ]
    view_model = WebSocketViewModel(SignalRepository(fake_client))
    errors = []
    view_model.state.subscribe(lambda s: errors.append(s.error) if s.error else None)

    asyncio.run(_drain(view_model))
    assert [s.symbol for s in view_model.current.signal_updates] == ["A", "B"]
    assert errors and all(e.startswith("Failed to parse") for e in errors)


def test_stream_error_disconnects(make_signal):
    repo = _BrokenStream([json.dumps(make_signal("A"))], WebSocketError("connection reset"))
    view_model = WebSocketViewModel(repo)

    asyncio.run(_drain(view_model))
    state = view_model.current
    assert not state.is_connected
    assert state.error == "WebSocket error: connection reset"
    assert state.latest_signal.symbol == "A"


def test_connect_twice_is_noop_and_disconnect_cancels():
    repo = _EndlessStream()
    view_model = WebSocketViewModel(repo)

    async def scenario():
        first = await view_model.connect()
        second = await view_model.connect()
        await asyncio.sleep(0)
        task = view_model.task
        await view_model.disconnect()
        return first, second, task

    first, second, task = asyncio.run(scenario())
    assert first is True
    assert second is False
    assert repo.opened == 1
    assert task.cancelled()
    assert view_model.task is None
    assert not view_model.current.is_connected


def test_clear_updates(fake_client, make_signal):
    fake_client.ws_messages = [json.dumps(make_signal())]
    view_model = WebSocketViewModel(SignalRepository(fake_client))
    asyncio.run(_drain(view_model))

    view_model.clear_updates()
    assert view_model.get_update_count() == 0
    assert view_model.current.latest_signal is None
