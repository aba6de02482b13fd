"""Tests for the board publisher."""

import asyncio

from plex_board.services.config_store import ConfigStore
from plex_board.services.publisher import BoardPublisher
from tests.conftest import FakeTelegramClient


def test_create_persists_message_id(config_store: ConfigStore) -> None:
    telegram = FakeTelegramClient()
    publisher = BoardPublisher(telegram, config_store)

    async def scenario():
        await config_store.set_board_chat(10)
        message_id = await publisher.publish(10, "board", None)
        return message_id, await config_store.get()

    message_id, config = asyncio.run(scenario())

    assert telegram.messages == [(10, "board")]
    assert config.board_message_id == message_id


def test_edit_targets_existing_message(config_store: ConfigStore) -> None:
    telegram = FakeTelegramClient()
    publisher = BoardPublisher(telegram, config_store)

    message_id = asyncio.run(publisher.publish(10, "board", 77))

    assert message_id == 77
    assert telegram.edits == [(10, 77, "board")]
    assert telegram.messages == []


def test_failed_edit_keeps_stale_pointer(config_store: ConfigStore) -> None:
    telegram = FakeTelegramClient(fail_edit=True)
    publisher = BoardPublisher(telegram, config_store)

    async def scenario():
        await config_store.set_board_chat(10)
        await config_store.set_board_message(10, 77)
        result = await publisher.publish(10, "board", 77)
        return result, await config_store.get()

    result, config = asyncio.run(scenario())

    assert result == 77
    assert config.board_message_id == 77
    assert telegram.messages == []


def test_failed_create_is_not_persisted(config_store: ConfigStore) -> None:
    telegram = FakeTelegramClient(fail_send=True)
    publisher = BoardPublisher(telegram, config_store)

    async def scenario():
        await config_store.set_board_chat(10)
        result = await publisher.publish(10, "board", None)
        return result, await config_store.get()

    result, config = asyncio.run(scenario())

    assert result is None
    assert config.board_message_id is None
