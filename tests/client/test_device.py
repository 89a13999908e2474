"""Tests for the device store."""

from pathlib import Path

import orjson

from src.client.device import (
    DEVICE_ID_KEY,
    LIKED_COMMENTS_KEY,
    LIKED_POSTS_KEY,
    DeviceStore,
)


class TestDeviceStore:
    def test_device_id_is_generated_once(self, tmp_path: Path):
        path = tmp_path / "device.json"

        first = DeviceStore(path).device_id
        second = DeviceStore(path).device_id

        assert first == second
        assert orjson.loads(path.read_bytes())[DEVICE_ID_KEY] == first

    def test_liked_sets_persist(self, tmp_path: Path):
        path = tmp_path / "device.json"
        store = DeviceStore(path)

        store.liked(LIKED_POSTS_KEY).add("hello-world")
        store.liked(LIKED_COMMENTS_KEY).add("c1")
        store.liked(LIKED_COMMENTS_KEY).add("c1")

        reloaded = DeviceStore(path)
        assert set(reloaded.liked(LIKED_POSTS_KEY)) == {"hello-world"}
        assert len(reloaded.liked(LIKED_COMMENTS_KEY)) == 1

    def test_discard(self, tmp_path: Path):
        path = tmp_path / "device.json"
        liked = DeviceStore(path).liked(LIKED_POSTS_KEY)
        liked.add("a")

        liked.discard("a")
        liked.discard("missing")

        assert "a" not in DeviceStore(path).liked(LIKED_POSTS_KEY)

    def test_corrupt_file_starts_fresh(self, tmp_path: Path):
        path = tmp_path / "device.json"
        path.write_text("{not json")

        store = DeviceStore(path)

        assert store.data == {}
        assert store.device_id
