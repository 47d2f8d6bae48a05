from __future__ import annotations

from pathlib import Path

import pytest

from statusbar.cache_store import CacheStore
from statusbar.gateway.time.fake import FakeTime


@pytest.fixture
def fake_time() -> FakeTime:
    return FakeTime()


@pytest.fixture
def cache(tmp_path: Path, fake_time: FakeTime) -> CacheStore:
    return CacheStore(root=tmp_path / "common" / "statusbar", time=fake_time)
