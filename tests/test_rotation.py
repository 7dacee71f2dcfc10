import threading
from collections import Counter

import pytest

from app.core.exceptions import ConfigurationError
from app.models.destination import Destination
from app.services.rotation import DestinationRotator


def make_destinations(n):
    return [Destination(url=f"https://dest-{i}.test", token=f"t{i}", channel=str(i)) for i in range(n)]


def test_empty_rotation_is_rejected():
    with pytest.raises(ConfigurationError):
        DestinationRotator([])


@pytest.mark.parametrize("n", [1, 2, 5])
def test_sequential_calls_follow_configured_order(n):
    dests = make_destinations(n)
    rotator = DestinationRotator(dests)

    picked = [rotator.next() for _ in range(n)]
    assert picked == dests

    # call N+1 wraps to the first destination
    assert rotator.next() == dests[0]
    assert rotator.cursor == 1 % n


def test_reset():
    dests = make_destinations(3)
    rotator = DestinationRotator(dests)
    rotator.next()
    rotator.next()
    rotator.reset()
    assert rotator.next() == dests[0]


def test_concurrent_selection_is_fair():
    dests = make_destinations(4)
    rotator = DestinationRotator(dests)
    picked = []
    picked_lock = threading.Lock()

    def worker():
        for _ in range(250):
            dest = rotator.next()
            with picked_lock:
                picked.append(dest.url)

    threads = [threading.Thread(target=worker) for _ in range(8)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    counts = Counter(picked)
    assert len(picked) == 2000
    assert set(counts.values()) == {500}
    assert rotator.cursor == 0


def test_destination_repr_hides_token():
    dest = Destination(url="https://dest.test", token="secret-token", channel="1")
    assert "secret-token" not in repr(dest)
