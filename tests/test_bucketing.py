import pytest

from settingeval import bucketing
from settingeval.bucketing import percentage_bucket


def test_known_buckets():
    assert percentage_bucket("percentageSetting", "87625364382") == pytest.approx(1.9945, abs=1e-4)
    assert percentage_bucket("percentageSetting", "87625364385") == pytest.approx(17.6980, abs=1e-4)


def test_bucket_depends_on_setting():
    assert percentage_bucket("otherSetting", "87625364382") == pytest.approx(76.9592, abs=1e-4)


def test_bucket_is_stable_and_in_range():
    for seed in ["", "a", "user-1", "87625364382", "ümlaut"]:
        bucket = percentage_bucket("s", seed)
        assert 0 <= bucket < 100
        assert percentage_bucket("s", seed) == bucket


class _MaxDigest:
    def __init__(self, data):
        pass

    def digest(self):
        return b"\xff" * 20


def test_largest_digest_stays_below_100(monkeypatch):
    monkeypatch.setattr(bucketing, "sha1", _MaxDigest)
    bucket = percentage_bucket("s", "x")
    assert bucket < 100
    assert bucket == pytest.approx(100)
