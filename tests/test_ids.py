import uuid

from microdp_tracker import create_id


def test_create_id_is_uuid4() -> None:
    value = create_id()
    assert uuid.UUID(value).version == 4


def test_fallback_when_no_secure_random_source() -> None:
    def no_urandom() -> uuid.UUID:
        raise NotImplementedError("no os.urandom")

    ids = {create_id(no_urandom) for _ in range(1000)}

    assert len(ids) == 1000
    sample = next(iter(ids))
    prefix, millis, suffix = sample.split("_")
    assert prefix == "evt"
    assert millis.isdigit()
    assert len(suffix) == 16
