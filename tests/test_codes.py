import codes
from codes import CONFIRMATION_ALPHABET, generate_confirmation_number, timestamp_id


def test_confirmation_number_format():
    code = generate_confirmation_number()
    assert code.startswith("FD")
    assert len(code) == 8
    assert all(ch in CONFIRMATION_ALPHABET for ch in code[2:])


def test_confirmation_number_avoids_existing(monkeypatch):
    picks = iter("AAAAAA" + "BBBBBB")
    monkeypatch.setattr(codes.random, "choice", lambda alphabet: next(picks))
    assert generate_confirmation_number({"FDAAAAAA"}) == "FDBBBBBB"


def test_timestamp_ids_are_unique_and_prefixed():
    ids = [timestamp_id("pm-") for _ in range(50)]
    assert len(set(ids)) == 50
    assert all(i.startswith("pm-") for i in ids)
    assert int(ids[-1][3:]) > int(ids[0][3:])
