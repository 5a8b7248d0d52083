import threading
from concurrent.futures import ThreadPoolExecutor

import pytest

from utils import code_generator
from utils.code_generator import CODE_ALPHABET, generate_code, generate_unique_code


def test_generate_code_uses_alphabet_and_length():
    code = generate_code()
    assert len(code) == 6
    assert set(code) <= set(CODE_ALPHABET)
    assert code == code.upper()


def test_returns_first_free_code():
    taken = {"AAAAAA"}
    code = generate_unique_code(lambda c: c in taken)
    assert code not in taken
    assert len(code) == 6


def test_widens_after_max_attempts(monkeypatch):
    requested = []

    def fake_generate(length, alphabet):
        requested.append(length)
        return "X" * length

    monkeypatch.setattr(code_generator, "generate_code", fake_generate)
    # Every 3-character code is taken
    code = generate_unique_code(lambda c: len(c) == 3, length=3, max_attempts=4)

    assert code == "XXXX"
    assert requested == [3, 3, 3, 3, 4]


def test_saturated_scope_terminates():
    code = generate_unique_code(lambda c: len(c) < 3, length=1, alphabet="AB", max_attempts=2)
    assert len(code) == 3


@pytest.mark.parametrize("kwargs", [{"length": 0}, {"max_attempts": 0}])
def test_rejects_non_positive_settings(kwargs):
    with pytest.raises(ValueError):
        generate_unique_code(lambda c: False, **kwargs)


def test_concurrent_callers_never_share_a_code():
    # A tiny alphabet forces collisions between threads; the lock stands in
    # for the unique index that rejects the loser of a race.
    taken = set()
    lock = threading.Lock()

    def check_exists(code):
        with lock:
            return code in taken

    def claim():
        while True:
            code = generate_unique_code(check_exists, length=1, alphabet="AB", max_attempts=2)
            with lock:
                if code not in taken:
                    taken.add(code)
                    return code

    with ThreadPoolExecutor(max_workers=8) as pool:
        codes = list(pool.map(lambda _: claim(), range(40)))

    assert len(codes) == len(set(codes)) == 40
    assert any(len(code) > 1 for code in codes)
