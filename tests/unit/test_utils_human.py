import pytest

from ollama_pull.utils.human import duration_units, size_units


@pytest.mark.parametrize(
    ("size", "expected"),
    [(0, "0 B"), (1023, "1023 B"), (1024, "1.000 KiB"), (1536, "1.512 KiB"), (3 * 1024**3, "3.000 GiB")],
)
def test_size_units(size: int, expected: str) -> None:
    assert size_units(size) == expected


@pytest.mark.parametrize(
    ("seconds", "expected"),
    [(5, "5 seconds"), (125, "2 minutes"), (7200, "2 hours"), (3 * 86400, "3 days"), (21 * 86400, "3 weeks")],
)
def test_duration_units(seconds: int, expected: str) -> None:
    assert duration_units(seconds) == expected
