import pytest

from app.utils.formatting import format_file_size


@pytest.mark.parametrize(
    "size, expected",
    [
        (0, "0 B"),
        (512, "512 B"),
        (1024, "1 KB"),
        (1536, "1.5 KB"),
        (10 * 1024 * 1024, "10 MB"),
        (3 * 1024 ** 3, "3 GB"),
        (5 * 1024 ** 4, "5120 GB"),
    ],
)
def test_format_file_size(size, expected):
    assert format_file_size(size) == expected
