import pytest

from loaderkit.services.version_filter import (
    filter_compatible,
    is_compatible,
    is_stable_version,
    parse_base_version,
    parse_loader_version,
)


@pytest.mark.parametrize(
    "base, expected",
    [
        ("1.21.1", (21, 1)),
        ("1.21", (21, 0)),
        ("1.20.6", (20, 6)),
        ("24w14a", None),
        ("", None),
    ],
)
def test_parse_base_version(base, expected):
    assert parse_base_version(base) == expected


def test_parse_loader_version():
    assert parse_loader_version("21.1.72") == (21, 1, 72)
    assert parse_loader_version("20.6.119-beta") == (20, 6, 119)
    assert parse_loader_version("snapshot") is None


def test_filter_keeps_exact_major_minor_newest_first():
    pool = ["20.4.237", "21.0.167", "21.1.71", "21.1.72"]

    assert filter_compatible("1.21.1", pool) == ["21.1.72", "21.1.71"]


def test_build_numbers_sort_numerically():
    pool = ["21.1.9", "21.1.100", "21.1.10"]

    assert filter_compatible("1.21.1", pool) == ["21.1.100", "21.1.10", "21.1.9"]


def test_no_nearest_version_fallback():
    assert filter_compatible("1.21.2", ["21.1.72", "21.3.1"]) == []
    assert filter_compatible("24w14a", ["21.1.72"]) == []


def test_filtered_versions_share_major_and_minor():
    pool = ["20.2.86", "20.4.237", "20.4.80-beta", "21.0.167", "21.1.1", "21.1.72", "21.10.3"]

    for base in ("1.20.2", "1.20.4", "1.21", "1.21.1", "1.21.10"):
        major, minor = parse_base_version(base)
        result = filter_compatible(base, pool)
        assert result
        for version in result:
            assert parse_loader_version(version)[:2] == (major, minor)
            assert is_compatible(base, version)


def test_stability_markers():
    assert is_stable_version("21.1.72")
    assert not is_stable_version("20.6.119-beta")
    assert not is_stable_version("21.2.0-ALPHA")


def test_beta_from_other_line_is_excluded():
    pool = ["21.1.72", "21.1.71", "20.4.237-beta"]

    assert filter_compatible("1.21.1", pool) == ["21.1.72", "21.1.71"]
