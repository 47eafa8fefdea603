"""Tests for release models and mapping invariants."""

import pytest
from koka_sources.errors import InvalidMapping, UnknownPlatform
from koka_sources.releases.models import Platform, ReleaseEntry, VersionMapping, validate_mapping
from koka_sources.updater.store import dump_mapping, parse_mapping

SHA = "a" * 64


def entry(version, platform="x86_64-linux"):
    return {"url": f"https://example/{version}/{platform}.tar.gz", "sha256": SHA, "version": version}


def test_platform_table_is_complete():
    assert {p.release_name for p in Platform} == {
        "linux-x64", "linux-arm64", "macos-x64", "macos-arm64", "windows-x64",
    }
    assert Platform.AARCH64_DARWIN.value == "aarch64-darwin"
    assert Platform.X86_64_WINDOWS.os_name == "windows"


def test_platform_parse_accepts_both_spellings():
    assert Platform.parse("linux-x64") is Platform.X86_64_LINUX
    assert Platform.parse("x86_64-linux") is Platform.X86_64_LINUX
    assert Platform.parse(Platform.AARCH64_LINUX) is Platform.AARCH64_LINUX
    with pytest.raises(UnknownPlatform):
        Platform.parse("riscv64-linux")


def test_mapping_accepts_valid_data():
    mapping = validate_mapping({"3.1.2": {"x86_64-linux": entry("3.1.2")}})
    assert mapping.versions() == ["3.1.2"]
    assert mapping["3.1.2"][Platform.X86_64_LINUX].sha256 == SHA


def test_mapping_rejects_version_mismatch():
    with pytest.raises(InvalidMapping):
        validate_mapping({"3.1.2": {"x86_64-linux": entry("3.1.1")}})


def test_mapping_rejects_empty_platforms():
    with pytest.raises(InvalidMapping):
        validate_mapping({"3.1.2": {}})


def test_mapping_rejects_unknown_platform_and_bad_hash():
    with pytest.raises(InvalidMapping):
        validate_mapping({"3.1.2": {"sparc-solaris": entry("3.1.2")}})
    bad = entry("3.1.2")
    bad["sha256"] = "not-a-hash"
    with pytest.raises(InvalidMapping):
        validate_mapping({"3.1.2": {"x86_64-linux": bad}})


def test_release_entry_is_immutable():
    item = ReleaseEntry(**entry("3.1.2"))
    with pytest.raises(Exception):
        item.version = "9.9.9"


def test_round_trip():
    mapping = validate_mapping({
        "3.1.2": {"x86_64-linux": entry("3.1.2"), "aarch64-darwin": entry("3.1.2", "aarch64-darwin")},
        "3.1.1": {"x86_64-windows": entry("3.1.1", "x86_64-windows")},
    })
    text = dump_mapping(mapping)
    assert text.endswith("\n")
    assert parse_mapping(text) == mapping
    assert dump_mapping(parse_mapping(text)) == text


def test_parse_mapping_rejects_garbage():
    with pytest.raises(InvalidMapping):
        parse_mapping("{ not json")


def test_empty_mapping_is_structurally_valid():
    assert len(VersionMapping()) == 0
