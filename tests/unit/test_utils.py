"""Tests for tins utility functions."""

from datetime import datetime, timedelta, timezone

import pytest

from tins.utils import (
    build_startup_script,
    extract_ip_address,
    format_created,
    validate_short_name,
)


class TestValidateShortName:
    """Tests for instance name validation."""

    @pytest.mark.parametrize(
        "name", ["alpha", "a", "web-01", "9lives", "brave-turing", "MyBox", "dev_1", "v1.2", "wéb"]
    )
    def test_valid_names(self, name: str) -> None:
        """Test that mixed case, underscores, dots and digits are accepted."""
        assert validate_short_name(name) == name

    @pytest.mark.parametrize(
        "name",
        ["", "web 01", "a/b", "a\\b", ".", "..", "x\"y", "x'y", "$(id)", "`id`", "tab\tx", "line\n"],
    )
    def test_invalid_names(self, name: str) -> None:
        """Test that names unsafe for key paths or shell quoting are rejected."""
        with pytest.raises(ValueError, match="Invalid instance name"):
            validate_short_name(name)


class TestExtractIPAddress:
    """Tests for address selection."""

    def test_fixed_address(self) -> None:
        """Test a single fixed address."""
        addresses = {"private": [{"addr": "10.0.0.5", "OS-EXT-IPS:type": "fixed"}]}
        assert extract_ip_address(addresses) == "10.0.0.5"

    def test_typed_address_preferred_over_untyped(self) -> None:
        """Test that an untyped record only wins when nothing typed exists."""
        addresses = {
            "lan": [{"addr": "192.168.1.10"}],
            "public": [{"addr": "203.0.113.7", "OS-EXT-IPS:type": "floating"}],
        }
        assert extract_ip_address(addresses) == "203.0.113.7"

    def test_untyped_fallback(self) -> None:
        """Test that the first untyped record is used as a fallback."""
        addresses = {"lan": [{"addr": "192.168.1.10"}, {"addr": "192.168.1.11"}]}
        assert extract_ip_address(addresses) == "192.168.1.10"

    def test_other_types_skipped(self) -> None:
        """Test that records of unknown type are never chosen."""
        addresses = {"lan": [{"addr": "fe80::1", "OS-EXT-IPS:type": "link-local"}]}
        assert extract_ip_address(addresses) is None

    def test_empty(self) -> None:
        """Test that no addresses give None."""
        assert extract_ip_address({}) is None
        assert extract_ip_address({"private": []}) is None


class TestBuildStartupScript:
    """Tests for the boot script."""

    def test_script_installs_key_for_root(self) -> None:
        """Test the shebang, key line and permissions."""
        script = build_startup_script("ssh-rsa AAAA tins-alpha\n")

        assert script.startswith("#!/bin/bash\n")
        assert "mkdir -p /root/.ssh" in script
        assert 'echo "ssh-rsa AAAA tins-alpha" >> /root/.ssh/authorized_keys' in script
        assert "chmod 600 /root/.ssh/authorized_keys" in script
        assert "chmod 700 /root/.ssh" in script


class TestFormatCreated:
    """Tests for creation time formatting."""

    def test_missing(self) -> None:
        """Test the placeholder for unknown times."""
        assert format_created(None) == "N/A"

    def test_utc(self) -> None:
        """Test UTC formatting."""
        created = datetime(2024, 5, 1, 10, 20, 30, tzinfo=timezone.utc)
        assert format_created(created) == "2024-05-01 10:20:30"

    def test_other_offset_converted(self) -> None:
        """Test that other offsets are converted to UTC."""
        created = datetime(2024, 5, 1, 12, 20, 30, tzinfo=timezone(timedelta(hours=2)))
        assert format_created(created) == "2024-05-01 10:20:30"
