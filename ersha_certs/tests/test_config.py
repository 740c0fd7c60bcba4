"""Tests for provisioning configuration."""

from pathlib import Path

import pytest

from ersha_certs.lib.config import ProvisionConfig
from ersha_certs.lib.roles import Role


class TestProvisionConfig:
    """Tests for ProvisionConfig."""

    def test_defaults(self) -> None:
        """Defaults use long-lived CA, shorter leaves, 4096-bit keys."""
        config = ProvisionConfig()
        assert config.ca_validity_days == 3650
        assert config.leaf_validity_days == 365
        assert config.key_size == 4096
        assert config.share_root_certificate is False

    def test_destination_defaults_under_base_dir(self, tmp_path: Path) -> None:
        """Default destinations are the services' key directories."""
        config = ProvisionConfig(base_dir=tmp_path)
        assert config.destination_for(Role.SERVER) == tmp_path / "ersha-prime" / "keys"
        assert config.destination_for(Role.CLIENT) == tmp_path / "ersha-dispatch" / "keys"

    def test_destination_override(self, tmp_path: Path) -> None:
        """An override replaces the default for that role only."""
        override = tmp_path / "elsewhere"
        config = ProvisionConfig(base_dir=tmp_path, destination_overrides={Role.CLIENT: override})
        assert config.destination_for(Role.CLIENT) == override
        assert config.destination_for(Role.SERVER) == tmp_path / "ersha-prime" / "keys"

    @pytest.mark.parametrize(
        ("kwargs", "message"),
        [
            ({"ca_validity_days": 0}, "ca_validity_days"),
            ({"leaf_validity_days": -5}, "leaf_validity_days must be positive"),
            ({"ca_validity_days": 30, "leaf_validity_days": 30}, "shorter"),
            ({"key_size": 1024}, "key_size"),
        ],
    )
    def test_invalid_values_rejected(self, kwargs: dict, message: str) -> None:
        """Invalid values fail at construction."""
        with pytest.raises(ValueError, match=message):
            ProvisionConfig(**kwargs)
