"""Tests for TOML configuration loading."""

from pathlib import Path

import pytest

from vcf_alleles.config import (
    DEFAULT_CANONICAL_FORMAT,
    ConfigValidationError,
    ToolConfig,
    load_config,
    validate_config,
)
from vcf_alleles.models import Convention


def write_config(tmp_path: Path, body: str) -> Path:
    path = tmp_path / "vcf-alleles.toml"
    path.write_text(body)
    return path


class TestToolConfigDefaults:
    """Test default configuration values."""

    def test_defaults(self):
        config = ToolConfig()

        assert config.canonical_format == DEFAULT_CANONICAL_FORMAT
        assert config.convention_enum is Convention.ANNOVAR
        assert config.reference is None
        assert config.fasta_cache_size == 100
        assert config.log_level == "INFO"

    def test_default_order_not_shared(self):
        ToolConfig().canonical_format.append("XX")
        assert ToolConfig().canonical_format == DEFAULT_CANONICAL_FORMAT


class TestLoadConfig:
    """Test loading configuration files."""

    def test_full_section(self, tmp_path):
        path = write_config(
            tmp_path,
            """
[vcf_alleles]
canonical_format = ["GT", "DP"]
convention = "Native"
reference = "refs/hg38.fa"
fasta_cache_size = 16
log_level = "debug"
""",
        )

        config = load_config(path)

        assert config.canonical_format == ["GT", "DP"]
        assert config.convention_enum is Convention.NATIVE
        assert config.reference == Path("refs/hg38.fa")
        assert config.fasta_cache_size == 16
        assert config.log_level == "DEBUG"

    def test_missing_section_uses_defaults(self, tmp_path):
        path = write_config(tmp_path, "[other]\nkey = 1\n")
        assert load_config(path) == ToolConfig()

    def test_unknown_keys_ignored(self, tmp_path):
        path = write_config(tmp_path, '[vcf_alleles]\ncolour = "blue"\n')
        assert load_config(path) == ToolConfig()

    def test_empty_reference_is_none(self, tmp_path):
        path = write_config(tmp_path, '[vcf_alleles]\nreference = ""\n')
        assert load_config(path).reference is None

    def test_overrides_win(self, tmp_path):
        path = write_config(tmp_path, '[vcf_alleles]\nconvention = "native"\n')

        config = load_config(path, overrides={"convention": "annovar"})

        assert config.convention == "annovar"

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_config(tmp_path / "absent.toml")

    def test_invalid_value_rejected(self, tmp_path):
        path = write_config(tmp_path, "[vcf_alleles]\nfasta_cache_size = 0\n")

        with pytest.raises(ConfigValidationError, match="positive"):
            load_config(path)


class TestValidateConfig:
    """Test validation of individual settings."""

    @pytest.mark.parametrize(
        "config_dict",
        [
            {"canonical_format": "GT:AD"},
            {"canonical_format": ["GT", ""]},
            {"canonical_format": ["GT", "GT"]},
            {"convention": "hgvs"},
            {"convention": 1},
            {"reference": 5},
            {"fasta_cache_size": True},
            {"fasta_cache_size": "10"},
            {"fasta_cache_size": -1},
            {"log_level": "LOUD"},
            {"log_level": 10},
        ],
    )
    def test_invalid(self, config_dict):
        with pytest.raises(ConfigValidationError):
            validate_config(config_dict)

    def test_valid(self):
        validate_config(
            {
                "canonical_format": ["GT", "AD"],
                "convention": "annovar",
                "reference": "ref.fa",
                "fasta_cache_size": 1,
                "log_level": "warning",
            }
        )
