"""Tests for package configuration and validation helpers."""

import pytest

import apsis
from apsis import config, temp_config
from apsis.utils import validation_error, as_vector3


class TestConfig:
    """Global configuration object."""

    def test_defaults(self):
        assert config.GRAVITATIONAL_CONSTANT == 6.6e-11
        assert config.STRICT_VALIDATION is True
        assert 'drag' in config.EXTERNAL_CONTRIBUTORS

    def test_reset(self):
        try:
            config.GRAVITATIONAL_CONSTANT = 1.0
            config.STRICT_VALIDATION = False
            config.reset()
            assert config.GRAVITATIONAL_CONSTANT == 6.6e-11
            assert config.STRICT_VALIDATION is True
        finally:
            config.reset()

    def test_temp_config_restores(self):
        with temp_config(GRAVITATIONAL_CONSTANT=1.0) as cfg:
            assert cfg.GRAVITATIONAL_CONSTANT == 1.0
            assert apsis.config.GRAVITATIONAL_CONSTANT == 1.0
        assert config.GRAVITATIONAL_CONSTANT == 6.6e-11

    def test_temp_config_restores_on_error(self):
        with pytest.raises(RuntimeError):
            with temp_config(PARABOLIC_TOLERANCE=0.5):
                raise RuntimeError("boom")
        assert config.PARABOLIC_TOLERANCE == 1e-12

    def test_temp_config_unknown_key(self):
        with pytest.raises(AttributeError, match="no attribute"):
            with temp_config(NOT_A_SETTING=1):
                pass

    def test_hash_decimals_follow_atol(self):
        default = config.HASH_DECIMALS
        with temp_config(EQUALITY_ATOL=1e-6):
            assert 0 <= config.HASH_DECIMALS < default

    def test_repr(self):
        text = repr(config)
        assert "ApsisConfig:" in text
        assert "GRAVITATIONAL_CONSTANT = 6.6e-11" in text


class TestValidationError:
    """Strict raise vs. relaxed warning."""

    def test_strict_raises(self):
        with pytest.raises(ValueError, match="bad"):
            validation_error("bad")

    def test_strict_custom_class(self):
        with pytest.raises(TypeError):
            validation_error("bad", TypeError)

    def test_relaxed_warns(self):
        with temp_config(STRICT_VALIDATION=False):
            with pytest.warns(UserWarning, match="bad"):
                validation_error("bad")


class TestAsVector3:

    def test_read_only_copy(self):
        vec = as_vector3([1, 2, 3])
        assert vec.dtype == float
        assert not vec.flags.writeable

    def test_shape_message(self):
        with pytest.raises(ValueError, match="thrust must be a 3-vector"):
            as_vector3([[1, 2, 3]], "thrust")
