import pytest

from datafile_config import (
    ConfigDecodeError,
    DatafileConfigError,
    EntityNotFoundError,
    InvalidExperimentError,
    InvalidVariationError,
    NoOpErrorHandler,
    RaiseExceptionErrorHandler,
    UnsupportedVersionError,
)


def test_not_found_error_keeps_keys_and_kind():
    error = InvalidVariationError("exp1", "control")

    assert error.keys == ("exp1", "control")
    assert error.entity_kind == "variation"
    assert str(error) == 'Provided variation ("exp1", "control") is not in datafile.'
    assert isinstance(error, EntityNotFoundError)
    assert isinstance(error, DatafileConfigError)


def test_unsupported_version_error_is_fatal_decode_error():
    error = UnsupportedVersionError("5")

    assert error.version == "5"
    assert isinstance(error, ConfigDecodeError)


def test_no_op_handler_swallows_errors():
    NoOpErrorHandler().handle_error(InvalidVariationError("exp1", "control"))


def test_raise_exception_handler_reraises():
    with pytest.raises(InvalidVariationError):
        RaiseExceptionErrorHandler().handle_error(InvalidVariationError("exp1", "control"))


def test_single_key_not_found_error_names_the_key():
    assert str(InvalidExperimentError("exp9")) == 'Provided experiment ("exp9") is not in datafile.'
