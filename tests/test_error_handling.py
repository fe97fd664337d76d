"""
Tests for HyperClass Error Handling
===================================
Tests the exception hierarchy, error codes and serialization.
"""

import os

import pytest

from hyperclass.core.exceptions import (
    # Base
    HyperClassError,
    RecoverableError,
    IrrecoverableError,
    ErrorCategory,
    # Vector
    VectorError,
    DimensionMismatchError,
    LengthMismatchError,
    InvalidRangeError,
    VectorDecodeError,
    VectorOperationError,
    # Encoding
    EncodingError,
    OutOfRangeError,
    # Memory
    MemoryOperationError,
    EmptyMemoryError,
    # Training
    TrainingError,
    NotTrainableError,
    # Storage
    StorageError,
    VectorFileNotFoundError,
    DatasetError,
    # Config / Validation
    ConfigurationError,
    ValidationError,
    # Utilities
    wrap_storage_exception,
    is_debug_mode,
)


class TestExceptionHierarchy:
    """Test the exception inheritance hierarchy."""

    def test_base_exception(self):
        exc = HyperClassError("Test error")
        assert str(exc) == "Test error"
        assert exc.message == "Test error"
        assert exc.context == {}
        assert exc.recoverable is True
        assert exc.error_code == "HYPERCLASS_ERROR"
        assert exc.category is ErrorCategory.SYSTEM

    def test_exception_with_context(self):
        exc = HyperClassError("Test error", context={"key": "value"})
        assert exc.context == {"key": "value"}
        assert "context=" in str(exc)

    def test_overrides(self):
        exc = HyperClassError("x", error_code="CUSTOM", recoverable=False)
        assert exc.error_code == "CUSTOM"
        assert exc.recoverable is False

    @pytest.mark.parametrize(
        "exc,parents",
        [
            (DimensionMismatchError(3, 4), (VectorError, IrrecoverableError)),
            (LengthMismatchError(3, 4), (DimensionMismatchError, VectorError)),
            (InvalidRangeError(2, 1, 8), (VectorError, IrrecoverableError)),
            (VectorDecodeError("zz", "bad"), (VectorError,)),
            (VectorOperationError("bind", "bad"), (VectorError,)),
            (OutOfRangeError(2.0, -1.0, 1.0), (EncodingError, IrrecoverableError)),
            (EmptyMemoryError(), (MemoryOperationError,)),
            (NotTrainableError(0, 0), (TrainingError, IrrecoverableError)),
            (VectorFileNotFoundError("/x"), (StorageError, RecoverableError)),
            (DatasetError("/x", "empty"), (StorageError, RecoverableError)),
            (ConfigurationError("levels", "bad"), (IrrecoverableError,)),
            (ValidationError("field", "bad"), (IrrecoverableError,)),
        ],
    )
    def test_parents(self, exc, parents):
        assert isinstance(exc, HyperClassError)
        for parent in parents:
            assert isinstance(exc, parent)

    def test_categories(self):
        assert DimensionMismatchError(1, 2).category is ErrorCategory.VECTOR
        assert OutOfRangeError(2.0, -1.0, 1.0).category is ErrorCategory.ENCODING
        assert EmptyMemoryError().category is ErrorCategory.MEMORY
        assert NotTrainableError(0, 0).category is ErrorCategory.TRAINING
        assert DatasetError("/x", "r").category is ErrorCategory.STORAGE
        assert ConfigurationError("k", "r").category is ErrorCategory.CONFIG
        assert ValidationError("f", "r").category is ErrorCategory.VALIDATION

    def test_recoverability(self):
        assert StorageError("disk").recoverable is True
        assert EmptyMemoryError().recoverable is False
        assert LengthMismatchError(1, 2).recoverable is False


class TestErrorMessages:
    def test_dimension_mismatch(self):
        exc = DimensionMismatchError(1024, 512, "bundle")
        assert exc.expected == 1024
        assert exc.actual == 512
        assert exc.operation == "bundle"
        assert "expected 1024, got 512" in exc.message

    def test_length_mismatch_is_a_decode_failure(self):
        exc = LengthMismatchError(8, 4)
        assert exc.operation == "decode"
        assert exc.error_code == "LENGTH_MISMATCH_ERROR"

    def test_invalid_range_reason(self):
        assert "start >= end" in InvalidRangeError(5, 5, 8).message
        assert "outside" in InvalidRangeError(0, 9, 8).message

    def test_out_of_range(self):
        exc = OutOfRangeError(1.5, -1.0, 1.0)
        assert exc.value == 1.5
        assert exc.message == "Frequency of 1.5 is outside expected range of [-1.0, 1.0]"

    def test_not_trainable(self):
        exc = NotTrainableError(10, 0)
        assert exc.message == "Could not train model. Did you forget to setup datasets?"
        assert exc.context == {"train_size": 10, "test_size": 0}

    def test_validation_value_truncated(self):
        exc = ValidationError("labels", "bad", "x" * 500)
        assert len(exc.context["value"]) == 103

    def test_to_dict(self):
        exc = ValidationError(field="fraction", reason="must be in (0, 1]", value=2.0)
        d = exc.to_dict()
        assert d["error"] == "Validation error for 'fraction': must be in (0, 1]"
        assert d["code"] == "VALIDATION_ERROR"
        assert d["recoverable"] is False
        assert d["context"] == {"field": "fraction", "value": "2.0"}

    def test_to_dict_with_traceback(self):
        try:
            raise EmptyMemoryError()
        except EmptyMemoryError as exc:
            d = exc.to_dict(include_traceback=True)
        assert "traceback" in d


class TestUtilities:
    def test_wrap_file_not_found(self):
        wrapped = wrap_storage_exception("load", "/data/x.mem", FileNotFoundError("gone"))
        assert isinstance(wrapped, VectorFileNotFoundError)
        assert wrapped.path == "/data/x.mem"

    def test_wrap_generic_os_error(self):
        wrapped = wrap_storage_exception("save", "/data/x.mem", PermissionError("denied"))
        assert type(wrapped) is StorageError
        assert wrapped.context["operation"] == "save"
        assert wrapped.context["original_exception"] == "PermissionError"

    def test_debug_mode(self):
        os.environ["HYPERCLASS_DEBUG"] = "true"
        try:
            assert is_debug_mode() is True
        finally:
            del os.environ["HYPERCLASS_DEBUG"]
        assert is_debug_mode() is False
