"""
HyperClass Domain-Specific Exceptions
=====================================

This module defines a hierarchy of exceptions for consistent error handling
across the HyperClass system.

Exception Hierarchy:
    HyperClassError (base)
    ├── RecoverableError (transient, retry possible)
    ├── IrrecoverableError (permanent, requires intervention)
    │   ├── ConfigurationError
    │   └── ValidationError
    └── Domain Errors (mixed recoverability)
        ├── VectorError
        │   ├── DimensionMismatchError
        │   │   └── LengthMismatchError
        │   ├── InvalidRangeError
        │   ├── VectorDecodeError
        │   └── VectorOperationError
        ├── EncodingError
        │   └── OutOfRangeError
        ├── MemoryOperationError
        │   └── EmptyMemoryError
        ├── TrainingError
        │   └── NotTrainableError
        └── StorageError
            ├── VectorFileNotFoundError
            └── DatasetError

Usage Guidelines:
    - Algebra and construction errors are raised to the immediate caller
    - The model/dataset loading layer catches StorageError and degrades
    - Always include context in error messages
"""

from typing import Optional, Any
from enum import Enum
import os


class ErrorCategory(Enum):
    """Categories for error classification."""
    STORAGE = "STORAGE"
    VECTOR = "VECTOR"
    ENCODING = "ENCODING"
    CONFIG = "CONFIG"
    VALIDATION = "VALIDATION"
    MEMORY = "MEMORY"
    TRAINING = "TRAINING"
    SYSTEM = "SYSTEM"


class HyperClassError(Exception):
    """
    Base exception for all HyperClass errors.

    Attributes:
        message: Human-readable error message
        error_code: Machine-readable error code
        context: Additional context about the error
        recoverable: Whether the error is potentially recoverable
    """

    error_code: str = "HYPERCLASS_ERROR"
    recoverable: bool = True
    category: ErrorCategory = ErrorCategory.SYSTEM

    def __init__(
        self,
        message: str,
        context: Optional[dict] = None,
        error_code: Optional[str] = None,
        recoverable: Optional[bool] = None
    ):
        super().__init__(message)
        self.message = message
        self.context = context or {}
        if error_code is not None:
            self.error_code = error_code
        if recoverable is not None:
            self.recoverable = recoverable

    def __str__(self) -> str:
        if self.context:
            return f"{self.message} | context={self.context}"
        return self.message

    def to_dict(self, include_traceback: bool = False) -> dict:
        """
        Convert exception to dictionary for JSON output.

        Args:
            include_traceback: Whether to include stack trace (only in DEBUG mode)
        """
        result = {
            "error": self.message,
            "code": self.error_code,
            "recoverable": self.recoverable,
        }

        if include_traceback:
            import traceback
            result["traceback"] = traceback.format_exc()

        if self.context:
            result["context"] = self.context

        return result


# =============================================================================
# Base Categories: Recoverable vs Irrecoverable
# =============================================================================

class RecoverableError(HyperClassError):
    """
    Base class for recoverable errors.

    The caller may fall back to another source (e.g. an alternate dataset
    format or a freshly generated model) and continue.
    """
    recoverable = True


class IrrecoverableError(HyperClassError):
    """
    Base class for irrecoverable errors.

    These are permanent errors that require intervention:
    - Invalid configuration
    - Malformed input vectors
    - Validation failures
    """
    recoverable = False


# =============================================================================
# Vector Errors
# =============================================================================

class VectorError(HyperClassError):
    """Base exception for hypervector operations."""
    error_code = "VECTOR_ERROR"
    category = ErrorCategory.VECTOR


class DimensionMismatchError(IrrecoverableError, VectorError):
    """Raised when vector dimensions (or representations) do not match."""
    error_code = "DIMENSION_MISMATCH_ERROR"

    def __init__(self, expected: Any, actual: Any, operation: str = "operation", context: Optional[dict] = None):
        ctx = {"expected": expected, "actual": actual, "operation": operation}
        if context:
            ctx.update(context)
        super().__init__(
            f"Dimension mismatch in {operation}: expected {expected}, got {actual}",
            ctx
        )
        self.expected = expected
        self.actual = actual
        self.operation = operation


class LengthMismatchError(DimensionMismatchError):
    """Raised when a decoded vector does not contain the expected number of elements."""
    error_code = "LENGTH_MISMATCH_ERROR"

    def __init__(self, expected: int, actual: int, context: Optional[dict] = None):
        super().__init__(expected, actual, operation="decode", context=context)


class InvalidRangeError(IrrecoverableError, VectorError):
    """Raised when an element range is empty, reversed or out of bounds."""
    error_code = "INVALID_RANGE_ERROR"

    def __init__(self, start: int, end: int, dimension: int, context: Optional[dict] = None):
        ctx = {"start": start, "end": end, "dimension": dimension}
        if context:
            ctx.update(context)
        if start >= end:
            reason = f"start >= end ({start} >= {end})"
        else:
            reason = f"[{start}, {end}) is outside [0, {dimension})"
        super().__init__(f"Inverting vector failed because {reason}", ctx)
        self.start = start
        self.end = end


class VectorDecodeError(IrrecoverableError, VectorError):
    """Raised when a vector's text encoding contains an unrecognized token."""
    error_code = "VECTOR_DECODE_ERROR"

    def __init__(self, token: str, reason: str, context: Optional[dict] = None):
        ctx = {"token": token[:100]}
        if context:
            ctx.update(context)
        super().__init__(f"Cannot decode '{token[:100]}': {reason}", ctx)
        self.token = token


class VectorOperationError(IrrecoverableError, VectorError):
    """Raised when a vector operation fails."""
    error_code = "VECTOR_OPERATION_ERROR"

    def __init__(self, operation: str, reason: str, context: Optional[dict] = None):
        ctx = {"operation": operation}
        if context:
            ctx.update(context)
        super().__init__(f"Vector operation '{operation}' failed: {reason}", ctx)
        self.operation = operation


# =============================================================================
# Encoding Errors
# =============================================================================

class EncodingError(HyperClassError):
    """Base exception for sample encoding errors."""
    error_code = "ENCODING_ERROR"
    category = ErrorCategory.ENCODING


class OutOfRangeError(IrrecoverableError, EncodingError):
    """Raised when a continuous input value lies outside the encodable interval."""
    error_code = "OUT_OF_RANGE_ERROR"

    def __init__(self, value: float, minimum: float, maximum: float, context: Optional[dict] = None):
        ctx = {"value": value, "minimum": minimum, "maximum": maximum}
        if context:
            ctx.update(context)
        super().__init__(
            f"Frequency of {value} is outside expected range of [{minimum}, {maximum}]",
            ctx
        )
        self.value = value


# =============================================================================
# Memory Operation Errors
# =============================================================================

class MemoryOperationError(HyperClassError):
    """Raised when a memory operation (insert, find, replace) fails."""
    error_code = "MEMORY_OPERATION_ERROR"
    category = ErrorCategory.MEMORY

    def __init__(self, operation: str, reason: str, context: Optional[dict] = None):
        ctx = {"operation": operation}
        if context:
            ctx.update(context)
        super().__init__(f"Memory {operation} failed: {reason}", ctx)
        self.operation = operation


class EmptyMemoryError(MemoryOperationError):
    """Raised when searching an associative memory that holds no prototypes."""
    error_code = "EMPTY_MEMORY_ERROR"
    recoverable = False

    def __init__(self, context: Optional[dict] = None):
        super().__init__("find", "Failed to find query in empty associative memory", context)


# =============================================================================
# Training Errors
# =============================================================================

class TrainingError(HyperClassError):
    """Base exception for classifier training errors."""
    error_code = "TRAINING_ERROR"
    category = ErrorCategory.TRAINING


class NotTrainableError(IrrecoverableError, TrainingError):
    """Raised when training is requested without both datasets populated."""
    error_code = "NOT_TRAINABLE_ERROR"

    def __init__(self, train_size: int, test_size: int, context: Optional[dict] = None):
        ctx = {"train_size": train_size, "test_size": test_size}
        if context:
            ctx.update(context)
        super().__init__(
            "Could not train model. Did you forget to setup datasets?",
            ctx
        )


# =============================================================================
# Storage Errors
# =============================================================================

class StorageError(RecoverableError):
    """Base exception for persistence errors (vector files, datasets, reports)."""
    error_code = "STORAGE_ERROR"
    category = ErrorCategory.STORAGE


class VectorFileNotFoundError(StorageError):
    """Raised when a vector or dataset file does not exist."""
    error_code = "FILE_NOT_FOUND_ERROR"

    def __init__(self, path: str, context: Optional[dict] = None):
        ctx = {"path": str(path)}
        if context:
            ctx.update(context)
        super().__init__(f"The path '{path}' does not lead to a file", ctx)
        self.path = str(path)


class DatasetError(StorageError):
    """Raised when a dataset file pair is inconsistent or empty."""
    error_code = "DATASET_ERROR"

    def __init__(self, path: str, reason: str, context: Optional[dict] = None):
        ctx = {"path": str(path)}
        if context:
            ctx.update(context)
        super().__init__(f"Dataset at '{path}' is invalid: {reason}", ctx)
        self.path = str(path)


# =============================================================================
# Configuration & Validation Errors
# =============================================================================

class ConfigurationError(IrrecoverableError):
    """Raised when configuration is invalid or missing."""
    error_code = "CONFIGURATION_ERROR"
    category = ErrorCategory.CONFIG

    def __init__(self, config_key: str, reason: str, context: Optional[dict] = None):
        ctx = {"config_key": config_key}
        if context:
            ctx.update(context)
        super().__init__(f"Configuration error for '{config_key}': {reason}", ctx)
        self.config_key = config_key


class ValidationError(IrrecoverableError):
    """Raised when input validation fails."""
    error_code = "VALIDATION_ERROR"
    category = ErrorCategory.VALIDATION

    def __init__(self, field: str, reason: str, value: Any = None, context: Optional[dict] = None):
        ctx = {"field": field}
        if value is not None:
            # Truncate large values
            value_str = str(value)
            if len(value_str) > 100:
                value_str = value_str[:100] + "..."
            ctx["value"] = value_str
        if context:
            ctx.update(context)
        super().__init__(f"Validation error for '{field}': {reason}", ctx)
        self.field = field
        self.reason = reason


# =============================================================================
# Utility Functions
# =============================================================================

def wrap_storage_exception(operation: str, path: str, exc: Exception) -> StorageError:
    """
    Wrap an OS-level exception raised while reading or writing a file.

    Args:
        operation: Name of the operation that failed ('load', 'save')
        path: File involved
        exc: The original exception

    Returns:
        An appropriate StorageError subclass
    """
    if isinstance(exc, FileNotFoundError):
        return VectorFileNotFoundError(path)

    return StorageError(
        f"{operation} of '{path}' failed: {exc}",
        {"path": str(path), "operation": operation, "original_exception": type(exc).__name__}
    )


def is_debug_mode() -> bool:
    """Check if debug mode is enabled via environment variable."""
    return os.environ.get("HYPERCLASS_DEBUG", "").lower() in ("true", "1", "yes")


__all__ = [
    # Base
    "HyperClassError",
    "RecoverableError",
    "IrrecoverableError",
    "ErrorCategory",
    # Vector
    "VectorError",
    "DimensionMismatchError",
    "LengthMismatchError",
    "InvalidRangeError",
    "VectorDecodeError",
    "VectorOperationError",
    # Encoding
    "EncodingError",
    "OutOfRangeError",
    # Memory
    "MemoryOperationError",
    "EmptyMemoryError",
    # Training
    "TrainingError",
    "NotTrainableError",
    # Storage
    "StorageError",
    "VectorFileNotFoundError",
    "DatasetError",
    # Config / Validation
    "ConfigurationError",
    "ValidationError",
    # Utilities
    "wrap_storage_exception",
    "is_debug_mode",
]
