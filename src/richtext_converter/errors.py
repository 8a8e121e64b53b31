from __future__ import annotations


class ConversionError(RuntimeError):
    def __init__(self, code: str, message: str) -> None:
        super().__init__(message)
        self.code = code


class InvalidInputType(ConversionError, TypeError):
    def __init__(self, value: object) -> None:
        super().__init__("INVALID_INPUT_TYPE", f"Expected text input, got {type(value).__name__}")


class UnsupportedFormatError(ConversionError, ValueError):
    def __init__(self, message: str) -> None:
        super().__init__("UNSUPPORTED_FORMAT", message)


class ExternalConversionError(ConversionError):
    """Raised by external backends; always recovered by the conversion service."""

    def __init__(self, message: str, code: str = "EXTERNAL_FAILED") -> None:
        super().__init__(code, message)


UNBALANCED_STRUCTURE = "UNBALANCED_STRUCTURE"
UNSUPPORTED_CONVERSION_PAIR = "UNSUPPORTED_CONVERSION_PAIR"
AMBIGUOUS_DETECTION = "AMBIGUOUS_DETECTION"
EXTERNAL_FALLBACK = "EXTERNAL_FALLBACK"

__all__ = [
    "AMBIGUOUS_DETECTION",
    "EXTERNAL_FALLBACK",
    "UNBALANCED_STRUCTURE",
    "UNSUPPORTED_CONVERSION_PAIR",
    "ConversionError",
    "ExternalConversionError",
    "InvalidInputType",
    "UnsupportedFormatError",
]
