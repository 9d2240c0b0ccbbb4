"""Exceptions raised by the quote engine."""


class QuoteEngineError(Exception):
    """Base exception for quote calculation errors"""
    pass


class InvalidInputError(QuoteEngineError, ValueError):
    """Raised for out-of-range numbers: volume, percentages, installments, overrides"""
    pass


class InvalidConfigurationError(QuoteEngineError, ValueError):
    """Raised when catalog data cannot be priced (unknown mode, bad flags, unknown ids)"""
    pass
