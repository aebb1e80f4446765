"""Output formatters for gold-digger."""

from gold_digger.formatters.base import Formatter, FormatterRegistry, registry
from gold_digger.formatters.csv import CSVFormatter
from gold_digger.formatters.json import JSONFormatter
from gold_digger.formatters.tab import TabFormatter

__all__ = [
    "CSVFormatter",
    "Formatter",
    "FormatterRegistry",
    "JSONFormatter",
    "TabFormatter",
    "registry",
]
