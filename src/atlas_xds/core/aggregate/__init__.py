"""Aggregator/Sorter: agrupamento por node e relatório de unicidade."""

from .nodes import DuplicateName, UniquenessReport, aggregate, find_duplicate_names

__all__ = ["DuplicateName", "UniquenessReport", "aggregate", "find_duplicate_names"]
