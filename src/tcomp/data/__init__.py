"""
Series store: competition data as immutable train/test records

1. records - Frequency classes, SeriesRecord, SeriesCollection
2. loader - Build collections from tidy frames or competition CSV files
3. validate - Check records against the competition layout
"""

from .loader import collection_from_frames, load_competition_csv, load_tourism
from .records import Frequency, SeriesCollection, SeriesRecord
from .validate import (ValidationResult, assert_valid, print_validation_report,
                       validate_collection, validate_record)

__all__ = [
    "Frequency",
    "SeriesRecord",
    "SeriesCollection",
    "collection_from_frames",
    "load_competition_csv",
    "load_tourism",
    "ValidationResult",
    "validate_record",
    "validate_collection",
    "assert_valid",
    "print_validation_report",
]
