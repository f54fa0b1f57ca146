"""
Record integrity checks

Hard gates for competition data:
- Horizon: test length matches the competition's prescribed horizon
- Scaling: training segment long enough for an in-sample seasonal naive error
- Values: strictly positive observations (MAPE divides by the actuals)
"""

import logging
from dataclasses import dataclass, field
from typing import Iterable, List, Optional

from tcomp.data.records import SeriesCollection, SeriesRecord

logger = logging.getLogger(__name__)


@dataclass
class ValidationResult:
    """Results of record validation"""
    series_id: str
    is_valid: bool
    n_train: int
    n_test: int
    expected_horizon: Optional[int]
    horizon_matches: bool
    has_mase_scale: bool
    n_nonpositive: int
    issues: List[str] = field(default_factory=list)


def validate_record(record: SeriesRecord) -> ValidationResult:
    """
    Validate a single record against the competition layout.

    Checks:
    1. Test length equals the prescribed horizon for its frequency class
    2. At least one lag-m pair in training (m = season length) for MASE
    3. No zero or negative observations in the test segment

    Args:
        record: Record to check

    Returns:
        ValidationResult with detailed findings
    """
    issues = []

    # Check 1: Horizon
    expected = record.frequency.competition_horizon
    horizon_matches = expected is None or record.horizon == expected
    if not horizon_matches:
        issues.append(f"test length {record.horizon} != competition horizon {expected}")

    # Check 2: MASE scale
    has_mase_scale = len(record.train) > record.season_length
    if not has_mase_scale:
        issues.append(
            f"training length {len(record.train)} too short for season length "
            f"{record.season_length}"
        )

    # Check 3: Values
    n_nonpositive = int((record.test <= 0).sum())
    if n_nonpositive:
        issues.append(f"{n_nonpositive} non-positive test value(s)")

    return ValidationResult(
        series_id=record.series_id,
        is_valid=not issues,
        n_train=len(record.train),
        n_test=len(record.test),
        expected_horizon=expected,
        horizon_matches=horizon_matches,
        has_mase_scale=has_mase_scale,
        n_nonpositive=n_nonpositive,
        issues=issues,
    )


def validate_collection(collection: SeriesCollection) -> List[ValidationResult]:
    """Validate every record, logging a warning for each failure"""
    results = [validate_record(record) for record in collection.values()]

    for result in results:
        if not result.is_valid:
            logger.warning("Series %s: %s", result.series_id, "; ".join(result.issues))

    return results


def assert_valid(results: Iterable[ValidationResult]) -> None:
    """
    Raise a ValueError if any record failed validation.
    """
    failed = [r for r in results if not r.is_valid]
    if failed:
        details = "; ".join(f"{r.series_id}({', '.join(r.issues)})" for r in failed[:10])
        raise ValueError(f"{len(failed)} invalid series: {details}")


def print_validation_report(results: List[ValidationResult]) -> None:
    """Print a human-readable validation report"""
    n_failed = sum(not r.is_valid for r in results)
    status = "PASS" if n_failed == 0 else "FAIL"
    print(f"\n=== Validation Report: {status} ===")
    print(f"Series: {len(results)}")
    print(f"Invalid: {n_failed}")
    for result in [r for r in results if not r.is_valid][:10]:
        print(f"  {result.series_id}: {'; '.join(result.issues)}")
