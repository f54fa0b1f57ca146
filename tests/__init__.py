"""
tcomp Test Suite

Tests organized by module:
- test_records.py — Series store immutability and frequency filtering
- test_loader.py — Tidy-frame and competition CSV loading, validation gates
- test_evaluation.py — Accuracy evaluator (MAPE/MASE, horizon specs)
- test_batch.py — Batch aggregation and failure policies
- test_models.py — statsforecast adapters (smoke, synthetic data)
- test_plotting.py — Comparison plots
- test_config.py — Settings from environment
- test_cli.py — Typer commands
"""
