"""
scoring/ - Assessment Results Computation Engine

Modules:
    utils.py                - Decimal utilities (half-up rounding, means)
    response_aggregator.py  - Groups ratings by competency / question / rater type
    competency_scorer.py    - Per-rater-type averages, overall average, gap
    summary_selector.py     - Overall score, strengths, development areas, ceiling
    cci_calculator.py       - Coaching Capacity Index and band
    trend_analyzer.py       - Comparison with the previous completed assessment
    results_assembler.py    - Orchestrates the pipeline into one snapshot
"""
