"""
Test suite for corridor-pool-strategy

Contains:
- tests/unit/ : Unit tests for math, engine, lifecycle, gates and the strategy
"""
