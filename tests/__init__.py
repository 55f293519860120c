"""
Tests for Neural Chase
======================

Run all tests:
    pytest tests/

Run with coverage:
    pytest tests/ --cov=chaser --cov-report=html
"""
