"""Integration tests for the back-office rules engine.

These tests drive several services against one store to check that the
rules hold across whole workflows:
- test_workflow.py: product to claim lifecycle, expiry, renewal and deletion guards
"""
