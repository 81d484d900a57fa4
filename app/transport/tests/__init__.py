"""
Tests for the transport app.
"""
