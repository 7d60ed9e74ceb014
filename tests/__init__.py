"""Tests for batchflac"""
