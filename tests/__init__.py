"""Tests for macup."""
