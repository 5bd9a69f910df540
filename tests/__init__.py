"""Tests for Arena."""
