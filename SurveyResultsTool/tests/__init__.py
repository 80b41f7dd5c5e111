"""Tests for the survey results tool."""
