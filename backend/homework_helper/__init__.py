"""Homework Helper: staged AI hints for homework problems."""
