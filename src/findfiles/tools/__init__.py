"""
Search tools and utilities for FindFiles.

This module contains the pipeline stages: pattern compilation, filesystem
walking, date filtering, sorting, command execution and result formatting.
"""
