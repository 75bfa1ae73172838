"""
FindFiles - Core Package

A directory-search utility that enumerates files under a root directory,
filters them by name or path pattern and date ranges, orders them by
user-selected keys, and either displays them or runs a command per file.
"""

__version__ = "0.1.0"
__author__ = "FindFiles Team"
