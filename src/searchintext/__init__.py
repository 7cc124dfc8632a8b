"""
searchintext - Core Package

A concurrent search utility that finds a keyword in file contents and in
file and folder names across a directory tree.
"""

__version__ = "0.1.0"
