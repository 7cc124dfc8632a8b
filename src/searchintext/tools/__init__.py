"""
Search tools for searchintext.

This package contains the traversal, matching, counting and result
delivery components the engine is assembled from.
"""
