"""
Link Stacks: collaborative link boards organized by hierarchical tags.
"""

__version__ = "0.1.0"
