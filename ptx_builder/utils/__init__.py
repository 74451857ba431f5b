"""
Utility functions.

This module provides utilities for:
- Subprocess helpers
- Dep-info file parsing
- Rendering with rich
"""

__all__ = ()
