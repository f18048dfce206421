"""
Repository-level exceptions.
"""


class RepositoryError(Exception):
    """Raised when a repository cannot complete a persistence operation."""
    pass
