"""Transaction management for the SQLite store."""

from .manager import TransactionManager

__all__ = ["TransactionManager"]
