"""CodeQL CLI integration."""

from codeql_action.codeql.runner import CodeQLRunner

__all__ = ["CodeQLRunner"]
