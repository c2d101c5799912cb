"""codeql-action: multi-language CodeQL database creation for CI pipelines."""

__version__ = "0.1.0"
