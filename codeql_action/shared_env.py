"""Environment variable names shared between pipeline stages."""

# Read by the native tracer runtime: path of the tracer spec file
ODASA_TRACER_CONFIGURATION = "ODASA_TRACER_CONFIGURATION"

CODEQL_ACTION_CMD = "CODEQL_ACTION_CMD"
CODEQL_ACTION_RESULTS = "CODEQL_ACTION_RESULTS"
CODEQL_ACTION_DATABASE_DIR = "CODEQL_ACTION_DATABASE_DIR"
CODEQL_ACTION_LANGUAGES = "CODEQL_ACTION_LANGUAGES"
CODEQL_ACTION_SCANNED_LANGUAGES = "CODEQL_ACTION_SCANNED_LANGUAGES"
CODEQL_ACTION_TRACED_LANGUAGES = "CODEQL_ACTION_TRACED_LANGUAGES"
CODEQL_ACTION_AUTOBUILD_LANGUAGES = "CODEQL_ACTION_AUTOBUILD_LANGUAGES"

LGTM_INDEX_INCLUDE = "LGTM_INDEX_INCLUDE"
LGTM_INDEX_EXCLUDE = "LGTM_INDEX_EXCLUDE"

# Set by the runner
GITHUB_ENV = "GITHUB_ENV"
