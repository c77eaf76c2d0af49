"""Exit codes for the covsubmit CLI."""

EXIT_SUCCESS = 0
EXIT_PROCESSING_ERROR = 1
EXIT_SUBMISSION_ERROR = 2
EXIT_INVALID_USAGE = 3
