"""User-facing strings: errors and notification texts."""

# Errors
NOT_AUTHENTICATED = "not authenticated"
FORGE_UNAVAILABLE = "GitHub is unreachable; check your network connection"
API_ERROR_FALLBACK = "GitHub API error"
INVALID_RESPONSE = "Invalid response from GitHub API"
FETCH_TIMEOUT = "GitHub request timed out; check your network connection"
REVIEW_ERROR_PREFIX = "Reviews: "
ERROR_SEPARATOR = " | "


def launch_failed(detail: str) -> str:
    return f"Failed to launch GitHub client: {detail}"


def review_error(message: str) -> str:
    return f"{REVIEW_ERROR_PREFIX}{message}"


# Notifications
CI_FAILED = "CI Failed"
ALL_CHECKS_PASSED = "All Checks Passed"
PR_NO_LONGER_OPEN = "PR No Longer Open"


def ci_status_body(repo: str, number: str, title: str) -> str:
    return f"{repo} {number}: {title}"


def pr_closed_body(key: str) -> str:
    return f"{key} was merged or closed"
