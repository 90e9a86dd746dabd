"""GitHub fetcher: GraphQL search for authored and review-requested PRs."""

import logging
from typing import Any, Dict, List

import requests

from prwatch.adapters.base import (
    ApiError,
    FetchError,
    FetchTimeoutError,
    ForgeUnavailableError,
    InvalidResponseError,
    LaunchError,
    PRFetcher,
)
from prwatch.models import PullRequest
from prwatch.parser import parse_search_response

LOG = logging.getLogger("prwatch.adapters.github")

SEARCH_QUERY = """
query($q: String!, $first: Int!) {
  search(query: $q, type: ISSUE, first: $first) {
    nodes {
      ... on PullRequest {
        number
        title
        publishedAt
        url
        author { login }
        isDraft
        state
        repository { nameWithOwner }
        reviewDecision
        mergeable
        mergeQueueEntry { position }
        reviews(states: APPROVED, first: 0) { totalCount }
        latestReviews(first: 20) { nodes { author { login } state } }
        headRefOid
        headRefName
        commits(last: 1) {
          nodes {
            commit {
              statusCheckRollup {
                state
                contexts(first: 100) {
                  totalCount
                  nodes {
                    ... on CheckRun { name status conclusion detailsUrl }
                    ... on StatusContext { context state targetUrl }
                  }
                }
              }
            }
          }
        }
      }
    }
  }
}
"""


def my_prs_query(user: str) -> str:
    return f"author:{user} type:pr state:open"


def review_prs_query(user: str) -> str:
    return f"review-requested:{user} type:pr state:open"


class GitHubFetcher(PRFetcher):
    """GitHub API implementation of the fetch interface."""

    def __init__(
        self,
        token: str | None,
        api_url: str = "https://api.github.com",
        graphql_url: str | None = None,
        timeout: int = 30,
        page_size: int = 100,
    ) -> None:
        self._api_url = api_url.rstrip("/")
        self._graphql_url = graphql_url or f"{self._api_url}/graphql"
        self._timeout = timeout
        self._page_size = page_size
        self._session = requests.Session()
        if token:
            self._session.headers["Authorization"] = f"bearer {token}"
        self._session.headers["Accept"] = "application/vnd.github+json"

    def _request(self, method: str, url: str, json: Dict[str, Any] | None = None) -> Any:
        try:
            resp = self._session.request(method, url, json=json, timeout=self._timeout)
        except requests.Timeout as e:
            raise FetchTimeoutError() from e
        except requests.ConnectionError as e:
            raise ForgeUnavailableError() from e
        except requests.RequestException as e:
            raise LaunchError(str(e)) from e
        if resp.status_code >= 400:
            msg = resp.text or resp.reason or str(resp.status_code)
            try:
                body = resp.json()
            except ValueError:
                body = None
            if isinstance(body, dict) and body.get("message"):
                msg = body["message"]
            raise ApiError(f"{resp.status_code}: {msg}")
        try:
            return resp.json()
        except ValueError as e:
            raise InvalidResponseError() from e

    def current_user(self) -> str | None:
        if "Authorization" not in self._session.headers:
            return None
        try:
            data = self._request("GET", f"{self._api_url}/user")
        except FetchError as e:
            LOG.warning("Could not resolve GitHub user: %s", e)
            return None
        login = data.get("login") if isinstance(data, dict) else None
        if not isinstance(login, str) or not login.strip():
            return None
        return login.strip()

    def search_prs(self, search_query: str, viewer: str | None = None) -> List[PullRequest]:
        """Run the PR search and parse the nodes."""
        payload = self._request(
            "POST",
            self._graphql_url,
            json={"query": SEARCH_QUERY, "variables": {"q": search_query, "first": self._page_size}},
        )
        prs = parse_search_response(payload, viewer=viewer)
        LOG.debug("search %r: %s PRs", search_query, len(prs))
        return prs

    def fetch_my_prs(self, user: str) -> List[PullRequest]:
        return self.search_prs(my_prs_query(user), viewer=user)

    def fetch_review_prs(self, user: str) -> List[PullRequest]:
        return self.search_prs(review_prs_query(user), viewer=user)
