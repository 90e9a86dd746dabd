"""prwatch: watch your pull requests and review requests, notify on CI transitions."""

__version__ = "0.1.0"
