"""gitops-coverage: turn lcov and Istanbul summaries into a markdown coverage report."""

__version__ = "0.1.0"
