"""Defaults shared by the facade and the command-line layer."""

DEFAULT_PROVIDER_URL = "http://127.0.0.1:8545"
DEFAULT_TIMEOUT_MS = 10_000

# Receipt polling for deployments
DEFAULT_POLL_INTERVAL = 1.0
DEFAULT_DEPLOY_TIMEOUT = 750
