"""Exceptions raised inside provider adapters.

None of these leave an adapter's ``check()``; they are mapped to
``provider_error`` / ``timeout_soft_pass`` verdicts at the boundary.
"""


class ProviderError(Exception):
    """HTTP failure, unreadable body, error envelope or malformed payload."""

    def __init__(self, provider: str, detail: str):
        super().__init__(f"{provider}: {detail}")
        self.provider = provider
        self.detail = detail
