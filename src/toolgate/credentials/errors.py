"""Credential resolution errors."""

from __future__ import annotations

from typing import TYPE_CHECKING, Sequence

if TYPE_CHECKING:
    from toolgate.credentials.fields import AuthFieldGroup


class CredentialUnavailable(LookupError):
    """A required credential resolved to nothing when a tool was initialized.

    Raised from the initializer call, never from ``ToolLoader.load()``.
    """

    def __init__(
        self,
        plugin_key: str,
        missing: Sequence[AuthFieldGroup],
        user_id: str | None = None,
    ):
        self.plugin_key = plugin_key
        self.missing = list(missing)
        self.user_id = user_id
        fields = ", ".join(str(group) for group in self.missing)
        super().__init__(
            f"Tool '{plugin_key}' is missing credentials: {fields}. "
            "Add them in the tool's settings or set them in the environment."
        )


class CredentialStoreError(RuntimeError):
    """The credential store could not be read or written.

    Distinct from "no credential configured" so retries are not masked.
    """
