"""
Tool Loader — deferred, credential-bound tool construction.

``ToolLoader.load()`` maps each requested plugin key in the catalog to a
``ToolInitializer``. Loading does no I/O: credentials are resolved, and the
tool constructed, only when an initializer is awaited. A user who has not
configured a tool still gets its initializer; awaiting it raises
``CredentialUnavailable``.

Usage:
    initializers = loader.load(user_id, ["calculator", "wolfram"], LoadOptions())
    calculator = await initializers["calculator"]()
"""

from __future__ import annotations

import inspect
import logging
from dataclasses import dataclass, field
from typing import Any, Iterable, Mapping, Sequence

from toolgate.core.metrics import metrics
from toolgate.credentials.fields import AuthRequirement, FieldLike
from toolgate.credentials.resolver import CredentialResolver
from toolgate.tools.catalog import ToolCatalog, ToolConstructor, ToolRecord

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LoadOptions:
    """Per-call loading flags.

    functions: build with the record's function-calling constructor when it
               has one; tools without one are built as usual.
    use_specs: pass the record's ToolSpec to the constructor as ``spec``.
    model:     passed through to constructors as ``model``; not inspected.
    extra:     additional constructor input for every tool in the call.
    """

    functions: bool = False
    use_specs: bool = False
    model: Any = None
    extra: Mapping[str, Any] = field(default_factory=dict)


class ToolInitializer:
    """Deferred constructor bound to one user and one tool.

    Every invocation resolves credentials from scratch, so a credential
    added after a failed attempt is picked up on the next one.
    """

    def __init__(
        self,
        user_id: str,
        auth: AuthRequirement,
        constructor: ToolConstructor,
        resolver: CredentialResolver,
        *,
        plugin_key: str = "",
        base_input: Mapping[str, Any] | None = None,
    ):
        self.user_id = user_id
        self.auth = auth
        self.constructor = constructor
        self.resolver = resolver
        self.plugin_key = plugin_key or getattr(constructor, "__name__", "tool")
        self.base_input = dict(base_input or {})

    async def invoke(self) -> Any:
        """Resolve credentials and build the tool.

        Raises CredentialUnavailable if any field group is empty; the
        constructor is not called in that case. Constructor errors
        propagate unchanged.
        """
        values = await self.resolver.resolve_all(
            self.user_id, self.auth, plugin_key=self.plugin_key
        )
        instance = self.constructor(
            **{**self.base_input, **values, "user_id": self.user_id}
        )
        if inspect.isawaitable(instance):
            instance = await instance

        metrics.inc("tools.initialized", labels={"tool": self.plugin_key})
        logger.debug(
            f"Initialized tool {self.plugin_key}",
            extra={"user_id": self.user_id, "plugin_key": self.plugin_key},
        )
        return instance

    async def __call__(self) -> Any:
        return await self.invoke()

    def __repr__(self) -> str:
        return f"<ToolInitializer:{self.plugin_key} user={self.user_id}>"


class ToolLoader:
    def __init__(self, catalog: ToolCatalog, resolver: CredentialResolver):
        self.catalog = catalog
        self.resolver = resolver

    def load(
        self,
        user_id: str,
        requested: Sequence[str] | None,
        options: LoadOptions | None = None,
    ) -> dict[str, ToolInitializer]:
        """Map requested catalog keys to initializers.

        Keys missing from the catalog are left out. No credentials are
        checked here; that happens when an initializer is awaited.
        """
        options = options or LoadOptions()
        initializers: dict[str, ToolInitializer] = {}
        for plugin_key in requested or ():
            if plugin_key in initializers:
                continue
            record = self.catalog.get(plugin_key)
            if record is None:
                logger.debug(
                    f"Skipping unknown tool {plugin_key!r}",
                    extra={"user_id": user_id, "plugin_key": plugin_key},
                )
                continue
            initializers[plugin_key] = self._initializer(user_id, record, options)
        return initializers

    def _initializer(
        self, user_id: str, record: ToolRecord, options: LoadOptions
    ) -> ToolInitializer:
        base_input: dict[str, Any] = {**record.config, **options.extra}
        if options.use_specs and record.spec is not None:
            base_input["spec"] = record.spec
        if options.model is not None:
            base_input["model"] = options.model

        return ToolInitializer(
            user_id,
            record.auth,
            record.constructor_for(functions=options.functions),
            self.resolver,
            plugin_key=record.plugin_key,
            base_input=base_input,
        )


def initializer_for(
    user_id: str,
    fields: Iterable[FieldLike],
    constructor: ToolConstructor,
    resolver: CredentialResolver,
    *,
    plugin_key: str = "",
    functions: bool = False,
    function_constructor: ToolConstructor | None = None,
    **constructor_input: Any,
) -> ToolInitializer:
    """Wire a single tool outside the catalog.

    ``fields`` are field groups, either ``AuthFieldGroup`` or
    ``||``-joined strings. Extra keyword arguments become constructor input.
    With ``functions`` set, ``function_constructor`` is used if given.
    """
    if functions and function_constructor is not None:
        constructor = function_constructor
    return ToolInitializer(
        user_id,
        AuthRequirement.of(*fields),
        constructor,
        resolver,
        plugin_key=plugin_key,
        base_input=constructor_input,
    )
