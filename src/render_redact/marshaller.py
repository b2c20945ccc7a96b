"""
Marshaller - Main facade class for render-redact.

Provides a simple interface for rendering values, with or without field
redaction.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from render_redact.adapters.message import MessageAdapter, MessageWalker
from render_redact.engine.traversal import Traversal
from render_redact.protocol.types import RenderOptions, build_options
from render_redact.registry.formatters import TypeFormatter, TypeFormatterRegistry

logger = logging.getLogger(__name__)


class Marshaller:
    """Deterministic renderer with a redaction layer.

    A Marshaller is immutable once built and may be shared between threads;
    every call allocates its own traversal state and output buffer.

    Example:
        ```python
        @dataclass
        class Login:
            user: str
            password: str = field(metadata={"redact": "REMOVE"})

        marshaller = Marshaller(masking_length=2)
        marshaller.render(Login("ana", "hunter2"))
        # 'app.Login{user:"ana", password:"hunter2"}'
        marshaller.redact(Login("ana", "hunter2"))
        # 'app.Login{user:"ana"}'
        ```
    """

    def __init__(
        self,
        options: RenderOptions | Mapping[str, Any] | None = None,
        **overrides: Any,
    ) -> None:
        """Initialize the Marshaller.

        Args:
            options: Base options; defaults are used when omitted.
            **overrides: Individual RenderOptions fields overriding ``options``.

        Raises:
            ConfigurationError: If the resulting options are invalid.
        """
        self._options = build_options(options, **overrides)
        self._formatters = TypeFormatterRegistry(self._options.type_formatters)
        logger.debug(
            "Marshaller ready: tag=%s formatters=%d",
            self._options.redact_tag,
            len(self._formatters),
        )

    @property
    def options(self) -> RenderOptions:
        return self._options

    def render(self, value: Any, as_type: Any = None) -> str:
        """Render a value without redaction.

        Args:
            value: Any Python value.
            as_type: Optional annotation giving the value's declared type,
                e.g. ``dict[int, str]`` or ``Optional[Node]``.

        Returns:
            The rendered text.
        """
        return Traversal(self._options, self._formatters, redact=False).run(value, as_type)

    def redact(self, value: Any, as_type: Any = None) -> str:
        """Render a value applying field redaction directives and masking."""
        return Traversal(self._options, self._formatters, redact=True).run(value, as_type)

    def mask(self, value: Any, as_type: Any = None) -> str:
        """Render a value with redaction active and every value masked.

        Useful for values that carry no field annotations, such as parsed
        JSON documents.
        """
        traversal = Traversal(self._options, self._formatters, redact=True)
        return traversal.run(value, as_type, masked=True)

    def render_message(self, message: Any, adapter: MessageAdapter | None = None) -> str:
        """Render a structured message without redaction.

        Args:
            message: A message understood by ``adapter`` (pydantic model by default).
            adapter: Message adapter; defaults to the pydantic adapter.

        Returns:
            The rendered text.
        """
        traversal = Traversal(self._options, self._formatters, redact=False)
        return MessageWalker(traversal, adapter).run(message)

    def redact_message(self, message: Any, adapter: MessageAdapter | None = None) -> str:
        """Render a structured message applying its field options."""
        traversal = Traversal(self._options, self._formatters, redact=True)
        return MessageWalker(traversal, adapter).run(message)

    def with_options(self, **overrides: Any) -> Marshaller:
        """Return a new Marshaller with some options replaced."""
        return Marshaller(self._options, **overrides)

    def with_type_formatter(self, type_: Any, formatter: TypeFormatter) -> Marshaller:
        """Return a new Marshaller that renders ``type_`` with ``formatter``.

        Args:
            type_: Canonical type name, class or annotation (``list[int]``).
            formatter: Callable receiving the value and returning its text.
        """
        registry = self._formatters.with_formatter(type_, formatter)
        return Marshaller(self._options, type_formatters=registry.as_dict())

    def with_type_formatters(self, formatters: Mapping[Any, TypeFormatter]) -> Marshaller:
        """Return a new Marshaller with several formatters added."""
        registry = self._formatters
        for type_, formatter in formatters.items():
            registry = registry.with_formatter(type_, formatter)
        return Marshaller(self._options, type_formatters=registry.as_dict())


def render(value: Any, as_type: Any = None) -> str:
    """Render a value with a default Marshaller."""
    return Marshaller().render(value, as_type)


def redact(value: Any, as_type: Any = None) -> str:
    """Render a value with a default Marshaller, applying redaction."""
    return Marshaller().redact(value, as_type)


def render_message(message: Any) -> str:
    return Marshaller().render_message(message)


def redact_message(message: Any) -> str:
    return Marshaller().redact_message(message)
