"""Layered option resolution.

Options for a run come from up to three places, resolved per option:

1. Options given explicitly for this run
2. Options recorded in a resume settings file
3. Built-in defaults of GeneratorOptions

The first layer holding a non-None value for an option wins.
"""

from collections.abc import Mapping
from typing import Any

from pydantic import ValidationError

from sdfatlas.config.settings import GeneratorOptions
from sdfatlas.exceptions import ConfigurationError


def _format_validation_error(error: ValidationError) -> str:
    messages = []
    for item in error.errors():
        location = ".".join(str(part) for part in item["loc"])
        messages.append(f"{location}: {item['msg']}")
    return "; ".join(messages)


class LayeredOptions:
    """Resolves generator options from prioritized layers.

    Example:
        layers = LayeredOptions({"font_size": 64}, resumed.opt)
        options = layers.resolve()
    """

    def __init__(self, *layers: Mapping[str, Any] | None) -> None:
        """Initialize the resolver.

        Args:
            layers: Option mappings, highest priority first. None entries
                are treated as empty layers.
        """
        self._layers: list[dict[str, Any]] = [dict(layer or {}) for layer in layers]

    def get(self, name: str) -> Any:
        """Get the winning value for an option, or None if no layer sets it."""
        for layer in self._layers:
            value = layer.get(name)
            if value is not None:
                return value
        return None

    def source_of(self, name: str) -> int | None:
        """Get the index of the layer supplying an option (None = default)."""
        for index, layer in enumerate(self._layers):
            if layer.get(name) is not None:
                return index
        return None

    def resolve(self) -> GeneratorOptions:
        """Resolve all options into validated GeneratorOptions.

        Returns:
            Validated options

        Raises:
            ConfigurationError: If a resolved value is invalid
        """
        values = {}
        for name in GeneratorOptions.model_fields:
            value = self.get(name)
            if value is not None:
                values[name] = value

        try:
            return GeneratorOptions(**values)
        except ValidationError as e:
            raise ConfigurationError(
                f"Invalid options: {_format_validation_error(e)}"
            ) from e
