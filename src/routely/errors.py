"""Routely exception hierarchy.

Everything raised while building a route table derives from
:class:`BuildError`. Dispatch itself never raises for a non-matching
request; handler exceptions propagate untouched.
"""


class RouterError(Exception):
    """Base for all routely-specific errors."""


class BuildError(RouterError):
    """Raised when a route table cannot be constructed."""


class TemplateError(BuildError, ValueError):
    """A path template is malformed."""


class UnknownParamType(TemplateError):  # noqa: N818
    """A placeholder names a type tag that is not registered."""

    def __init__(self, tag: str, template: str | None = None) -> None:
        self.tag = tag
        self.template = template
        where = f" in {template!r}" if template else ""
        super().__init__(f"Unknown path parameter type: {tag!r}{where}")


class MissingFallback(BuildError):  # noqa: N818
    """No usable fallback handler was supplied."""


class DuplicateHome(BuildError):  # noqa: N818
    """More than one route was declared for the root path."""


class ConfigError(BuildError):
    """A declarative route file could not be loaded."""


class UnknownVerb(RouterError, ValueError):  # noqa: N818
    """A method string does not name a supported HTTP verb."""
