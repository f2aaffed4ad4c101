"""Handler configuration.

HandlerConfig is a frozen dataclass — immutable after creation, IDE-autocompletable,
no string-key dict lookups.
"""

from dataclasses import dataclass
from pathlib import PurePosixPath

from htmplx.errors import ConfigurationError


@dataclass(frozen=True, slots=True)
class HandlerConfig:
    """Handler configuration. Immutable after creation.

    All fields have sensible defaults. Override what you need::

        config = HandlerConfig(not_found_marker="_gone", autoescape=False)
    """

    # Template tree layout
    template_suffix: str = ".html.tmpl"
    head_name: str = "head"
    body_name: str = "body"
    not_found_marker: str = "404"

    # Pattern directories, e.g. "{[0-9]+}"
    pattern_open: str = "{"
    pattern_close: str = "}"

    # Rendering
    autoescape: bool = True

    # Static files
    sniff_length: int = 512
    chunk_size: int = 64 * 1024

    # Include error detail in 404 response bodies
    debug: bool = False

    def __post_init__(self) -> None:
        if not self.template_suffix:
            raise ConfigurationError("template_suffix must not be empty")
        if not self.pattern_open or not self.pattern_close:
            raise ConfigurationError("pattern delimiters must not be empty")
        if self.sniff_length <= 0:
            raise ConfigurationError(f"sniff_length must be positive, got {self.sniff_length}")
        if self.chunk_size <= 0:
            raise ConfigurationError(f"chunk_size must be positive, got {self.chunk_size}")

    @property
    def hidden_extension(self) -> str:
        """The final extension of the template suffix (``.tmpl``).

        Any request path ending in this extension is never served.
        """
        return PurePosixPath("x" + self.template_suffix).suffix or self.template_suffix

    def head_file(self) -> str:
        return self.head_name + self.template_suffix

    def body_file(self) -> str:
        return self.body_name + self.template_suffix
