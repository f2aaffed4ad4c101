"""Layout skeleton and the per-request composed template set.

A ``TemplateSet`` starts out holding three templates:

- ``layout`` — the fixed outer HTML document, rendered last;
- ``head`` and ``body`` — empty slots the layout includes.

The assembler then defines one fragment per ``*.html.tmpl`` file found
along the resolved path. A later definition replaces an earlier one of
the same name, so deeper directories override shallower ones. Any
fragment can include any other by name::

    {# body.html.tmpl #}
    <h1>{% include "title" %}</h1>

Sources are parsed on definition, so syntax errors surface during
resolution (as ``TemplateParseError``) rather than mid-render.

The set is built fresh for every request and never cached.
"""

from collections.abc import Callable, Iterator, Mapping
from dataclasses import dataclass
from typing import Any

from kida import DictLoader, Environment
from kida.exceptions import TemplateSyntaxError
from kida.lexer import LexerError

from htmplx.config import HandlerConfig
from htmplx.errors import TemplateParseError

LAYOUT_NAME = "layout"

_LAYOUT_TEMPLATE = """\
<!DOCTYPE html>
<html>
	<head>
		{{% include "{head}" %}}
	</head>

	<body>
		{{% include "{body}" %}}
	</body>
</html>
"""


def layout_source(config: HandlerConfig) -> str:
    """The layout skeleton with the configured slot names."""
    return _LAYOUT_TEMPLATE.format(head=config.head_name, body=config.body_name)


@dataclass(frozen=True, slots=True)
class Fragment:
    """One named template source and where it came from.

    ``path`` is the slash-separated location of the source file relative
    to the site root, or ``"<layout>"`` for the built-in defaults.
    """

    name: str
    source: str
    path: str = "<layout>"


class TemplateSet(Mapping[str, Fragment]):
    """Mutable mapping of fragment name to fragment, seeded with the layout."""

    __slots__ = ("_config", "_fragments", "_parser")

    def __init__(self, config: HandlerConfig | None = None) -> None:
        self._config = config or HandlerConfig()
        self._parser = Environment(autoescape=self._config.autoescape)
        self._fragments: dict[str, Fragment] = {
            LAYOUT_NAME: Fragment(LAYOUT_NAME, layout_source(self._config)),
            self._config.head_name: Fragment(self._config.head_name, ""),
            self._config.body_name: Fragment(self._config.body_name, ""),
        }

    def __getitem__(self, name: str) -> Fragment:
        return self._fragments[name]

    def __iter__(self) -> Iterator[str]:
        return iter(self._fragments)

    def __len__(self) -> int:
        return len(self._fragments)

    def __repr__(self) -> str:
        return f"TemplateSet({sorted(self._fragments)!r})"

    def define(self, name: str, source: str, path: str) -> Fragment:
        """Parse *source* and store it under *name*, replacing any earlier one.

        Raises:
            TemplateParseError: The source is not a valid template.
        """
        try:
            self._parser.from_string(source)
        except (TemplateSyntaxError, LexerError) as exc:
            raise TemplateParseError(name, path, str(exc)) from exc

        fragment = Fragment(name, source, path)
        self._fragments[name] = fragment
        return fragment

    def environment(
        self,
        *,
        filters: Mapping[str, Callable[..., Any]] | None = None,
        globals_: Mapping[str, Any] | None = None,
    ) -> Environment:
        """Build a kida Environment serving exactly this set's fragments."""
        env = Environment(
            loader=DictLoader({name: f.source for name, f in self._fragments.items()}),
            autoescape=self._config.autoescape,
        )
        if filters:
            env.update_filters(dict(filters))
        for name, value in (globals_ or {}).items():
            env.add_global(name, value)
        return env

    def render(
        self,
        context: Mapping[str, Any],
        *,
        filters: Mapping[str, Callable[..., Any]] | None = None,
        globals_: Mapping[str, Any] | None = None,
    ) -> str:
        """Render the layout (and through it every included fragment)."""
        env = self.environment(filters=filters, globals_=globals_)
        template = env.get_template(LAYOUT_NAME)
        return template.render(dict(context))
