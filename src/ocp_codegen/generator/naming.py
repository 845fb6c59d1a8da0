"""Identifier normalization shared by every emitter.

Schema names arrive in any convention (camelCase, kebab-case, dotted).
All generated identifiers go through these helpers so that a name maps to
the same Python identifier regardless of protocol kind:

  getUser        -> get_user   / GetUser
  user-profiles  -> user_profiles / UserProfiles
  /users/{id}    -> path tokens ["id"], template "/users/{}"
"""

import json
import keyword
import re

_PATH_TOKEN = re.compile(r"\{([^{}]+)\}")

# Names a generated method cannot use for its own parameters
_RESERVED = {"self", "body", "params", "handler", "payload"}


def _camel_to_snake(name: str) -> str:
    """Convert camelCase or PascalCase to snake_case."""
    s1 = re.sub(r"([A-Z]+)([A-Z][a-z])", r"\1_\2", name)
    return re.sub(r"([a-z\d])([A-Z])", r"\1_\2", s1).lower()


def _words(name: str) -> list[str]:
    snake = _camel_to_snake(name)
    snake = re.sub(r"[^a-z0-9]+", "_", snake)
    return [w for w in snake.split("_") if w]


def _safe(identifier: str) -> str:
    if not identifier:
        return "_"
    if identifier[0].isdigit():
        identifier = "_" + identifier
    if keyword.iskeyword(identifier):
        identifier += "_"
    return identifier


def to_snake(name: str) -> str:
    """Return a snake_case Python identifier for a schema name."""
    return _safe("_".join(_words(name)))


def to_pascal(name: str) -> str:
    """Return a PascalCase Python identifier for a schema name."""
    return _safe("".join(w.capitalize() for w in _words(name)))


def to_param(name: str) -> str:
    """Return a parameter identifier that cannot shadow generated locals."""
    ident = to_snake(name)
    if ident in _RESERVED:
        ident += "_"
    return ident


def package_name(name: str) -> str:
    return to_snake(name)


def extract_path_params(path: str) -> list[str]:
    """Return the {name} tokens of a path in order, without duplicates."""
    tokens: list[str] = []
    for match in _PATH_TOKEN.finditer(path):
        token = match.group(1).strip()
        if token and token not in tokens:
            tokens.append(token)
    return tokens


def path_template(path: str) -> str:
    """Replace every {name} token with a positional {} placeholder.

    Literal braces outside tokens are doubled so the result is safe for
    str.format.
    """
    pieces = _PATH_TOKEN.split(path)
    # split() alternates literal text and token names
    literals = [p.replace("{", "{{").replace("}", "}}") for p in pieces[::2]]
    return "{}".join(literals)


def path_args(path: str) -> list[str]:
    """Return the token for each placeholder of path_template(path), in order."""
    return [m.group(1).strip() for m in _PATH_TOKEN.finditer(path)]


def literal(text: str) -> str:
    """Render text as a double-quoted Python string literal."""
    return json.dumps(text)


def docstring(text: str, indent: str) -> list[str]:
    """Render a triple-quoted docstring as source lines."""
    text = " ".join(text.split())
    text = text.replace("\\", "\\\\").replace('"""', '\\"\\"\\"')
    if text.endswith('"'):
        text += " "
    return [f'{indent}"""{text}"""']
