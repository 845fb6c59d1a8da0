"""Map schema FieldTypes onto Python type expressions.

One TypeMapper lives for exactly one generation run. Named objects are
registered the first time they are seen, and later occurrences of the same
name reuse that first definition. Definitions are kept in completion order,
so a nested type always precedes the type that contains it.
"""

import keyword
import logging
from dataclasses import dataclass

from ocp_codegen.errors import GenerationError
from ocp_codegen.generator.naming import docstring, literal, to_pascal
from ocp_codegen.schema.base import ArrayType, FieldType, ObjectType, PrimitiveType, RefType

logger = logging.getLogger(__name__)

PYTHON_PRIMITIVES = {
    "string": "str",
    "number": "float",
    "integer": "int",
    "boolean": "bool",
}

GRAPHQL_PRIMITIVES = {
    "string": "String",
    "number": "Float",
    "integer": "Int",
    "boolean": "Boolean",
}

INLINE_OBJECT = "dict[str, Any]"

# Names the generated modules import or define next to the shared types
RESERVED_CLASS_NAMES = frozenset({"Any", "Callable", "NotRequired", "TypedDict", "BaseClient", "ApiError"})


@dataclass(frozen=True)
class TypeExpression:
    """Source text of a type plus the shared type names it refers to."""

    text: str
    refs: tuple[str, ...] = ()


def is_optional(field: FieldType) -> bool:
    return field.optional or field.default is not None


class TypeMapper:
    """Resolves FieldTypes and collects the shared type definitions."""

    def __init__(self):
        self._objects: dict[str, ObjectType] = {}
        self._class_names: dict[str, str] = {}
        self._definitions: dict[str, list[str]] = {}

    # -- registration --------------------------------------------------------

    def declare(self, objects: dict[str, ObjectType]) -> None:
        """Register the shared types section.

        All names are reserved before any definition is rendered, so shared
        types may refer to each other regardless of declaration order.
        """
        for name, obj in objects.items():
            self._reserve(obj, f"types.{name}")
        for name, obj in objects.items():
            class_name = self._class_names[obj.name]
            if class_name not in self._definitions:
                self._definitions[class_name] = self._render_definition(class_name, obj, f"types.{name}")

    def register(self, obj: ObjectType, context: str) -> str:
        """Register a named object. Returns its class name."""
        if obj.name is None:
            raise GenerationError(f"{context}: Cannot register an unnamed object")
        if obj.name in self._class_names:
            return self._class_names[obj.name]

        # Reserve before walking fields so self-references resolve
        class_name = self._reserve(obj, context)
        self._definitions[class_name] = self._render_definition(class_name, obj, context)
        return class_name

    def _reserve(self, obj: ObjectType, context: str) -> str:
        if obj.name in self._class_names:
            return self._class_names[obj.name]
        class_name = to_pascal(obj.name)
        if class_name in RESERVED_CLASS_NAMES:
            raise GenerationError(f"{context}: Type '{obj.name}' would shadow the generated name {class_name}")
        if class_name in self._class_names.values():
            raise GenerationError(
                f"{context}: Type '{obj.name}' collides with another type named {class_name}"
            )
        self._objects[obj.name] = obj
        self._class_names[obj.name] = class_name
        logger.debug("Registered type %s as %s", obj.name, class_name)
        return class_name

    def resolve(self, field: FieldType, context: str) -> FieldType:
        """Follow a reference to the object registered under its name."""
        if isinstance(field, RefType):
            if field.name not in self._objects:
                raise GenerationError(f"{context}: Unresolved type reference '{field.name}'")
            return self._objects[field.name]
        if isinstance(field, ObjectType) and field.name in self._objects:
            return self._objects[field.name]
        return field

    def class_names(self) -> list[str]:
        return list(self._class_names.values())

    def definitions(self) -> list[list[str]]:
        """Source lines of every registered type, nested types first."""
        return list(self._definitions.values())

    # -- python types ----------------------------------------------------------

    def map_type(self, field: FieldType, context: str) -> TypeExpression:
        if isinstance(field, PrimitiveType):
            if field.name not in PYTHON_PRIMITIVES:
                raise GenerationError(f"{context}: Unsupported field type '{field.name}'")
            return TypeExpression(PYTHON_PRIMITIVES[field.name])

        if isinstance(field, ArrayType):
            inner = self.map_type(field.items, f"{context}.items")
            return TypeExpression(f"list[{inner.text}]", inner.refs)

        if isinstance(field, RefType):
            self.resolve(field, context)
            class_name = self._class_names[field.name]
            return TypeExpression(class_name, (class_name,))

        if field.name is not None:
            if field.name in self._objects and self._objects[field.name] != field:
                logger.debug("%s: reusing first definition of %s", context, field.name)
            class_name = self.register(field, context)
            return TypeExpression(class_name, (class_name,))

        for prop_name, prop in field.properties.items():
            self.map_type(prop, f"{context}.{prop_name}")
        return TypeExpression(INLINE_OBJECT)

    def map_default(self, field: FieldType, context: str = "default") -> str:
        """Return the Python literal used when an optional value is omitted.

        Only scalar defaults can appear in a generated signature.
        """
        if isinstance(field, PrimitiveType) and field.name not in PYTHON_PRIMITIVES:
            raise GenerationError(f"{context}: Unsupported field type '{field.name}'")
        if field.default is None:
            return "None"
        if not isinstance(field.default, (str, int, float, bool)):
            raise GenerationError(f"{context}: Default value must be a string, number or boolean")
        return repr(field.default)

    def annotation(self, field: FieldType, context: str) -> TypeExpression:
        """Type of a generated parameter, widened with None when it defaults to None."""
        expr = self.map_type(field, context)
        if is_optional(field) and field.default is None:
            return TypeExpression(f"{expr.text} | None", expr.refs)
        return expr

    def _render_definition(self, class_name: str, obj: ObjectType, context: str) -> list[str]:
        fields = []
        for prop_name, prop in obj.properties.items():
            expr = self.map_type(prop, f"{context}.{prop_name}")
            text = f"NotRequired[{expr.text}]" if is_optional(prop) else expr.text
            fields.append((prop_name, text))

        if all(name.isidentifier() and not keyword.iskeyword(name) for name, _ in fields):
            lines = [f"class {class_name}(TypedDict):"]
            if obj.description:
                lines.extend(docstring(obj.description, "    "))
            lines.extend(f"    {name}: {text}" for name, text in fields)
            if not fields and not obj.description:
                lines.append("    pass")
            return lines

        # Keys that are not identifiers need the functional form
        lines = [f"{class_name} = TypedDict("]
        lines.append(f"    {literal(class_name)},")
        lines.append("    {")
        lines.extend(f"        {literal(name)}: {literal(text)}," for name, text in fields)
        lines.append("    },")
        lines.append(")")
        return lines

    # -- graphql ---------------------------------------------------------------

    def map_graphql_type(self, field: FieldType, context: str) -> str:
        """GraphQL variable type, non-null unless the field is optional."""
        suffix = "" if is_optional(field) else "!"
        if isinstance(field, PrimitiveType):
            if field.name not in GRAPHQL_PRIMITIVES:
                raise GenerationError(f"{context}: Unsupported field type '{field.name}'")
            return GRAPHQL_PRIMITIVES[field.name] + suffix
        if isinstance(field, ArrayType):
            return f"[{self.map_graphql_type(field.items, f'{context}.items')}]{suffix}"
        expr = self.map_type(field, context)
        if expr.refs:
            return expr.refs[0] + suffix
        return "JSON" + suffix

    def selection_set(self, field: FieldType, context: str, _seen: tuple[str, ...] = ()) -> str:
        """Render the selection set that fetches every field of a response shape."""
        field = self.resolve(field, context)
        if isinstance(field, ArrayType):
            return self.selection_set(field.items, f"{context}.items", _seen)
        if isinstance(field, PrimitiveType):
            return ""

        seen = _seen + ((field.name,) if field.name else ())
        parts = []
        for prop_name, prop in field.properties.items():
            target = self.resolve(_element(prop), f"{context}.{prop_name}")
            if isinstance(target, ObjectType) and target.name and target.name in seen:
                continue
            inner = self.selection_set(prop, f"{context}.{prop_name}", seen)
            parts.append(f"{prop_name} {inner}" if inner else prop_name)
        if not parts:
            parts = ["__typename"]
        return "{ " + " ".join(parts) + " }"


def _element(field: FieldType) -> FieldType:
    while isinstance(field, ArrayType):
        field = field.items
    return field
