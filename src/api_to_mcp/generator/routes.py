"""Route template conversion and scalar type tables.

Route templates use the ``{name}``, ``{name:constraint}``, ``{name?}``,
``{name:constraint?}`` and catch-all ``{*name}`` placeholder forms. The
converter rewrites every placeholder it can bind to a flat ``{route<name>}``
variable; placeholders it cannot bind are left exactly as written.
"""

import keyword
import re
from collections.abc import Iterable, Sequence
from dataclasses import dataclass

from api_to_mcp.generator.models import ParameterDescriptor, strip_controller_suffix

_CONTROLLER_TOKEN = re.compile(r"\[controller\]", re.IGNORECASE)
_GENERIC = re.compile(r"^(?:[\w.]+\.)?(?P<outer>\w+)<(?P<inner>.+)>$")
_SUBSCRIPT = re.compile(r"^(?P<outer>\w+)\[(?P<inner>[^,\[\]]+)\]$")
_IDENTIFIER_CHARS = re.compile(r"\W")

_INTEGER_TYPES = frozenset(
    {
        "int", "Int32", "long", "Int64", "short", "Int16", "byte", "Byte",
        "sbyte", "SByte", "ushort", "UInt16", "uint", "UInt32", "ulong", "UInt64",
        "nint", "IntPtr", "nuint", "UIntPtr", "Int128", "UInt128",
    }
)
_FLOAT_TYPES = frozenset(
    {"double", "Double", "float", "Single", "decimal", "Decimal", "Half"}
)
_BOOL_TYPES = frozenset({"bool", "Boolean"})
_OTHER_VALUE_TYPES = frozenset(
    {
        "char", "Char", "Guid", "DateTime", "DateTimeOffset", "TimeSpan",
        "DateOnly", "TimeOnly",
        # Python spellings
        "UUID", "uuid.UUID", "datetime", "datetime.datetime", "date",
        "datetime.date", "time", "datetime.time", "timedelta",
        "datetime.timedelta", "decimal.Decimal",
    }
)
_VALUE_TYPES = _INTEGER_TYPES | _FLOAT_TYPES | _BOOL_TYPES | _OTHER_VALUE_TYPES
_STRING_TYPES = frozenset({"string", "String", "str"})
_CANCELLATION_TYPES = frozenset({"CancellationToken", "Threading.CancellationToken"})
_COLLECTION_TYPES = frozenset(
    {
        "List", "IList", "IEnumerable", "ICollection", "IReadOnlyList",
        "IReadOnlyCollection", "HashSet", "ISet", "list", "set", "tuple",
        "Sequence",
    }
)

# Names the generated execute() body assigns or imports.
RESERVED_NAMES = frozenset(
    {
        "self", "route", "query_parts", "query_value", "body_json", "quote", "format_value",
        "serialize_body", "McpScope", "Annotated", "Any", "Field", "BaseModel",
        "ConfigDict", "HttpInvoker",
    }
)


def normalize_type_name(type_name: str) -> str:
    """Strip nullability markers and ``System.`` / ``global::`` prefixes."""
    name = type_name.strip()
    if name.startswith("global::"):
        name = name[len("global::"):]
    if name.endswith("?"):
        name = name[:-1]
    for wrapper in ("Nullable<", "System.Nullable<", "Optional["):
        if name.startswith(wrapper) and name[-1] in ">]":
            name = name[len(wrapper):-1].strip()
    if name.startswith("System."):
        name = name[len("System."):]
    return name


def type_is_nullable(flag: bool, type_name: str) -> bool:
    """Nullable when flagged or when the type carries a `?` marker."""
    return flag or type_name.strip().endswith("?")


def is_value_type(type_name: str) -> bool:
    return normalize_type_name(type_name) in _VALUE_TYPES


def is_string_type(type_name: str) -> bool:
    return normalize_type_name(type_name) in _STRING_TYPES


def is_complex_type(type_name: str) -> bool:
    """True for anything that is neither a string nor a built-in value type."""
    return not is_value_type(type_name) and not is_string_type(type_name)


def is_cancellation_token(type_name: str) -> bool:
    return normalize_type_name(type_name) in _CANCELLATION_TYPES


def scalar_annotation(type_name: str) -> str | None:
    """Python annotation for a scalar type, or None when the type is complex."""
    name = normalize_type_name(type_name)
    if name in _INTEGER_TYPES:
        return "int"
    if name in _FLOAT_TYPES or name == "decimal.Decimal":
        return "float"
    if name in _BOOL_TYPES:
        return "bool"
    if name in _VALUE_TYPES or name in _STRING_TYPES:
        return "str"
    return None


def collection_element_type(type_name: str) -> str | None:
    """Element type of a collection of scalars (``List<int>``, ``string[]``)."""
    name = normalize_type_name(type_name)
    element = None
    if name.endswith("[]"):
        element = name[:-2]
    else:
        match = _GENERIC.match(name) or _SUBSCRIPT.match(name)
        if match and match.group("outer") in _COLLECTION_TYPES:
            element = match.group("inner")
    if element is not None and not is_complex_type(element):
        return element
    return None


def python_identifier(name: str) -> str:
    """Turn an arbitrary wire name into a usable Python identifier."""
    identifier = _IDENTIFIER_CHARS.sub("_", name.strip()) or "_"
    if identifier[0].isdigit():
        identifier = f"_{identifier}"
    if keyword.iskeyword(identifier) or identifier in RESERVED_NAMES:
        identifier = f"{identifier}_"
    return identifier


def resolve_controller_token(template: str, controller_name: str) -> str:
    """Replace ``[controller]`` with the lower-cased controller base name."""
    return _CONTROLLER_TOKEN.sub(
        lambda _: strip_controller_suffix(controller_name).lower(), template
    )


@dataclass(frozen=True)
class Placeholder:
    """One ``{...}`` segment of a route template."""

    raw: str
    name: str
    catch_all: bool = False
    optional: bool = False


def parse_placeholder(raw: str) -> Placeholder:
    inner = raw
    catch_all = inner.startswith("*")
    inner = inner.lstrip("*")
    optional = inner.endswith("?")
    if optional:
        inner = inner[:-1]
    name = re.split(r"[:=]", inner, maxsplit=1)[0].strip()
    return Placeholder(raw=raw, name=name, catch_all=catch_all, optional=optional)


def _scan_placeholders(template: str) -> list[tuple[int, int, str]]:
    """Find ``{...}`` placeholders as ``(start, end, inner)`` spans.

    ``{{`` and ``}}`` are escaped braces: outside a placeholder they are
    literal text, inside one they belong to the constraint (regex
    quantifiers such as ``{{2}}``).
    """
    spans = []
    i, n = 0, len(template)
    while i < n:
        if template.startswith("{{", i) or template.startswith("}}", i):
            i += 2
            continue
        if template[i] != "{":
            i += 1
            continue
        j = i + 1
        while j < n:
            if template.startswith("{{", j) or template.startswith("}}", j):
                j += 2
            elif template[j] == "}":
                break
            else:
                j += 1
        if j >= n:
            break
        spans.append((i, j + 1, template[i + 1 : j]))
        i = j + 1
    return spans


def route_placeholders(template: str) -> list[Placeholder]:
    return [parse_placeholder(inner) for _, _, inner in _scan_placeholders(template)]


def route_contains_parameter(template: str, name: str) -> bool:
    """Exact, case-sensitive check for a placeholder named ``name``."""
    return any(p.name == name for p in route_placeholders(template))


def route_contains_property(template: str, parameter: ParameterDescriptor) -> bool:
    """True when one of the parameter's properties names a placeholder (any case)."""
    names = {p.name.lower() for p in route_placeholders(template)}
    return any(prop.name.lower() in names for prop in parameter.properties)


@dataclass(frozen=True)
class RouteBinding:
    """How one flat route variable gets its value at call time."""

    variable: str
    source: str
    type_name: str
    is_nullable: bool = False
    catch_all: bool = False
    parent: str | None = None
    parent_nullable: bool = False

    def value_expression(self) -> str:
        """Python expression producing the percent-encoded segment."""
        safe = "/" if self.catch_all else ""
        formatted = f'quote(format_value({self.source}), safe="{safe}")'
        checks = []
        if self.parent is not None and self.parent_nullable:
            checks.append(f"{self.parent} is None")
        if self.is_nullable:
            checks.append(f"{self.source} is None")
        if checks:
            return f'"" if {" or ".join(checks)} else {formatted}'
        return formatted


@dataclass(frozen=True)
class ConvertedRoute:
    template: str
    bindings: tuple[RouteBinding, ...]

    @property
    def variables(self) -> set[str]:
        return {b.variable for b in self.bindings}

    def as_fstring_body(self) -> str:
        """Template text with unbound braces escaped for an f-string."""
        variables = self.variables
        pieces = []
        last = 0
        for start, end, inner in _scan_placeholders(self.template):
            pieces.append(_escape_braces(self.template[last:start]))
            if inner in variables:
                pieces.append(self.template[start:end])
            else:
                pieces.append(_escape_braces(self.template[start:end]))
            last = end
        pieces.append(_escape_braces(self.template[last:]))
        return "".join(pieces)


def _escape_braces(text: str) -> str:
    return text.replace("{", "{{").replace("}", "}}")


def convert_route_template(
    template: str,
    route_params: Sequence[ParameterDescriptor],
    complex_params: Iterable[ParameterDescriptor] = (),
) -> ConvertedRoute:
    """Rewrite bindable placeholders to ``{route<name>}`` variables.

    Direct parameters match by exact name. Otherwise the properties of
    ``complex_params`` are searched case-insensitively, and a match binds
    ``<param>.<Property>`` under ``{route<param>_<Property>}``.
    """
    direct = {p.name: p for p in route_params}
    complex_list = [p for p in complex_params if p.properties]
    bindings: dict[str, RouteBinding] = {}

    pieces = []
    last = 0
    for start, end, inner in _scan_placeholders(template):
        pieces.append(template[last:start])
        binding = _bind(parse_placeholder(inner), direct, complex_list)
        if binding is None:
            pieces.append(template[start:end])
        else:
            bindings.setdefault(binding.variable, binding)
            pieces.append("{" + binding.variable + "}")
        last = end
    pieces.append(template[last:])
    return ConvertedRoute(template="".join(pieces), bindings=tuple(bindings.values()))


def _bind(
    placeholder: Placeholder,
    direct: dict[str, ParameterDescriptor],
    complex_params: list[ParameterDescriptor],
) -> RouteBinding | None:
    param = direct.get(placeholder.name)
    if param is not None:
        return RouteBinding(
            variable=f"route{python_identifier(param.name).rstrip('_')}",
            source=python_identifier(param.name),
            type_name=param.type_name,
            is_nullable=type_is_nullable(param.is_nullable, param.type_name),
            catch_all=placeholder.catch_all,
        )

    wanted = placeholder.name.lower()
    for param in complex_params:
        for prop in param.properties:
            if prop.name.lower() != wanted:
                continue
            param_id = python_identifier(param.name)
            return RouteBinding(
                variable=f"route{param_id.rstrip('_')}_{python_identifier(prop.name).rstrip('_')}",
                source=f"{param_id}.{python_identifier(prop.name)}",
                type_name=prop.type_name,
                is_nullable=type_is_nullable(prop.is_nullable, prop.type_name),
                catch_all=placeholder.catch_all,
                parent=param_id,
                parent_nullable=param.is_nullable,
            )
    return None
