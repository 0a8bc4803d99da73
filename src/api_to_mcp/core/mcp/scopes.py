"""Access scopes required to invoke generated tools."""

from enum import Flag


class McpScope(Flag):
    """Bitmask of operations a caller may perform through MCP tools.

    READ covers GET, WRITE covers POST/PUT/PATCH, DELETE covers DELETE.
    """

    NONE = 0
    READ = 1
    WRITE = 2
    DELETE = 4
    ALL = READ | WRITE | DELETE

    @classmethod
    def for_http_method(cls, method: str) -> "McpScope":
        """Default scope for an HTTP verb."""
        verb = method.upper()
        if verb in {"GET", "HEAD", "OPTIONS"}:
            return cls.READ
        if verb == "DELETE":
            return cls.DELETE
        return cls.WRITE

    @classmethod
    def parse(cls, value: "str | int | McpScope") -> "McpScope":
        """Parse a scope from an int mask, a member name, or a '|'/','-separated list of names."""
        if isinstance(value, McpScope):
            return value
        if isinstance(value, int):
            return cls(value)
        result = cls.NONE
        for part in str(value).replace(",", "|").split("|"):
            name = part.strip().upper()
            if not name:
                continue
            if name.isdigit():
                result |= cls(int(name))
                continue
            try:
                result |= cls[name]
            except KeyError as e:
                raise ValueError(f"Unknown scope: {part.strip()!r}") from e
        return result

    @property
    def label(self) -> str:
        """Readable name, e.g. 'Read' or 'Read|Write'."""
        if self == McpScope.NONE:
            return "None"
        if self == McpScope.ALL:
            return "All"
        return "|".join(
            member.name.capitalize()
            for member in (McpScope.READ, McpScope.WRITE, McpScope.DELETE)
            if member in self and member.name
        )
