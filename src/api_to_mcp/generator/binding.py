"""Decide where each action parameter travels on the outgoing request."""

from dataclasses import dataclass
from enum import StrEnum

from api_to_mcp.generator.models import (
    BindingSource,
    EndpointDescriptor,
    ParameterDescriptor,
)
from api_to_mcp.generator.routes import (
    is_cancellation_token,
    is_complex_type,
    resolve_controller_token,
    route_contains_parameter,
    route_contains_property,
)


class Binding(StrEnum):
    ROUTE = "route"
    QUERY = "query"
    BODY = "body"
    SKIP = "skip"


@dataclass(frozen=True)
class ClassifiedParameter:
    parameter: ParameterDescriptor
    binding: Binding
    skip_reason: str | None = None

    @property
    def is_exposed(self) -> bool:
        return self.binding != Binding.SKIP


def classify_parameter(
    parameter: ParameterDescriptor, action: EndpointDescriptor, route_template: str
) -> ClassifiedParameter:
    """Classify one parameter against an already token-resolved route."""
    if parameter.source == BindingSource.SERVICES:
        return ClassifiedParameter(parameter, Binding.SKIP, "injected service")
    if is_cancellation_token(parameter.type_name):
        return ClassifiedParameter(parameter, Binding.SKIP, "cancellation token")
    if parameter.source == BindingSource.HEADER:
        return ClassifiedParameter(parameter, Binding.SKIP, "request header")

    if parameter.source == BindingSource.ROUTE:
        return ClassifiedParameter(parameter, Binding.ROUTE)
    if parameter.source == BindingSource.QUERY:
        return ClassifiedParameter(parameter, Binding.QUERY)
    if parameter.source == BindingSource.BODY:
        return ClassifiedParameter(parameter, Binding.BODY)

    if action.http_method.has_body and is_complex_type(parameter.type_name):
        return ClassifiedParameter(parameter, Binding.BODY)

    if route_contains_parameter(route_template, parameter.name) or route_contains_property(
        route_template, parameter
    ):
        return ClassifiedParameter(parameter, Binding.ROUTE)
    return ClassifiedParameter(parameter, Binding.QUERY)


def classify_parameters(action: EndpointDescriptor) -> list[ClassifiedParameter]:
    """Classify every parameter of ``action`` in declaration order.

    Route binding takes precedence over the query string, so a parameter is
    never classified as both.
    """
    route_template = resolve_controller_token(action.route_template, action.controller_name)
    return [classify_parameter(p, action, route_template) for p in action.parameters]
