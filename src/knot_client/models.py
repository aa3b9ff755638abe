"""Data models for the Knot API catalog.

The backend speaks camelCase JSON; models use snake_case attributes and
accept either form on input. Dump with ``by_alias=True`` to get wire format.
"""

from typing import Generic, Literal, TypeVar

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

T = TypeVar("T")

ValueType = Literal["string", "number", "boolean", "array", "object"]
ParamType = Literal["request", "response"]


class KnotModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_wire(self, **kwargs) -> dict:
        """Dump to the camelCase JSON shape the backend expects."""
        return self.model_dump(by_alias=True, exclude_none=True, mode="json", **kwargs)


class Group(KnotModel):
    """A named collection of API definitions."""

    id: int
    name: str
    order: int = 0
    created_at: str | None = None
    updated_at: str | None = None


class GroupSummary(KnotModel):
    id: int
    name: str


class Api(KnotModel):
    """A documented endpoint belonging to one group."""

    id: int
    group_id: int
    name: str
    method: str | None = None  # GET / POST / PUT / DELETE / PATCH
    endpoint: str
    type: str  # free-form classification tag
    note: str | None = None
    order: int = 0
    created_at: str | None = None
    updated_at: str | None = None


class GroupWithApis(Group):
    apis: list[Api] = []


class Parameter(KnotModel):
    """A named, typed field of an API's request or response shape."""

    id: int
    api_id: int
    name: str
    type: ValueType
    required: bool = False
    description: str | None = None
    param_type: str  # request / response
    parent_id: int | None = None
    order: int = 0


class ParameterNode(Parameter):
    """Tree view of a Parameter, built at read time for display."""

    children: list["ParameterNode"] = []


class DroppedParameter(KnotModel):
    """A parameter left out of both trees, with the reason it was excluded."""

    parameter: Parameter
    reason: Literal["unknown_category", "duplicate_id", "dangling_parent", "orphaned_ancestor", "cycle"]


class ApiDetail(Api):
    group: Group | None = None
    parameters: list[Parameter] = []
    request_parameters: list[ParameterNode] = []
    response_parameters: list[ParameterNode] = []
    dropped_parameters: list[DroppedParameter] = []


class ParameterInput(KnotModel):
    """Structured parameter sent when replacing an API's parameters wholesale."""

    name: str
    type: ValueType
    required: bool = False
    description: str | None = None
    children: list["ParameterInput"] = []


class ApiCreate(KnotModel):
    group_id: int
    name: str
    endpoint: str
    method: str | None = None
    type: str


class ApiUpdate(KnotModel):
    """Partial update; only fields that are set are sent."""

    group_id: int | None = None
    name: str | None = None
    method: str | None = None
    endpoint: str | None = None
    type: str | None = None
    note: str | None = None


class OrderEntry(KnotModel):
    id: int
    order: int


class ParameterCount(KnotModel):
    count: int


class CreatedApi(KnotModel):
    """Summary returned by the composite create-with-parameters operation."""

    id: int
    name: str
    endpoint: str
    method: str | None = None
    type: str
    request_parameter_count: int = 0
    response_parameter_count: int = 0


class ApiResult(BaseModel, Generic[T]):
    """Uniform result every client operation resolves to, instead of raising."""

    success: bool
    data: T | None = None
    error: str | None = None

    @classmethod
    def ok(cls, data=None) -> "ApiResult":
        return cls(success=True, data=data)

    @classmethod
    def fail(cls, error: str) -> "ApiResult":
        return cls(success=False, error=error)
