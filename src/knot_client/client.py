"""Knot backend client: one method per backend operation.

Every method returns an ``ApiResult``; failures are reported through
``success=False`` and ``error`` rather than raised.
"""

import logging
from collections.abc import Iterable, Sequence
from typing import Any

from pydantic import TypeAdapter, ValidationError

from knot_client.models import (
    Api,
    ApiCreate,
    ApiDetail,
    ApiResult,
    ApiUpdate,
    CreatedApi,
    Group,
    GroupSummary,
    GroupWithApis,
    OrderEntry,
    ParamType,
    ParameterCount,
    ParameterInput,
    ParameterNode,
)
from knot_client.transport import PARSE_ERROR, HttpTransport
from knot_client.tree import build_parameter_trees

logger = logging.getLogger(__name__)

API_BASE = "/api"


class KnotClient:
    """Client for the Knot API catalog backend."""

    def __init__(self, base_url: str | None = None, transport: HttpTransport | None = None):
        self.transport = transport or HttpTransport(base_url=base_url)

    def __enter__(self) -> "KnotClient":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    def close(self) -> None:
        self.transport.close()

    def _call(self, method: str, path: str, body: Any = None, schema: Any = None) -> ApiResult:
        """Issue a request and validate a successful payload against ``schema``."""
        result = self.transport.request(method, f"{API_BASE}{path}", body)
        if schema is None or not result.success or result.data is None:
            return result
        try:
            data = TypeAdapter(schema).validate_python(result.data)
        except ValidationError as e:
            logger.warning("Unexpected payload from %s %s: %s", method, path, e)
            return ApiResult.fail(PARSE_ERROR)
        return ApiResult.ok(data)

    # -- groups ---------------------------------------------------------------

    def get_groups_with_apis(self) -> ApiResult[list[GroupWithApis]]:
        return self._call("GET", "/groups/with-apis", schema=list[GroupWithApis])

    def get_groups(self) -> ApiResult[list[GroupSummary]]:
        """List groups without their APIs."""
        return self._call("GET", "/groups", schema=list[GroupSummary])

    def create_group(self, name: str) -> ApiResult[Group]:
        return self._call("POST", "/groups", {"name": name}, schema=Group)

    def rename_group(self, group_id: int, name: str) -> ApiResult[Group]:
        return self._call("PATCH", f"/groups/{group_id}", {"name": name}, schema=Group)

    def delete_group(self, group_id: int) -> ApiResult[None]:
        return self._call("DELETE", f"/groups/{group_id}")

    def update_group_orders(self, orders: Iterable[OrderEntry]) -> ApiResult[None]:
        body = {"groupOrders": [entry.to_wire() for entry in orders]}
        return self._call("POST", "/groups/orders", body)

    # -- apis -----------------------------------------------------------------

    def get_api(self, api_id: int) -> ApiResult[ApiDetail]:
        """Fetch one API with its parameters arranged as request/response trees."""
        result = self._call("GET", f"/apis/{api_id}", schema=ApiDetail)
        if not result.success or result.data is None:
            return result

        detail: ApiDetail = result.data
        trees = build_parameter_trees(detail.parameters)
        return ApiResult.ok(
            detail.model_copy(
                update={
                    "request_parameters": trees.request,
                    "response_parameters": trees.response,
                    "dropped_parameters": trees.dropped,
                }
            )
        )

    def get_apis_by_group(self, group_id: int) -> ApiResult[list[Api]]:
        return self._call("GET", f"/apis/group/{group_id}", schema=list[Api])

    def create_api(self, api: ApiCreate) -> ApiResult[Api]:
        return self._call("POST", "/apis", api.to_wire(), schema=Api)

    def update_api(self, api_id: int, changes: ApiUpdate) -> ApiResult[Api]:
        """Patch the fields set on ``changes``. Use update_api_note to clear a note."""
        body = changes.to_wire(exclude_unset=True)
        return self._call("PATCH", f"/apis/{api_id}", body, schema=Api)

    def update_api_note(self, api_id: int, note: str | None) -> ApiResult[Api]:
        return self._call("PATCH", f"/apis/{api_id}/note", {"note": note}, schema=Api)

    def delete_api(self, api_id: int) -> ApiResult[None]:
        return self._call("DELETE", f"/apis/{api_id}")

    def update_api_orders(self, orders: Iterable[OrderEntry]) -> ApiResult[None]:
        body = {"apiOrders": [entry.to_wire() for entry in orders]}
        return self._call("POST", "/apis/orders", body)

    # -- parameters -----------------------------------------------------------

    def update_api_parameters_from_json(
        self, api_id: int, param_type: ParamType, document: dict
    ) -> ApiResult[dict]:
        """Let the backend derive parameters from an example JSON document.

        Existing parameters of ``param_type`` are replaced; the backend keeps
        the required flag and description of parameters whose names match.
        """
        body = {"paramType": param_type, "json": document}
        return self._call("POST", f"/apis/{api_id}/parameters/from-json", body)

    def update_api_parameters_from_structure(
        self,
        api_id: int,
        param_type: ParamType,
        parameters: Sequence[ParameterInput | ParameterNode],
    ) -> ApiResult[ParameterCount]:
        """Replace all ``param_type`` parameters of an API with the given tree."""
        body = {"paramType": param_type, "parameters": [p.to_wire() for p in parameters]}
        return self._call("PUT", f"/apis/{api_id}/parameters", body, schema=ParameterCount)

    def create_api_with_parameters(
        self,
        api: ApiCreate,
        request_parameters: Sequence[ParameterInput] | None = None,
        response_parameters: Sequence[ParameterInput] | None = None,
    ) -> ApiResult[CreatedApi]:
        """Create an API, then its request and response parameters.

        If a parameter step fails the new API is deleted again. The calls run
        one after another; there is no transaction on the backend.
        """
        created = self.create_api(api)
        if not created.success or created.data is None:
            return ApiResult.fail(created.error or "Failed to create API")

        api_id = created.data.id
        for param_type, params in (("request", request_parameters), ("response", response_parameters)):
            if not params:
                continue
            result = self.update_api_parameters_from_structure(api_id, param_type, params)
            if not result.success:
                logger.warning(
                    "Creating %s parameters for API %s failed: %s", param_type, api_id, result.error
                )
                return self._discard_created_api(api_id, f"Failed to create {param_type} parameters")

        return ApiResult.ok(
            CreatedApi(
                id=api_id,
                name=api.name,
                endpoint=api.endpoint,
                method=api.method,
                type=api.type,
                request_parameter_count=len(request_parameters or []),
                response_parameter_count=len(response_parameters or []),
            )
        )

    def _discard_created_api(self, api_id: int, error: str) -> ApiResult:
        cleanup = self.delete_api(api_id)
        if cleanup.success:
            return ApiResult.fail(error)
        logger.error("Cleanup of API %s failed: %s", api_id, cleanup.error)
        return ApiResult.fail(
            f"{error}; cleanup of API {api_id} failed ({cleanup.error}), manual cleanup required"
        )

    # -- misc -----------------------------------------------------------------

    def health(self) -> ApiResult[dict]:
        return self._call("GET", "/health")
