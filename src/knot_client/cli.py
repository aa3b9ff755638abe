"""CLI entry point for knot-client."""

import json
import logging
from pathlib import Path

import click
import yaml
from pydantic import TypeAdapter, ValidationError

from knot_client.client import KnotClient
from knot_client.config import get_log_level, get_locale
from knot_client.export import format_parameter_tree, generate_example_json
from knot_client.i18n import Translator, locale_from_env, resolve_locale
from knot_client.models import ApiCreate, ApiResult, OrderEntry, ParameterInput
from knot_client.tree import count_nodes

PARAM_TYPES = click.Choice(["request", "response"])


def _setup_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else get_log_level()
    logging.basicConfig(level=level, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    logging.getLogger("urllib3").setLevel(logging.WARNING)


def _unwrap(result: ApiResult):
    """Return the payload of a successful result, or abort with its error."""
    if not result.success:
        raise click.ClickException(result.error or "Request failed")
    return result.data


def _load_document(file_path: Path):
    """Load a YAML or JSON file (YAML is a superset, so one loader covers both)."""
    try:
        return yaml.safe_load(file_path.read_text(encoding="utf-8"))
    except yaml.YAMLError as e:
        raise click.BadParameter(f"{file_path}: {e}")


def _load_json_document(file_path: Path) -> dict:
    """Load a JSON object; unlike YAML this keeps every value JSON-typed."""
    try:
        document = json.loads(file_path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        raise click.BadParameter(f"{file_path}: {e}")
    if not isinstance(document, dict):
        raise click.BadParameter(f"{file_path}: expected a JSON object")
    return document


def _load_parameters(file_path: Path | None) -> list[ParameterInput] | None:
    if file_path is None:
        return None
    try:
        return TypeAdapter(list[ParameterInput]).validate_python(_load_document(file_path))
    except ValidationError as e:
        raise click.BadParameter(f"{file_path}: {e}")


def _parse_orders(values: tuple[str, ...]) -> list[OrderEntry]:
    """Parse ID=ORDER arguments."""
    orders = []
    for value in values:
        item_id, sep, order = value.partition("=")
        if not sep or not item_id.strip().isdigit() or not order.strip().lstrip("-").isdigit():
            raise click.BadParameter(f"expected ID=ORDER, got {value!r}")
        orders.append(OrderEntry(id=int(item_id), order=int(order)))
    return orders


@click.group()
@click.option("--base-url", default=None, help="Knot backend URL (default: $KNOT_BASE_URL or http://localhost:3000).")
@click.option("--locale", "locale_", default=None, help="UI language, e.g. en or zh-CN (default: $KNOT_LOCALE or terminal locale).")
@click.option("-v", "--verbose", is_flag=True, help="Log HTTP traffic.")
@click.pass_context
def main(ctx, base_url: str | None, locale_: str | None, verbose: bool):
    """Knot client — browse and edit the API catalog from the terminal."""
    _setup_logging(verbose)
    client = KnotClient(base_url=base_url)
    ctx.call_on_close(client.close)
    ctx.obj = {
        "client": client,
        "t": Translator(resolve_locale(locale_ or get_locale(), locale_from_env())),
    }


@main.command()
@click.option("--bare", is_flag=True, help="List groups without their APIs.")
@click.pass_obj
def groups(obj, bare: bool):
    """List groups and their APIs."""
    client, t = obj["client"], obj["t"]
    if bare:
        items = _unwrap(client.get_groups()) or []
        for group in items:
            click.echo(f"#{group.id} {group.name}")
    else:
        items = _unwrap(client.get_groups_with_apis()) or []
        for group in items:
            click.echo(f"#{group.id} {group.name}  ({t('group.apiCount', count=len(group.apis))})")
            for api in group.apis:
                click.echo(f"    #{api.id} {api.method or '-'} {api.endpoint}  {api.name}")
    if not items:
        click.echo(t("group.empty"))


@main.command("create-group")
@click.argument("name")
@click.pass_obj
def create_group(obj, name: str):
    """Create a group."""
    group = _unwrap(obj["client"].create_group(name))
    click.echo(obj["t"]("group.created", name=group.name, id=group.id))


@main.command("rename-group")
@click.argument("group_id", type=int)
@click.argument("name")
@click.pass_obj
def rename_group(obj, group_id: int, name: str):
    """Rename a group."""
    _unwrap(obj["client"].rename_group(group_id, name))
    click.echo(obj["t"]("group.renamed", id=group_id, name=name))


@main.command("delete-group")
@click.argument("group_id", type=int)
@click.pass_obj
def delete_group(obj, group_id: int):
    """Delete a group."""
    _unwrap(obj["client"].delete_group(group_id))
    click.echo(obj["t"]("group.deleted", id=group_id))


@main.command()
@click.argument("api_id", type=int)
@click.pass_obj
def show(obj, api_id: int):
    """Show one API with its request and response parameter trees."""
    t = obj["t"]
    api = _unwrap(obj["client"].get_api(api_id))

    click.echo(f"{api.method or '-'} {api.endpoint}  {api.name} (#{api.id})")
    if api.note:
        click.echo(f"{t('api.note')}: {api.note}")
    for title, nodes in (
        ("api.requestParameters", api.request_parameters),
        ("api.responseParameters", api.response_parameters),
    ):
        click.echo("")
        click.echo(f"{t(title)} ({count_nodes(nodes)})")
        for line in format_parameter_tree(nodes, t):
            click.echo(f"  {line}")
    if api.dropped_parameters:
        click.echo("")
        click.echo(t("api.droppedParameters", count=len(api.dropped_parameters)))


@main.command()
@click.argument("api_id", type=int)
@click.option("--param-type", default="response", type=PARAM_TYPES, help="Which parameter tree to use.")
@click.pass_obj
def example(obj, api_id: int, param_type: str):
    """Print an example JSON document for an API's parameters."""
    api = _unwrap(obj["client"].get_api(api_id))
    nodes = api.request_parameters if param_type == "request" else api.response_parameters
    click.echo(json.dumps(generate_example_json(nodes), indent=2, ensure_ascii=False))


@main.command("create-api")
@click.option("--group-id", required=True, type=int, help="Owning group.")
@click.option("--name", required=True)
@click.option("--endpoint", required=True, help="Endpoint path, e.g. /api/users/{id}.")
@click.option("--method", default=None, type=click.Choice(["GET", "POST", "PUT", "DELETE", "PATCH"], case_sensitive=False))
@click.option("--type", "api_type", default="http", help="Classification tag.")
@click.option("--request-params", default=None, type=click.Path(exists=True, path_type=Path), help="YAML/JSON list of request parameters.")
@click.option("--response-params", default=None, type=click.Path(exists=True, path_type=Path), help="YAML/JSON list of response parameters.")
@click.pass_obj
def create_api(obj, group_id: int, name: str, endpoint: str, method: str | None, api_type: str,
               request_params: Path | None, response_params: Path | None):
    """Create an API, optionally together with its parameters."""
    api = ApiCreate(
        group_id=group_id,
        name=name,
        endpoint=endpoint,
        method=method.upper() if method else None,
        type=api_type,
    )
    created = _unwrap(
        obj["client"].create_api_with_parameters(
            api,
            request_parameters=_load_parameters(request_params),
            response_parameters=_load_parameters(response_params),
        )
    )
    click.echo(obj["t"]("api.created", name=created.name, id=created.id))


@main.command("delete-api")
@click.argument("api_id", type=int)
@click.pass_obj
def delete_api(obj, api_id: int):
    """Delete an API."""
    _unwrap(obj["client"].delete_api(api_id))
    click.echo(obj["t"]("api.deleted", id=api_id))


@main.command()
@click.argument("api_id", type=int)
@click.argument("text", required=False)
@click.pass_obj
def note(obj, api_id: int, text: str | None):
    """Set an API's note; omit TEXT to clear it."""
    _unwrap(obj["client"].update_api_note(api_id, text))
    click.echo(obj["t"]("api.noteUpdated", id=api_id))


@main.command()
@click.argument("api_id", type=int)
@click.argument("file_path", type=click.Path(exists=True, path_type=Path))
@click.option("--param-type", required=True, type=PARAM_TYPES)
@click.pass_obj
def params(obj, api_id: int, file_path: Path, param_type: str):
    """Replace an API's parameters with the tree in FILE_PATH."""
    parameters = _load_parameters(file_path)
    result = _unwrap(obj["client"].update_api_parameters_from_structure(api_id, param_type, parameters))
    click.echo(obj["t"]("params.updated", count=result.count, paramType=param_type, id=api_id))


@main.command("params-from-json")
@click.argument("api_id", type=int)
@click.argument("file_path", type=click.Path(exists=True, path_type=Path))
@click.option("--param-type", required=True, type=PARAM_TYPES)
@click.pass_obj
def params_from_json(obj, api_id: int, file_path: Path, param_type: str):
    """Derive an API's parameters from an example JSON document."""
    document = _load_json_document(file_path)
    _unwrap(obj["client"].update_api_parameters_from_json(api_id, param_type, document))
    click.echo(obj["t"]("params.fromJson", paramType=param_type, id=api_id, file=file_path.name))


@main.command("reorder-apis")
@click.argument("orders", nargs=-1, required=True)
@click.pass_obj
def reorder_apis(obj, orders: tuple[str, ...]):
    """Set API display order, given as ID=ORDER pairs."""
    entries = _parse_orders(orders)
    _unwrap(obj["client"].update_api_orders(entries))
    click.echo(obj["t"]("order.updated", count=len(entries)))


@main.command("reorder-groups")
@click.argument("orders", nargs=-1, required=True)
@click.pass_obj
def reorder_groups(obj, orders: tuple[str, ...]):
    """Set group display order, given as ID=ORDER pairs."""
    entries = _parse_orders(orders)
    _unwrap(obj["client"].update_group_orders(entries))
    click.echo(obj["t"]("order.updated", count=len(entries)))
