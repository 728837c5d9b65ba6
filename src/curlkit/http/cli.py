"""
HTTP CLI commands.
"""

import json

import click
from rich.console import Console
from rich.syntax import Syntax
from rich.table import Table

from curlkit.exceptions import CurlError, CurlkitError
from curlkit.http.request import Method, Request
from curlkit.http.response import FileResponse, Response
from curlkit.http.sender import Sender


def parse_header_args(header_strings: list[str]) -> dict[str, str]:
    """Parse header strings in 'Name: Value' format."""
    headers = {}
    for h in header_strings:
        if ":" in h:
            name, value = h.split(":", 1)
            headers[name.strip()] = value.strip()
    return headers


def parse_form_args(form_strings: list[str]) -> tuple[dict[str, str], dict[str, str]]:
    """Split 'name=value' and 'name=@path' arguments into fields and files."""
    fields: dict[str, str] = {}
    files: dict[str, str] = {}
    for f in form_strings:
        if "=" not in f:
            continue
        name, value = f.split("=", 1)
        if value.startswith("@"):
            files[name] = value[1:]
        else:
            fields[name] = value
    return fields, files


def format_json(data, indent: int = 2) -> str:
    """Format JSON data for display."""
    return json.dumps(data, indent=indent, default=str)


def _status_color(status_code: int) -> str:
    if 200 <= status_code < 300:
        return "green"
    if 300 <= status_code < 400:
        return "yellow"
    if 400 <= status_code < 500:
        return "red"
    return "red bold"


def _headers_table(headers: dict) -> Table:
    table = Table(box=None)
    table.add_column("Header", style="cyan")
    table.add_column("Value", style="white")
    for name, value in headers.items():
        if isinstance(value, list):
            for item in value:
                table.add_row(name, item)
        else:
            table.add_row(name, str(value))
    return table


def _print_body(console: Console, response: Response, raw: bool, verbose: bool) -> None:
    body = response.text
    if not body:
        return

    console.print()
    content_type = (response.content_type or "").lower()
    if not raw and "json" in content_type:
        try:
            formatted = format_json(json.loads(body))
            console.print(Syntax(formatted, "json", theme="monokai", line_numbers=False))
            return
        except json.JSONDecodeError:
            pass

    if len(body) > 2000 and not verbose and not raw:
        console.print(body[:2000], markup=False)
        console.print(f"\n[dim]... ({len(body) - 2000} more bytes)[/dim]")
    else:
        console.print(body, markup=False)


def _send(request: Request, follow: bool, timeout: int | None) -> Response:
    sender = Sender()
    sender.follow_redirects = follow
    if timeout is not None:
        sender.set_timeout(timeout)
    return sender.send(request)


@click.group()
def http():
    """Send HTTP requests through libcurl."""
    pass


@http.command("request")
@click.argument("url")
@click.option("-X", "--method", default="GET",
              type=click.Choice([m.value for m in Method], case_sensitive=False),
              help="HTTP method")
@click.option("-H", "--header", multiple=True, help="Headers in 'Name: Value' format")
@click.option("-d", "--data", help="Raw request body")
@click.option("-F", "--form", multiple=True, help="Form field 'name=value' or file 'name=@path'")
@click.option("--proxy", help="Proxy in 'host:port' format")
@click.option("--interface", help="Outgoing interface name or address")
@click.option("-t", "--timeout", type=int, help="Transfer timeout in seconds")
@click.option("-L", "--follow/--no-follow", default=True, help="Follow redirects")
@click.option("-v", "--verbose", is_flag=True, help="Show request and response headers")
@click.option("--raw", is_flag=True, help="Show raw response without formatting")
def request_cmd(url: str, method: str, header: tuple, data: str | None, form: tuple,
                proxy: str | None, interface: str | None, timeout: int | None,
                follow: bool, verbose: bool, raw: bool):
    """Send an HTTP request.

    Examples:
        curlkit http request https://example.com/
        curlkit http request https://example.com/api -X PUT -d '{"a": 1}' -H "Content-Type: application/json"
        curlkit http request https://example.com/upload -F title=cat -F photo=@cat.jpg
    """
    console = Console()

    headers = parse_header_args(list(header))
    fields, files = parse_form_args(list(form))
    body = data if data is not None else (fields or None)

    with Request(url, method.upper(), headers=headers, body=body, files=files) as req:
        if proxy:
            host, _, port = proxy.rpartition(":")
            if host and port.isdigit():
                req.set_proxy(host, int(port))
            else:
                req.set_proxy(proxy)
        if interface:
            req.set_interface(interface)

        try:
            resp = _send(req, follow, timeout)
        except CurlError as e:
            console.print(f"[red]Error:[/red] {e}")
            if e.response is not None and verbose:
                console.print(_headers_table(e.response.headers))
            raise SystemExit(1)
        except CurlkitError as e:
            console.print(f"[red]Error:[/red] {e}")
            raise SystemExit(1)

    chain = resp.redirect_chain()
    if chain:
        console.print("[yellow]Redirect chain:[/yellow]")
        for i, hop in enumerate(chain):
            console.print(f"  {i + 1}. {hop.status} {hop.location}")
        console.print()

    color = _status_color(resp.status_code)
    total_ms = (resp.info.get("total_time") or 0) * 1000
    console.print(f"[{color}]{resp.status}[/{color}] ({total_ms:.0f}ms)")

    if verbose:
        if resp.request_headers:
            console.print("\n[cyan]Request Headers:[/cyan]")
            console.print(_headers_table(resp.request_headers))
        console.print("\n[cyan]Response Headers:[/cyan]")
        console.print(_headers_table(resp.headers))

    if isinstance(resp, FileResponse):
        console.print(f"[green]Response saved to {resp.file}[/green]")
    else:
        _print_body(console, resp, raw, verbose)


@http.command("get")
@click.argument("url")
@click.option("-H", "--header", multiple=True, help="Headers in 'Name: Value' format")
@click.option("-v", "--verbose", is_flag=True, help="Show details")
@click.pass_context
def get_cmd(ctx, url: str, header: tuple, verbose: bool):
    """Send a GET request (shortcut).

    Examples:
        curlkit http get https://example.com/ -v
    """
    ctx.invoke(request_cmd, url=url, method="GET", header=header, data=None, form=(),
               proxy=None, interface=None, timeout=None, follow=True,
               verbose=verbose, raw=False)


@http.command("post")
@click.argument("url")
@click.option("-H", "--header", multiple=True, help="Headers")
@click.option("-d", "--data", help="Raw request body")
@click.option("-F", "--form", multiple=True, help="Form field 'name=value' or file 'name=@path'")
@click.option("-v", "--verbose", is_flag=True, help="Show details")
@click.pass_context
def post_cmd(ctx, url: str, header: tuple, data: str | None, form: tuple, verbose: bool):
    """Send a POST request (shortcut).

    Examples:
        curlkit http post https://example.com/form -F name=test -F value=123
        curlkit http post https://example.com/api -d '{"name": "test"}'
    """
    ctx.invoke(request_cmd, url=url, method="POST", header=header, data=data, form=form,
               proxy=None, interface=None, timeout=None, follow=True,
               verbose=verbose, raw=False)


@http.command("download")
@click.argument("url")
@click.option("-o", "--output-dir", type=click.Path(file_okay=False), help="Directory to save into")
def download_cmd(url: str, output_dir: str | None):
    """Download a URL into a directory.

    Examples:
        curlkit http download https://example.com/archive.tar.gz -o ./downloads
    """
    console = Console()

    with Request(url, Method.DOWNLOAD) as req:
        sender = Sender()
        if output_dir:
            sender.download_dir = output_dir
        try:
            resp = sender.send(req)
        except CurlkitError as e:
            console.print(f"[red]Error:[/red] {e}")
            raise SystemExit(1)

    console.print(f"[green]{resp.status}[/green] saved to {resp.file}")


@http.command("headers")
@click.argument("url")
def headers_cmd(url: str):
    """Show response headers for a URL (HEAD request, redirects not followed).

    Examples:
        curlkit http headers https://www.example.com
    """
    console = Console()

    with Request(url, Method.HEAD) as req:
        sender = Sender()
        sender.follow_redirects = False
        try:
            resp = sender.send(req)
        except CurlError as e:
            if e.response is None:
                console.print(f"[red]Error:[/red] {e}")
                raise SystemExit(1)
            resp = e.response
        except CurlkitError as e:
            console.print(f"[red]Error:[/red] {e}")
            raise SystemExit(1)

    color = _status_color(resp.status_code)
    console.print(f"\n[cyan]Headers for {url}[/cyan] [{color}]{resp.status}[/{color}]\n")
    console.print(_headers_table(resp.headers))
