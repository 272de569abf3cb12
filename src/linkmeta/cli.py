"""CLI interface using typer."""

import asyncio
import json
import logging
from pathlib import Path

import typer

from .config import LinkMetaSettings, load_settings
from .coordinator import FetchCoordinator
from .errors import LinkMetaError
from .models import LinkRecord

app = typer.Typer(
    name="linkmeta",
    help="Web page metadata lookups with a freshness-aware cache",
    no_args_is_help=True,
)


@app.callback()
def main(
    verbose: bool = typer.Option(False, "-v", "--verbose", help="Enable debug logging"),
):
    """Configure logging for every command."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )


def _settings(config: Path | None) -> LinkMetaSettings:
    try:
        return load_settings(config)
    except LinkMetaError as e:
        typer.secho(str(e), fg=typer.colors.RED, err=True)
        raise typer.Exit(code=2)


async def _get(settings: LinkMetaSettings, url: str, max_age: float | None) -> LinkRecord:
    coordinator = FetchCoordinator.from_settings(settings)
    try:
        return await coordinator.get_or_refresh(
            url, max_age, allow_stale=settings.cache.allow_stale
        )
    finally:
        await coordinator.close()


async def _batch(
    settings: LinkMetaSettings,
    urls: list[str],
    max_age: float | None,
    output: Path,
) -> tuple[int, int]:
    coordinator = FetchCoordinator.from_settings(settings)

    async def lookup(url: str) -> tuple[str, LinkRecord | LinkMetaError]:
        try:
            return url, await coordinator.get_or_refresh(
                url, max_age, allow_stale=settings.cache.allow_stale
            )
        except LinkMetaError as e:
            return url, e

    from .output import StreamingOutputWriter

    try:
        with StreamingOutputWriter(output) as writer:
            for future in asyncio.as_completed([lookup(url) for url in urls]):
                url, result = await future
                if isinstance(result, LinkRecord):
                    writer.write_record(result)
                    typer.echo(f"[{writer.count}/{len(urls)}] {result.url}")
                else:
                    writer.write_error(url, result)
                    typer.secho(f"[{writer.count}/{len(urls)}] {url}: {result}", fg=typer.colors.RED, err=True)
            return writer.count - writer.errors, writer.errors
    finally:
        await coordinator.close()


def read_url_list(path: Path) -> list[str]:
    """Read URLs one per line, skipping blanks and # comments."""
    urls = []
    for line in path.read_text(encoding="utf-8").splitlines():
        line = line.strip()
        if line and not line.startswith("#"):
            urls.append(line)
    return urls


@app.command()
def get(
    url: str = typer.Argument(..., help="URL to look up"),
    max_age: float = typer.Option(None, "--max-age", "-m", help="Maximum record age in seconds (0 forces a refresh)"),
    config: Path = typer.Option(None, "-c", "--config", help="TOML config file"),
    as_json: bool = typer.Option(False, "--json", help="Print the record as JSON"),
):
    """Look up metadata for a single URL."""
    settings = _settings(config)

    try:
        record = asyncio.run(_get(settings, url, max_age))
    except LinkMetaError as e:
        typer.secho(f"{type(e).__name__}: {e}", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)

    if as_json:
        typer.echo(json.dumps(record.to_dict(), indent=2, ensure_ascii=False))
        return

    typer.echo(f"ID: {record.id}")
    typer.echo(f"URL: {record.url}")
    typer.echo(f"Title: {record.title or ''}")
    typer.echo(f"Description: {record.description or ''}")
    typer.echo(f"Keywords: {', '.join(record.keywords)}")
    typer.echo(f"Favicon: {record.favicon or ''}")
    og = record.open_graph
    if any((og.title, og.description, og.image, og.url)):
        typer.echo("Open Graph:")
        typer.echo(f"  title: {og.title or ''}")
        typer.echo(f"  description: {og.description or ''}")
        typer.echo(f"  image: {og.image or ''}")
        typer.echo(f"  url: {og.url or ''}")
    typer.echo(f"Last scraped: {record.last_scraped.isoformat()}")


@app.command()
def batch(
    url_file: Path = typer.Argument(..., exists=True, dir_okay=False, help="File with one URL per line"),
    max_age: float = typer.Option(None, "--max-age", "-m", help="Maximum record age in seconds"),
    config: Path = typer.Option(None, "-c", "--config", help="TOML config file"),
    output: Path = typer.Option(Path("linkmeta.jsonl"), "-o", "--output", help="Output file (JSONL)"),
):
    """Look up metadata for every URL in a file, concurrently."""
    settings = _settings(config)
    urls = read_url_list(url_file)
    if not urls:
        typer.echo("No URLs to look up")
        return

    ok, failed = asyncio.run(_batch(settings, urls, max_age, output))

    typer.echo(f"\nDone: {ok} ok, {failed} failed")
    typer.echo(f"Results saved to {output}")
    if failed:
        raise typer.Exit(code=1)


@app.command()
def version():
    """Show version."""
    from . import __version__

    typer.echo(f"linkmeta {__version__}")


if __name__ == "__main__":
    app()
