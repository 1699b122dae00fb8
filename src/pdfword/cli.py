"""PDF to Word CLI."""

import logging
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from pdfword.config import settings
from pdfword.datauri import decode_data_uri
from pdfword.errors import PdfWordError
from pdfword.models import ConversionInput, ConversionMode, RotationStrategy, mask_key
from pdfword.pipeline import build_pipeline
from pdfword.storage import KeyStore

app = typer.Typer(
    name="pdfword",
    help="Convert PDFs into editable Word documents using AI extraction",
    add_completion=False,
)
keys_app = typer.Typer(help="Manage API keys used for model requests")
rotation_app = typer.Typer(help="Configure API key rotation")
app.add_typer(keys_app, name="keys")
app.add_typer(rotation_app, name="rotation")

console = Console()


def setup_logging(level: Optional[str] = None) -> None:
    logging.basicConfig(
        level=(level or settings.log_level).upper(),
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), rich_tracebacks=True)],
    )


@app.callback()
def main(
    log_level: Optional[str] = typer.Option(None, help="Override the log level"),
) -> None:
    setup_logging(log_level)


@app.command()
def convert(
    pdf_path: Path = typer.Argument(..., help="Path to PDF file to convert"),
    output: Optional[Path] = typer.Option(
        None, "--output", "-o", help="Output .docx path (default: next to the PDF)"
    ),
    mode: ConversionMode = typer.Option(
        ConversionMode.OCR, help="ocr: AI extraction; no_ocr: LibreOffice only"
    ),
) -> None:
    """Convert a single PDF document."""
    if not pdf_path.is_file():
        console.print(f"[red]PDF not found:[/red] {pdf_path}")
        raise typer.Exit(code=1)

    output = output or pdf_path.with_suffix(".docx")
    console.print(f"[bold blue]Converting:[/bold blue] {pdf_path}")
    console.print(f"[dim]Mode: {mode.value}, Output: {output}[/dim]")

    pipeline = build_pipeline(key_provider=KeyStore())
    request = ConversionInput(source_uri=str(pdf_path.resolve()), mode=mode)
    try:
        result = pipeline.convert(request)
    except PdfWordError as exc:
        console.print(f"[red]Conversion failed:[/red] {exc}")
        raise typer.Exit(code=1)

    _, data = decode_data_uri(result.document_uri)
    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_bytes(data)
    console.print(f"[green]Wrote {len(data)} bytes to {output}[/green]")


@keys_app.command("list")
def keys_list(
    provider: str = typer.Option(settings.llm_provider, help="Key provider"),
) -> None:
    """List stored keys (masked)."""
    records = KeyStore().list_keys(provider)
    if not records:
        console.print(f"[yellow]No {provider} keys stored[/yellow]")
        return

    table = Table(title=f"{provider} keys")
    table.add_column("ID")
    table.add_column("Key")
    table.add_column("Label")
    table.add_column("Enabled")
    table.add_column("Flagged")
    for record in records:
        table.add_row(
            record.id,
            record.masked,
            record.label or "",
            "yes" if record.enabled else "no",
            "yes" if record.flagged else "no",
        )
    console.print(table)


@keys_app.command("add")
def keys_add(
    key: str = typer.Argument(..., help="API key value"),
    label: Optional[str] = typer.Option(None, help="Human readable label"),
    provider: str = typer.Option(settings.llm_provider, help="Key provider"),
) -> None:
    """Store a new key."""
    record = KeyStore().add_key(provider, key, label)
    console.print(f"[green]Added {record.id}[/green] ({mask_key(key)})")


@keys_app.command("remove")
def keys_remove(key_id: str = typer.Argument(..., help="Key ID")) -> None:
    """Delete a stored key."""
    if not KeyStore().delete_key(key_id):
        console.print(f"[red]No key with ID {key_id}[/red]")
        raise typer.Exit(code=1)
    console.print(f"[green]Removed {key_id}[/green]")


def _toggle(key_id: str, *, enabled: Optional[bool] = None, flagged: Optional[bool] = None) -> None:
    store = KeyStore()
    if enabled is not None:
        record = store.set_enabled(key_id, enabled)
    else:
        record = store.set_flagged(key_id, bool(flagged))
    if record is None:
        console.print(f"[red]No key with ID {key_id}[/red]")
        raise typer.Exit(code=1)
    console.print(
        f"{record.id}: enabled={'yes' if record.enabled else 'no'}, "
        f"flagged={'yes' if record.flagged else 'no'}"
    )


@keys_app.command("enable")
def keys_enable(key_id: str = typer.Argument(..., help="Key ID")) -> None:
    """Enable a key."""
    _toggle(key_id, enabled=True)


@keys_app.command("disable")
def keys_disable(key_id: str = typer.Argument(..., help="Key ID")) -> None:
    """Disable a key."""
    _toggle(key_id, enabled=False)


@keys_app.command("flag")
def keys_flag(key_id: str = typer.Argument(..., help="Key ID")) -> None:
    """Exclude a key from rotation without disabling it."""
    _toggle(key_id, flagged=True)


@keys_app.command("unflag")
def keys_unflag(key_id: str = typer.Argument(..., help="Key ID")) -> None:
    """Return a flagged key to rotation."""
    _toggle(key_id, flagged=False)


def _print_rotation(provider: str) -> None:
    rotation = KeyStore().get_rotation(provider)
    state = "enabled" if rotation.enabled else "disabled"
    console.print(f"{provider} rotation: {state}, strategy={rotation.strategy.value}")


@rotation_app.command("show")
def rotation_show(
    provider: str = typer.Option(settings.llm_provider, help="Key provider"),
) -> None:
    """Show rotation settings."""
    _print_rotation(provider)


@rotation_app.command("enable")
def rotation_enable(
    provider: str = typer.Option(settings.llm_provider, help="Key provider"),
) -> None:
    """Rotate between eligible keys."""
    KeyStore().set_rotation_enabled(provider, True)
    _print_rotation(provider)


@rotation_app.command("disable")
def rotation_disable(
    provider: str = typer.Option(settings.llm_provider, help="Key provider"),
) -> None:
    """Always use the first eligible key."""
    KeyStore().set_rotation_enabled(provider, False)
    _print_rotation(provider)


@rotation_app.command("strategy")
def rotation_strategy(
    strategy: RotationStrategy = typer.Argument(..., help="hourly or minute"),
    provider: str = typer.Option(settings.llm_provider, help="Key provider"),
) -> None:
    """Set the rotation time bucket."""
    KeyStore().set_rotation_strategy(provider, strategy)
    _print_rotation(provider)


if __name__ == "__main__":
    app()
