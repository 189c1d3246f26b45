from __future__ import annotations

import os
import click
from doc_converter import create_app
from doc_converter.errors import ConversionError, DocConverterError
from doc_converter.extensions import db, office_engine
from doc_converter.services.history_service import list_recent_history
from doc_converter.services.pipeline import UploadedFile, convert_and_respond


@click.group()
def cli() -> None:
    """Document to PDF converter CLI."""


@cli.command("convert")
@click.argument("files", nargs=-1, required=True, type=click.Path(exists=True, dir_okay=False, readable=True))
@click.option("--output", "output", "-o", type=click.Path(dir_okay=False, writable=True),
              help="Where to write the PDF (one input) or ZIP (several). Defaults to the suggested name.")
def convert(files: tuple[str, ...], output: str | None) -> None:
    """Convert FILES to PDF and record them in the history."""
    app = create_app()
    try:
        with app.app_context():
            uploads = [UploadedFile(path=os.path.abspath(p), original_filename=os.path.basename(p)) for p in files]
            try:
                result = convert_and_respond(uploads)
            except ConversionError as e:
                click.secho(f"[error] {e.filename}: {e}", fg="red", err=True)
                raise SystemExit(1)
    finally:
        office_engine.stop()

    target = output or result.filename
    with open(target, "wb") as f:
        f.write(result.data)
    click.secho(f"[ok] written -> {os.path.abspath(target)} ({result.content_type})", fg="green")


@cli.command("history")
@click.option("--limit", "-n", type=int, default=None, help="Number of records to show (default: retention window).")
def history(limit: int | None) -> None:
    """List the most recent conversions."""
    app = create_app()
    with app.app_context():
        try:
            records = list_recent_history(limit)
        except DocConverterError as e:
            click.secho(f"[error] {e}", fg="red", err=True)
            raise SystemExit(1)
    if not records:
        click.echo("No conversions recorded yet.")
        return
    for r in records:
        click.echo(f"{r['id']:>5}  {r['converted_at']}  {r['file_size']:>10}  {r['filename']}")


@cli.command("init-db")
def init_db() -> None:
    """Create the database schema."""
    app = create_app()
    with app.app_context():
        db.create_all()
    click.echo("Database initialized!")


@cli.command("serve")
@click.option("--host", default="0.0.0.0", show_default=True)
@click.option("--port", type=int, default=None, help="Defaults to the PORT setting (3000).")
def serve(host: str, port: int | None) -> None:
    """Run the development server."""
    app = create_app()
    app.run(host=host, port=port or app.config["PORT"], threaded=True, use_reloader=False)


if __name__ == "__main__":
    cli()
