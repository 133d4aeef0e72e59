"""Flask CLI commands for admin operations."""
import click
from flask import current_app


def register_cli(app):
    @app.cli.command("init-db")
    def init_db():
        """Create all tables and the local screenshot directory."""
        import os
        from app.extensions import db

        db.create_all()
        if current_app.config["STORAGE_BACKEND"] == "local":
            os.makedirs(current_app.config["SCREENSHOT_DIR"], exist_ok=True)
        click.echo("Database initialized.")

    @app.cli.command("stats")
    def stats():
        """Print generation counts by status."""
        from app.services.generation_service import get_stats

        counts = get_stats()
        total = sum(counts.values())
        click.echo(f"Total generations: {total}")
        for status in ("pending", "completed", "failed"):
            click.echo(f"  {status}: {counts.get(status, 0)}")

    @app.cli.command("purge-generations")
    @click.option("--yes", is_flag=True, help="Skip the confirmation prompt.")
    def purge_generations(yes):
        """Delete every generation, its assets and stored screenshots."""
        from app.services.generation_service import delete_all_generations

        if not yes:
            click.confirm("Delete ALL generations and screenshots?", abort=True)
        deleted, files_deleted, files_failed = delete_all_generations()
        click.echo(
            f"Deleted {deleted} generations, {files_deleted} files "
            f"({files_failed} failed)."
        )

    @app.cli.command("preview-check")
    @click.argument("source", type=click.File("r"))
    @click.option(
        "--isolation",
        type=click.Choice(["inpage", "isolated"]),
        default=None,
        help="Renderer to use (defaults to PREVIEW_ISOLATION).",
    )
    def preview_check(source, isolation):
        """Render a component source file and report the result."""
        from app.sandbox import get_renderer
        from app.sandbox.extractor import extract_component_name
        from app.sandbox.normalizer import normalize_code

        code = source.read()
        normalized = normalize_code(code)
        click.echo(f"Component: {extract_component_name(normalized) or '(not found)'}")

        result = get_renderer(isolation).render(code)
        if result.ok:
            click.echo(f"OK ({result.strategy}, {len(result.html)} bytes)")
            return
        click.echo(f"{result.error.title}: {result.error.message}", err=True)
        if result.error.hint:
            click.echo(result.error.hint, err=True)
        raise SystemExit(1)
