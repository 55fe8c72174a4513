import os, json, logging, typer
from typing import Optional
from pydantic import ValidationError

from pushpkg.config import config_from_env, config_from_json
from pushpkg.crypto.manifest import compute_manifest
from pushpkg.errors import PushPackageError
from pushpkg.package.assembler import reap_staging
from pushpkg.package.push_package import PushPackage

app = typer.Typer(no_args_is_help=True)


@app.callback()
def main(verbose: bool = typer.Option(False, "--verbose", "-v")):
    level = "DEBUG" if verbose else os.getenv("PUSHPKG_LOG_LEVEL", "WARNING")
    logging.basicConfig(level=level.upper(), format="%(asctime)s %(levelname)s %(name)s: %(message)s")


@app.command()
def build(token: str, config: Optional[str] = typer.Option(None, "--config", "-c", help="JSON config; env PUSHPKG_* when omitted")):
    """Build a signed push package for TOKEN and print the archive path."""
    try:
        cfg = config_from_json(config) if config else config_from_env()
        zip_path = PushPackage(cfg).create_push_package(token)
    except ValidationError as e:
        typer.echo(f"invalid_configuration: {e}", err=True)
        raise typer.Exit(code=2)
    except PushPackageError as e:
        typer.echo(f"{e.error_code}: {e}", err=True)
        raise typer.Exit(code=1)
    typer.echo(zip_path)


@app.command()
def manifest(staging_dir: str):
    """(Re)compute manifest.json of a staged package and print it."""
    try:
        m = compute_manifest(staging_dir)
    except PushPackageError as e:
        typer.echo(f"{e.error_code}: {e}", err=True)
        raise typer.Exit(code=1)
    typer.echo(json.dumps(m, indent=2))


@app.command()
def reap(temp_dir: str, max_age_s: float = 3600.0):
    """Remove staging dirs and archives older than MAX_AGE_S seconds."""
    for path in reap_staging(temp_dir, max_age_s):
        typer.echo(f"removed {path}")


if __name__ == "__main__":
    app()
