# cli.py
import asyncio
import logging

import click

from downloads_api.adapters.storage import StorageFactory
from downloads_api.config.settings import get_settings
from downloads_api.errors import DownloadError
from downloads_api.resolver import DownloadResolver, build_prefix

# Configure logging
logger = logging.getLogger(__name__)


@click.group()
def cli():
    """CLI commands for the Downloads API"""
    pass


@cli.command()
def show_config():
    """Show current configuration"""
    settings = get_settings()

    click.echo("Current Configuration:")
    click.echo(f"  Deployment Mode: {settings.deployment_mode}")
    click.echo(f"  AWS Region: {settings.aws_region}")
    click.echo(f"  AWS Endpoint: {settings.aws_endpoint_url}")
    click.echo(f"  Bucket: {settings.s3_bucket_name}")
    click.echo(f"  Public Bucket URL: {settings.public_bucket_url or '(not set, serving directly)'}")
    click.echo(f"  Listing Limit: {settings.listing_limit}")
    click.echo(f"  Storage Dir: {settings.storage_dir}")


@cli.command()
@click.option("--email", required=True, help="Email the pages were generated for")
def resolve(email):
    """Print the key of the latest generated page for an email"""
    settings = get_settings()
    resolver = DownloadResolver(StorageFactory.get_storage(settings), settings)

    click.echo(f"Looking under prefix: {build_prefix(email)}")
    try:
        key = asyncio.run(resolver.resolve_key(email))
    except DownloadError as e:
        raise click.ClickException(e.message)

    click.echo(key)
    if settings.public_bucket_url:
        click.echo(f"{settings.public_bucket_url}/{key}")


@cli.command()
@click.option("--host", default="0.0.0.0", show_default=True, help="Interface to bind")
@click.option("--port", default=8000, show_default=True, type=int, help="Port to listen on")
def serve(host, port):
    """Run the API under uvicorn"""
    import uvicorn
    from downloads_api.main import create_app

    uvicorn.run(create_app(get_settings()), host=host, port=port)


if __name__ == "__main__":
    cli()
