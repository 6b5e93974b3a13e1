"""Main CLI entry point for the sitemap publisher."""

import asyncio
import json
import logging
import os
import sys
from typing import List, Optional, Tuple
import click
from .config import get_config_from_env
from .errors import SitemapError
from .generator import SitemapGenerator
from .sitemap_writer import SitemapWriter
from .config import PublisherConfig
from .types import PingResult
from .url_registry import UrlRegistry
from .utils import format_number, is_valid_url, setup_logging


@click.command()
@click.option(
    '--base-url',
    help='Public base URL the sitemaps are served from (env: SITEMAP_BASE_URL)'
)
@click.option(
    '--output-dir',
    help='Directory the sitemap files are written to (env: SITEMAP_OUTPUT_DIR)'
)
@click.option(
    '--urls-file',
    type=click.Path(exists=True, dir_okay=False),
    help='JSON file with a list of {url, changeFrequency, priority, lastModified} items'
)
@click.option(
    '--chunk',
    is_flag=True,
    help='Split URLs across several sitemap files instead of rejecting large batches'
)
@click.option(
    '--index/--no-index',
    default=None,
    help='Build sitemap-index.xml (default: only when several sitemaps are generated)'
)
@click.option(
    '--robots',
    is_flag=True,
    help='Also write a robots.txt referencing the sitemaps'
)
@click.option(
    '--ping',
    is_flag=True,
    help='Notify search engines after writing'
)
@click.option(
    '--search-engine',
    'search_engines',
    multiple=True,
    help='Additional ping endpoint; the sitemap URL is appended to it'
)
@click.option(
    '--log-level',
    default='INFO',
    type=click.Choice(['DEBUG', 'INFO', 'WARNING', 'ERROR']),
    help='Logging level',
    show_default=True
)
@click.option(
    '--log-file',
    help='Log file path (optional)',
    type=click.Path()
)
@click.option(
    '--validate-only',
    is_flag=True,
    help='Only validate existing sitemaps in the output directory'
)
def main(
    base_url: Optional[str],
    output_dir: Optional[str],
    urls_file: Optional[str],
    chunk: bool,
    index: Optional[bool],
    robots: bool,
    ping: bool,
    search_engines: Tuple[str, ...],
    log_level: str,
    log_file: Optional[str],
    validate_only: bool
) -> None:
    """
    Sitemap Publisher - build sitemaps.org XML sitemaps from a list of URLs.

    Reads URL entries from a JSON file, writes sitemap.xml (and
    sitemap-index.xml when needed) to the output directory and optionally
    pings search engines with the new sitemap location.
    """
    setup_logging(log_level, log_file)
    logger = logging.getLogger(__name__)

    config = get_config_from_env()
    if base_url:
        config.base_url = base_url
    if output_dir:
        config.base_path = output_dir
    config.additional_search_engines.extend(search_engines)

    if validate_only:
        validate_existing_sitemaps(config)
        return

    try:
        validate_config(config)

        if not urls_file:
            raise click.UsageError("--urls-file is required unless --validate-only is given")

        items = load_url_items(urls_file)

        generator = SitemapGenerator.from_config(config)
        generator.add_urls(items)

        if chunk:
            generator.create_chunked_sitemaps()
        else:
            generator.create_sitemap()

        build_index = index if index is not None else len(generator.sitemaps) > 1
        if build_index:
            generator.create_sitemap_index()

        written = generator.write_sitemap(include_robots=robots)
        print_written_files(written)

        if ping:
            results = asyncio.run(generator.notify_search_engines())
            print_ping_results(results)

        logger.info("Sitemap generation completed successfully!")

    except click.UsageError:
        raise

    except KeyboardInterrupt:
        logger.info("Process interrupted by user")
        sys.exit(130)  # Standard exit code for SIGINT

    except (SitemapError, OSError, ValueError) as e:
        logger.error(f"Fatal error: {e}")
        if log_level == 'DEBUG':
            import traceback
            traceback.print_exc()
        sys.exit(1)


def validate_config(config: PublisherConfig) -> None:
    """Validate configuration parameters."""
    if not is_valid_url(config.base_url):
        raise ValueError(f"Invalid base URL: {config.base_url!r}")

    for engine in config.additional_search_engines:
        if not is_valid_url(engine):
            raise ValueError(f"Invalid search engine URL: {engine}")

    if config.max_urls_per_sitemap < 1:
        raise ValueError("Max URLs per sitemap must be at least 1")

    if config.max_sitemap_bytes < 1:
        raise ValueError("Max sitemap size must be at least 1 byte")

    if config.request_timeout < 1:
        raise ValueError("Request timeout must be at least 1 second")


def load_url_items(path: str) -> List[dict]:
    """Load batch URL items from a JSON file."""
    with open(path, 'r', encoding='utf-8') as f:
        data = json.load(f)

    if not isinstance(data, list):
        raise ValueError(f"{path} must contain a JSON list of URL entries")

    return data


def validate_existing_sitemaps(config: PublisherConfig) -> None:
    """Validate existing sitemap files."""
    output_dir = config.base_path
    if not os.path.exists(output_dir):
        click.echo(f"Output directory does not exist: {output_dir}")
        return

    writer = SitemapWriter(
        config.base_url,
        UrlRegistry(),
        max_urls_per_sitemap=config.max_urls_per_sitemap,
        max_sitemap_bytes=config.max_sitemap_bytes
    )

    sitemap_files = [
        os.path.join(output_dir, filename)
        for filename in sorted(os.listdir(output_dir))
        if filename.endswith('.xml') and 'sitemap' in filename.lower()
    ]

    if not sitemap_files:
        click.echo("No sitemap files found to validate")
        return

    click.echo(f"Validating {len(sitemap_files)} sitemap files...")

    valid_count = 0
    for filepath in sitemap_files:
        if writer.validate_sitemap(filepath):
            stats = writer.get_sitemap_stats(filepath)
            click.echo(f"✓ {os.path.basename(filepath)}: {format_number(stats.get('total_urls', 0))} URLs")
            valid_count += 1
        else:
            click.echo(f"✗ {os.path.basename(filepath)}: INVALID")

    click.echo(f"\nValidation complete: {valid_count}/{len(sitemap_files)} files valid")


def print_written_files(paths: List[str]) -> None:
    click.echo("\nGenerated files:")
    for path in paths:
        size_mb = os.path.getsize(path) / (1024 * 1024) if os.path.exists(path) else 0.0
        click.echo(f"  • {path} ({size_mb:.2f} MB)")


def print_ping_results(results: List[PingResult]) -> None:
    click.echo("\nSearch engine notifications:")
    for result in results:
        if result.error:
            click.echo(f"  ✗ {result.site}: {result.error}")
        else:
            click.echo(f"  {'✓' if result.ok else '✗'} {result.site}: HTTP {result.status_code}")


if __name__ == '__main__':
    main()
