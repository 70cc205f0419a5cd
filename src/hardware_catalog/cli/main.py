"""
Hardware Catalog CLI — Reconcile and inspect the hardware module catalog.

Usage:
    hwcatalog reconcile --modules-dir ./modules --registry-url https://example.org/modules
    hwcatalog reconcile --offline --json
    hwcatalog show arduino-uno
    hwcatalog install ./bundle.zip
    hwcatalog clean --modules-dir ./modules
"""

import asyncio
import json
import logging
from pathlib import Path

import click
from rich.console import Console
from rich.table import Table

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(level=logging.DEBUG if verbose else logging.INFO, format=LOG_FORMAT)


def _load_prior(path: str | None) -> list:
    """Read a prior catalog from a JSON file produced by ``reconcile --json``."""
    from hardware_catalog.models.descriptor import HardwareModuleDescriptor, InvalidDescriptorError

    if not path:
        return []
    try:
        data = json.loads(Path(path).read_text(encoding="utf-8"))
        if not isinstance(data, list):
            raise InvalidDescriptorError("prior catalog must be a JSON list")
        return [HardwareModuleDescriptor.from_dict(item) for item in data]
    except (json.JSONDecodeError, InvalidDescriptorError) as e:
        raise click.BadParameter(str(e), param_hint="--prior") from e


def _build_reconciler(modules_dir, legacy_dir, registry_url, offline):
    from hardware_catalog.core.config import CatalogConfig
    from hardware_catalog.core.reconciler import CatalogReconciler

    config = CatalogConfig.from_env(
        modules_dir=modules_dir, legacy_dir=legacy_dir, registry_url=registry_url
    )
    if offline:
        config.registry_url = None
    return config, CatalogReconciler.from_config(config)


def _render_table(console: Console, catalog) -> None:
    from hardware_catalog.core.ordering import display_name

    table = Table(title=f"Hardware modules ({len(catalog)})")
    table.add_column("ID", style="cyan")
    table.add_column("Name")
    table.add_column("Module")
    table.add_column("Version")
    table.add_column("Status", style="green")
    table.add_column("Registry versions")
    for d in catalog:
        table.add_row(
            d.id,
            display_name(d),
            d.module_name or "-",
            d.version or "-",
            d.available_type.value,
            ", ".join(d.available_versions),
        )
    console.print(table)


source_options = [
    click.option(
        "--modules-dir",
        "-m",
        type=click.Path(file_okay=False),
        default=None,
        help="Directory of current module descriptors.",
    ),
    click.option(
        "--legacy-dir",
        "-L",
        type=click.Path(file_okay=False),
        default=None,
        help="Directory of legacy module descriptors.",
    ),
    click.option("--registry-url", "-r", type=str, default=None, help="Online module registry URL."),
    click.option("--offline", is_flag=True, help="Skip the online registry."),
    click.option("--verbose", "-v", is_flag=True, help="Enable verbose logging."),
]


def with_source_options(func):
    for option in reversed(source_options):
        func = option(func)
    return func


@click.group()
@click.version_option(package_name="hardware-catalog")
def cli():
    """Hardware Catalog — Hardware module catalog reconciliation."""
    pass


@cli.command()
@with_source_options
@click.option(
    "--prior",
    "-p",
    type=click.Path(exists=True, dir_okay=False),
    default=None,
    help="Previously published catalog (JSON) to merge in.",
)
@click.option("--json", "as_json", is_flag=True, help="Print the catalog as JSON.")
def reconcile(modules_dir, legacy_dir, registry_url, offline, verbose, prior, as_json):
    """Build the merged hardware module catalog."""
    _configure_logging(verbose)
    _, reconciler = _build_reconciler(modules_dir, legacy_dir, registry_url, offline)

    catalog = asyncio.run(reconciler.reconcile(_load_prior(prior)))

    if as_json:
        click.echo(json.dumps([d.to_dict() for d in catalog], indent=2, ensure_ascii=False))
    else:
        _render_table(Console(), catalog)


@cli.command()
@with_source_options
@click.argument("module_id")
def show(modules_dir, legacy_dir, registry_url, offline, verbose, module_id):
    """Show a single module from the merged catalog."""
    _configure_logging(verbose)
    _, reconciler = _build_reconciler(modules_dir, legacy_dir, registry_url, offline)

    asyncio.run(reconciler.reconcile())
    descriptor = reconciler.get_by_id(module_id)
    if descriptor is None:
        raise click.ClickException(f"No module with id {module_id!r} in the catalog")
    click.echo(json.dumps(descriptor.to_dict(), indent=2, ensure_ascii=False))


@cli.command()
@with_source_options
@click.argument("bundle", type=click.Path(exists=True, dir_okay=False))
def install(modules_dir, legacy_dir, registry_url, offline, verbose, bundle):
    """Extract a module bundle into the module directory and refresh the catalog."""
    from hardware_catalog.installer import ArchiveInstaller

    _configure_logging(verbose)
    config, reconciler = _build_reconciler(modules_dir, legacy_dir, registry_url, offline)
    installer = ArchiveInstaller(reconciler, config.modules_dir)

    async def run():
        await installer.install(Path(bundle))
        await installer.drain()

    asyncio.run(run())
    Console().print(f"[bold green]Catalog now holds {len(reconciler.catalog)} modules[/bold green]")


@cli.command()
@click.option(
    "--modules-dir",
    "-m",
    type=click.Path(file_okay=False),
    default=None,
    help="Directory of current module descriptors.",
)
@click.option(
    "--legacy-dir",
    "-L",
    type=click.Path(file_okay=False),
    default=None,
    help="Directory of legacy module descriptors.",
)
def clean(modules_dir, legacy_dir):
    """Remove empty or corrupted descriptor files."""
    from hardware_catalog.core.config import CatalogConfig
    from hardware_catalog.sources.disk import clean_invalid_descriptors

    logging.basicConfig(level=logging.INFO, format=LOG_FORMAT)
    config = CatalogConfig.from_env(modules_dir=modules_dir, legacy_dir=legacy_dir)
    clean_invalid_descriptors([config.modules_dir, config.legacy_dir])


if __name__ == "__main__":
    cli()
