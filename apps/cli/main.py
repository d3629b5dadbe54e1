"""CLI application for DepEdit."""

import logging

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table
from rich.text import Text

from core.document import Document
from core.errors import DepEditError
from core.models import Dependency, DependencyType
from core.write_cargo import render_dependency

console = Console()


def configure_logging(verbose: bool) -> None:
    """Route log records through Rich."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=console, show_path=False)],
        force=True,
    )


def load_document(manifest: str, kind: str, target: str | None) -> Document:
    return Document(manifest, DependencyType(kind=kind, target=target))


def resolve_package_id(document: Document, package: str | None) -> int:
    """Index of the named package; the first package when no name is given."""
    names = document.get_packages_names()
    if package is None:
        if document.is_workspace():
            console.print(f"Workspace detected, using package {names[0]}", style="yellow")
        return 0
    if package not in names:
        raise DepEditError(f"package {package} not found, available: {', '.join(names)}")
    return names.index(package)


def describe_origin(dependency: Dependency) -> str:
    if dependency.is_local():
        return f"path: {dependency.origin.path}"
    return "registry"


def highlight_name(name: str, indices: list[int]) -> Text:
    """Dependency name with the fuzzy-matched characters highlighted."""
    text = Text(name)
    for index in indices:
        text.stylize("bold magenta", index, index + 1)
    return text


def format_dependency_table(items) -> Table:
    table = Table(show_header=True, header_style="bold")
    table.add_column("Name")
    table.add_column("Version")
    table.add_column("Origin")
    table.add_column("Features")
    table.add_column("Default features")

    for item in items:
        dependency = item.dependency
        table.add_row(
            highlight_name(dependency.get_name(), item.indices),
            dependency.get_version() or "-",
            describe_origin(dependency),
            ", ".join(sorted(dependency.get_features_to_enable())) or "-",
            "yes" if dependency.can_use_default() else "no",
        )

    return table


app = typer.Typer(
    name="depedit",
    help="DepEdit - Edit Cargo.toml dependency declarations without losing formatting",
    add_completion=False,
)

MANIFEST_HELP = "Path to Cargo.toml or to the directory containing it"


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
) -> None:
    """DepEdit - Edit Cargo.toml dependency declarations."""
    configure_logging(verbose)


@app.command()
def packages(
    manifest: str = typer.Argument(".", help=MANIFEST_HELP),
) -> None:
    """List the packages of a manifest or workspace."""
    try:
        document = load_document(manifest, "dependencies", None)
    except DepEditError as e:
        console.print(f"Error: {e}", style="red")
        raise typer.Exit(1)

    for index, name in enumerate(document.get_packages_names()):
        console.print(f"{index}: {name}")


@app.command()
def deps(
    manifest: str = typer.Argument(".", help=MANIFEST_HELP),
    package: str | None = typer.Option(None, "--package", "-p", help="Workspace package name"),
    query: str = typer.Option("", "--filter", "-f", help="Fuzzy filter on dependency names"),
    kind: str = typer.Option("dependencies", "--kind", help="Dependency section"),
    target: str | None = typer.Option(None, "--target", help="Target-specific section"),
) -> None:
    """List dependencies, optionally fuzzy-filtered."""
    try:
        document = load_document(manifest, kind, target)
        package_id = resolve_package_id(document, package)
    except (DepEditError, ValueError) as e:
        console.print(f"Error: {e}", style="red")
        raise typer.Exit(1)

    items = document.get_deps_filtered_view(package_id, query)
    if not items:
        console.print("No matching dependencies")
        return

    console.print(format_dependency_table(items))


@app.command()
def show(
    manifest: str = typer.Argument(help=MANIFEST_HELP),
    name: str = typer.Argument(help="Dependency name"),
    package: str | None = typer.Option(None, "--package", "-p", help="Workspace package name"),
    kind: str = typer.Option("dependencies", "--kind", help="Dependency section"),
    target: str | None = typer.Option(None, "--target", help="Target-specific section"),
) -> None:
    """Show a dependency and its features."""
    try:
        document = load_document(manifest, kind, target)
        package_id = resolve_package_id(document, package)
        dependency = document.get_dep(package_id, name)
    except (DepEditError, ValueError) as e:
        console.print(f"Error: {e}", style="red")
        raise typer.Exit(1)

    console.print(f"[bold]{dependency.get_name()}[/bold] {dependency.get_version()}")
    console.print(f"origin: {describe_origin(dependency)}")
    console.print(f"default features: {'yes' if dependency.can_use_default() else 'no'}")

    for feature in dependency.features.values():
        marker = "[x]" if feature.is_enabled else "[ ]"
        suffix = " (default)" if feature.is_default else ""
        console.print(f"  {marker} {feature.name}{suffix}", markup=False)


@app.command(name="set")
def set_dependency(
    manifest: str = typer.Argument(help=MANIFEST_HELP),
    name: str = typer.Argument(help="Dependency name"),
    package: str | None = typer.Option(None, "--package", "-p", help="Workspace package name"),
    version: str | None = typer.Option(None, "--version", help="New version requirement"),
    enable: list[str] = typer.Option([], "--enable", "-e", help="Feature to enable"),
    disable: list[str] = typer.Option([], "--disable", "-d", help="Feature to disable"),
    use_default: bool = typer.Option(False, "--default-features", help="Turn default features on"),
    no_default: bool = typer.Option(False, "--no-default-features", help="Turn default features off"),
    path: str | None = typer.Option(None, "--path", help="Switch to a local path dependency"),
    remote: bool = typer.Option(False, "--remote", help="Switch to a registry dependency"),
    kind: str = typer.Option("dependencies", "--kind", help="Dependency section"),
    target: str | None = typer.Option(None, "--target", help="Target-specific section"),
    dry_run: bool = typer.Option(False, "--dry-run", help="Show the new entry without writing"),
) -> None:
    """Change a dependency and write it back to the manifest."""
    if path and remote:
        console.print("Error: --path and --remote are mutually exclusive", style="red")
        raise typer.Exit(1)
    if use_default and no_default:
        console.print("Error: --default-features and --no-default-features are mutually exclusive", style="red")
        raise typer.Exit(1)

    try:
        document = load_document(manifest, kind, target)
        package_id = resolve_package_id(document, package)
        dependency = document.get_dep_mut(package_id, name)

        if version is not None:
            dependency.set_version(version)
        if use_default or no_default:
            dependency.set_default_features(use_default)
        for feature in enable:
            dependency.enable_feature(feature)
        for feature in disable:
            dependency.disable_feature(feature)
        if path:
            dependency.set_local(path)
        elif remote:
            dependency.set_remote()

        if dry_run:
            entry = render_dependency(dependency)
            console.print(f"{dependency.dep_name} = {entry.as_string()}", markup=False)
            return

        document.write_dep_by_name(package_id, name)
    except (DepEditError, ValueError, OSError) as e:
        console.print(f"Error: {e}", style="red")
        raise typer.Exit(1)

    package_path = document.get_package(package_id).manifest_path
    console.print(f"Updated {name} in {package_path}")


if __name__ == "__main__":
    app()
