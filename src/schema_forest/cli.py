"""Command-line interface for schema-forest.

This module provides a CLI for compiling forest files to SQL DDL, displaying
and auditing forests, and adding nodes to them.
"""

import json
import logging
from pathlib import Path
from typing import Any, Optional

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.prompt import Prompt
from rich.table import Table as RichTable
from rich.tree import Tree
from typing_extensions import Annotated

from schema_forest.config import Config
from schema_forest.errors import ForestError
from schema_forest.forest.builder import unique_id
from schema_forest.forest.model import NodeForest
from schema_forest.forest.nodes import Node
from schema_forest.forest.reporting import InputProvider, RecordingReporter
from schema_forest.generator.sql import compile_forest
from schema_forest.typology.registry import TypeRegistry

app = typer.Typer(
    name="schema-forest",
    help="Edit typed database design trees and compile them to SQL DDL",
    add_completion=False,
)
console = Console()
err_console = Console(stderr=True)

logger = logging.getLogger(__name__)

TypesOption = Annotated[
    Optional[Path],
    typer.Option("--types", "-t", help="JSON file with the node type rules"),
]
ForestArgument = Annotated[
    Optional[Path],
    typer.Argument(help="Forest JSON file (defaults to SCHEMA_FOREST_FOREST_FILE)"),
]


class PromptInputProvider(InputProvider):
    """Input provider asking the user on the terminal with a rich prompt."""

    def __init__(self, prompt_console: Optional[Console] = None):
        self.console = prompt_console or console

    def request_caption(self, prompt: str) -> Optional[str]:
        answer = Prompt.ask(escape(prompt), console=self.console, default="", show_default=False)
        return answer or None


def configure_logging(level: str) -> None:
    """Route log records through rich on stderr.

    Args:
        level: Logging level name, e.g. "INFO"

    Raises:
        ValueError: If the level name is unknown
    """
    numeric_level = logging.getLevelName(level.upper())
    if not isinstance(numeric_level, int):
        raise ValueError(f"Unknown log level: {level}")
    logging.basicConfig(
        level=numeric_level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=err_console, show_path=False)],
        force=True,
    )


def get_config(
    types: Optional[Path] = None,
    forest: Optional[Path] = None,
) -> Config:
    """Get configuration from environment or CLI options.

    Args:
        types: Override the types file from environment
        forest: Override the forest file from environment

    Returns:
        Config instance
    """
    config = Config()

    if types:
        config.types_file = types
    if forest:
        config.forest_file = forest

    return config


def read_forest_file(path: Path) -> Any:
    """Read a forest snapshot from a JSON file."""
    return json.loads(path.read_text(encoding="utf-8"))


def write_forest_file(path: Path, forest: NodeForest) -> None:
    path.write_text(json.dumps(forest.to_plain_data(), indent=2) + "\n", encoding="utf-8")


def require_forest_file(config: Config) -> Path:
    """Return the configured forest file.

    Raises:
        ValueError: If no forest file was given or configured
    """
    if config.forest_file is None:
        raise ValueError(
            "No forest file given. Pass FOREST or set SCHEMA_FOREST_FOREST_FILE."
        )
    return config.forest_file


def load_forest(config: Config, registry: TypeRegistry, **kwargs: Any) -> NodeForest:
    """Load the configured forest file against a registry."""
    forest_file = require_forest_file(config)
    forest = NodeForest.from_plain_data(
        registry,
        read_forest_file(forest_file),
        caption_separator=config.caption_separator,
        id_factory=lambda: unique_id(config.id_prefix),
        **kwargs,
    )
    logger.info("Loaded %d nodes from %s", len(forest), forest_file)
    return forest


def build_rich_tree(forest: NodeForest, title: str) -> Tree:
    """Build a rich Tree mirroring the forest structure."""
    tree = Tree(f"[bold]{escape(title)}[/bold]")

    def add_branch(branch: Tree, node: Node) -> None:
        style = "cyan" if node.type in forest.registry else "red"
        type_label = escape(f"[{node.type}]")
        label = f"{escape(node.caption)} [{style}]{type_label}[/{style}] [dim]{escape(node.id)}[/dim]"
        child_branch = branch.add(label)
        for child in node.children:
            add_branch(child_branch, child)

    for root in forest.nodes:
        add_branch(tree, root)
    return tree


def format_tree_lines(nodes: list[Node], indent: int = 0) -> list[str]:
    """Format nodes and their children as indented text lines.

    Args:
        nodes: Nodes to format
        indent: Current indentation level

    Returns:
        One line per node, e.g. "  Users [table] (node-1)"
    """
    lines = []
    prefix = "  " * indent
    for node in nodes:
        lines.append(f"{prefix}{node.caption} [{node.type}] ({node.id})")
        lines.extend(format_tree_lines(node.children, indent + 1))
    return lines


@app.callback()
def main_callback(
    log_level: Annotated[
        Optional[str],
        typer.Option("--log-level", help="Logging level (defaults to SCHEMA_FOREST_LOG_LEVEL)"),
    ] = None,
) -> None:
    """Edit typed database design trees and compile them to SQL DDL."""
    try:
        configure_logging(log_level or Config().log_level)
    except ValueError as e:
        err_console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)


@app.command(name="compile")
def compile_command(
    forest_file: ForestArgument = None,
    output: Annotated[
        Optional[Path],
        typer.Option("--output", "-o", help="Output file path (stdout if not specified)"),
    ] = None,
) -> None:
    """Compile a forest file into a SQL DDL script.

    The first top-level node of type "root" becomes the database and every
    table node below it becomes a CREATE TABLE statement.

    Example:
        schema-forest compile shop.json

        schema-forest compile shop.json --output shop.sql
    """
    try:
        config = get_config(forest=forest_file)
        sql = compile_forest(read_forest_file(require_forest_file(config)))
    except (ValueError, OSError, ForestError) as e:
        err_console.print(f"[red]Error:[/red] {escape(str(e))}")
        raise typer.Exit(1)

    if output:
        output.write_text(sql, encoding="utf-8")
        err_console.print(f"[green]✓[/green] DDL written to {output}")
    else:
        typer.echo(sql, nl=False)


@app.command(name="show-tree")
def show_tree(
    forest_file: ForestArgument = None,
    types: TypesOption = None,
    format: Annotated[
        str, typer.Option("--format", "-f", help="Output format: tree or text")
    ] = "tree",
) -> None:
    """Display a forest and a count of its nodes per type.

    Example:
        schema-forest show-tree shop.json --types types.json

        schema-forest show-tree shop.json -t types.json --format text
    """
    try:
        config = get_config(types, forest_file)
        forest = load_forest(config, config.get_registry())
    except (ValueError, OSError, ForestError) as e:
        err_console.print(f"[red]Error:[/red] {escape(str(e))}")
        raise typer.Exit(1)

    census = forest.type_census()
    if format == "tree":
        console.print(build_rich_tree(forest, str(config.forest_file)))

        rich_table = RichTable(title="Node types")
        rich_table.add_column("Type", style="cyan")
        rich_table.add_column("Description", style="magenta")
        rich_table.add_column("Count", style="yellow", justify="right")
        descriptions = forest.registry.descriptions()
        for type_name, count in census.items():
            rich_table.add_row(type_name, descriptions.get(type_name, "Unknown type"), str(count))
        console.print(rich_table)
    else:
        lines = format_tree_lines(forest.nodes)
        lines.append("")
        lines.extend(f"{type_name}: {count}" for type_name, count in census.items())
        typer.echo("\n".join(lines))


@app.command()
def check(
    forest_file: ForestArgument = None,
    types: TypesOption = None,
) -> None:
    """Audit a forest against the type rules.

    Exits with status 1 when any problem is found.

    Example:
        schema-forest check shop.json --types types.json
    """
    try:
        config = get_config(types, forest_file)
        forest = load_forest(config, config.get_registry())
    except (ValueError, OSError, ForestError) as e:
        err_console.print(f"[red]Error:[/red] {escape(str(e))}")
        raise typer.Exit(1)

    problems = forest.check()
    if not problems:
        console.print(f"[green]✓[/green] {len(forest)} nodes, no problems found")
        return

    console.print(f"[red]✗ {len(problems)} problem(s) found[/red]")
    for problem in problems:
        console.print(f"  - {escape(problem)}")
    raise typer.Exit(1)


@app.command()
def add(
    forest_file: Annotated[Path, typer.Argument(help="Forest JSON file")],
    parent_id: Annotated[str, typer.Argument(help="Id of the parent node")],
    type_name: Annotated[str, typer.Argument(metavar="TYPE", help="Type of the new node")],
    types: TypesOption = None,
    caption: Annotated[
        Optional[str],
        typer.Option("--caption", "-c", help="Caption of the new node (prompted if omitted)"),
    ] = None,
    output: Annotated[
        Optional[Path],
        typer.Option("--output", "-o", help="Where to write the forest (defaults to the input file)"),
    ] = None,
) -> None:
    """Add a node under an existing node and save the forest.

    The node gets its type's default properties. The caption is made unique
    among the parent's children.

    Example:
        schema-forest add shop.json root table -t types.json --caption Orders

        schema-forest add shop.json root table -t types.json -o shop-new.json
    """
    reporter = RecordingReporter()
    try:
        config = get_config(types, forest_file)
        forest = load_forest(
            config,
            config.get_registry(),
            reporter=reporter,
            input_provider=PromptInputProvider(),
        )
        added = forest.add_child(parent_id, {"type": type_name, "caption": caption})
    except (ValueError, OSError, ForestError) as e:
        err_console.print(f"[red]Error:[/red] {escape(str(e))}")
        raise typer.Exit(1)

    if not added:
        for message in reporter.messages:
            err_console.print(f"[red]Error:[/red] {escape(message)}")
        raise typer.Exit(1)

    node = forest.find_by_id(parent_id).children[-1]
    target = output or config.forest_file
    try:
        write_forest_file(target, forest)
    except OSError as e:
        err_console.print(f"[red]Error:[/red] {escape(str(e))}")
        raise typer.Exit(1)
    console.print(
        f"[green]✓[/green] Added {escape(node.type)} '{escape(node.caption)}' ({escape(node.id)}) to {target}"
    )


def main() -> None:
    """Main entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
