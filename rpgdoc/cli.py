"""CLI interface for rpgdoc"""

import click
import json
import logging
from pathlib import Path
from typing import Optional

import yaml

logging.basicConfig(level=logging.WARNING, format="%(levelname)s %(name)s: %(message)s")
logger = logging.getLogger(__name__)

from rpgdoc import __version__
from rpgdoc.config import load_config
from rpgdoc.static_analysis.documentation_generator import (
    DocumentationGenerator, SourceRejectedError,
)


def _load_config_option(config_path: Optional[str]):
    try:
        return load_config(Path(config_path) if config_path else None)
    except (ValueError, yaml.YAMLError) as e:
        raise click.BadParameter(str(e), param_hint="--config")


@click.group()
@click.version_option(version=__version__)
def main():
    """rpgdoc - Documentation generator for fixed-form RPG programs

    Reads RPG source and produces a ten-section documentation report:
    file usage, business rules, calls, validations, data mappings and
    pseudocode per subroutine.
    """
    pass


@main.command()
@click.argument("source", type=click.Path(exists=True, dir_okay=False))
@click.option("--messages", type=click.Path(exists=True, dir_okay=False),
              help="Message list (ID NUMBER / TEXT rows) or free-form instructions")
@click.option("--output", type=click.Path(dir_okay=False), help="Write the report to this file")
@click.option("--config", "config_path", type=click.Path(exists=True, dir_okay=False),
              help="YAML file overriding analyzer settings")
@click.option("--format", "output_format", default="text",
              type=click.Choice(["text", "json"]),
              help="Text report (default) or the analysis model as JSON")
@click.option("--verbose", is_flag=True, default=False, help="Debug logging")
def analyze(source: str, messages: Optional[str], output: Optional[str],
            config_path: Optional[str], output_format: str, verbose: bool):
    """Generate documentation for an RPG source file"""
    if verbose:
        logging.getLogger().setLevel(logging.DEBUG)

    config = _load_config_option(config_path)
    source_text = Path(source).read_text(encoding="utf-8", errors="replace")
    annotation_text = (Path(messages).read_text(encoding="utf-8", errors="replace")
                       if messages else None)

    generator = DocumentationGenerator(config)
    try:
        if output_format == "json":
            model = generator.build_model(source_text, annotation_text)
            rendered = json.dumps(model.to_dict(), indent=2, ensure_ascii=False) + "\n"
        else:
            rendered = generator.generate(source_text, annotation_text)
    except SourceRejectedError as e:
        raise click.UsageError(f"{source}: {e}")

    if output:
        output_path = Path(output)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        with open(output_path, "w", encoding="utf-8") as f:
            f.write(rendered)
        click.echo(f"[OK] Documentation written to {output_path}")
    else:
        click.echo(rendered, nl=False)


@main.command("show-config")
@click.option("--config", "config_path", type=click.Path(exists=True, dir_okay=False),
              help="YAML file overriding analyzer settings")
def show_config(config_path: Optional[str]):
    """Print the effective analyzer configuration as YAML"""
    config = _load_config_option(config_path)
    click.echo(yaml.safe_dump(config, allow_unicode=True, sort_keys=False), nl=False)


if __name__ == "__main__":
    main()
