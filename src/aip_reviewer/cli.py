"""CLI entry point for aip-reviewer."""

import logging
import sys
from pathlib import Path

import click

from aip_reviewer.config import ReviewConfig, load_config
from aip_reviewer.errors import ConfigError, SpecLoadError
from aip_reviewer.fixer import Fixer
from aip_reviewer.report import format_fix_report, format_json, format_text
from aip_reviewer.reviewer import Reviewer
from aip_reviewer.rules.registry import RuleRegistry
from aip_reviewer.spec.loader import dereference, dump_spec, read_spec


def _read(spec_path: Path) -> tuple[dict, dict]:
    """Return the raw document (what fixes edit) and its dereferenced view (what rules read)."""
    try:
        raw = read_spec(spec_path)
    except SpecLoadError as e:
        raise click.ClickException(str(e)) from e
    return raw, dereference(raw)


def _build_config(
    config_path: Path | None, strict: bool, categories: tuple[str, ...], skip_rules: tuple[str, ...]
) -> ReviewConfig:
    """Config file values, overridden by command-line flags."""
    try:
        config = load_config(config_path) if config_path else ReviewConfig()
    except ConfigError as e:
        raise click.ClickException(str(e)) from e

    update = {}
    if strict:
        update["strict"] = True
    if categories:
        update["categories"] = tuple(categories)
    if skip_rules:
        update["skip_rules"] = config.skip_rules + tuple(skip_rules)
    return config.model_copy(update=update)


@click.group()
@click.option("-v", "--verbose", is_flag=True, help="Log rule dispatch and fix progress.")
def main(verbose: bool):
    """AIP Reviewer: check OpenAPI documents against Google's API Improvement Proposals."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


@main.command()
@click.argument("spec_path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--config", "config_path", type=click.Path(exists=True, dir_okay=False, path_type=Path), help="YAML config file.")
@click.option("--strict", is_flag=True, help="Count warnings as errors.")
@click.option("--category", "categories", multiple=True, help="Only run rules in this category (repeatable).")
@click.option("--skip-rule", "skip_rules", multiple=True, help="Skip a rule by id (repeatable).")
@click.option("--format", "fmt", default="text", type=click.Choice(["text", "json"]), help="Report format.")
@click.option("-o", "--output", type=click.Path(dir_okay=False, path_type=Path), help="Write the report to a file.")
def review(spec_path: Path, config_path: Path | None, strict: bool, categories: tuple[str, ...],
           skip_rules: tuple[str, ...], fmt: str, output: Path | None):
    """Review an OpenAPI document and report findings."""
    _raw, document = _read(spec_path)
    config = _build_config(config_path, strict, categories, skip_rules)
    result = Reviewer(config).review(document, spec_path=str(spec_path))

    text = format_json(result) if fmt == "json" else format_text(result)
    if output:
        output.parent.mkdir(parents=True, exist_ok=True)
        output.write_text(text, encoding="utf-8")
        click.echo(f"Report saved to {output}")
    else:
        click.echo(text, nl=False)

    if result.summary.errors:
        sys.exit(1)


@main.command()
@click.argument("spec_path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--config", "config_path", type=click.Path(exists=True, dir_okay=False, path_type=Path), help="YAML config file.")
@click.option("--rule", "rule_ids", multiple=True, help="Only apply fixes from this rule id (repeatable).")
@click.option("--dry-run", is_flag=True, help="Validate fixes without writing anything.")
@click.option("-o", "--output", type=click.Path(dir_okay=False, path_type=Path), help="Where to write the fixed document (default: overwrite SPEC_PATH).")
def fix(spec_path: Path, config_path: Path | None, rule_ids: tuple[str, ...], dry_run: bool, output: Path | None):
    """Apply automatic fixes to an OpenAPI document."""
    raw, document = _read(spec_path)
    config = _build_config(config_path, False, (), ())
    result = Reviewer(config).review(document, spec_path=str(spec_path))

    findings = [f for f in result.findings if not rule_ids or f.rule_id in rule_ids]
    fixable = [f for f in findings if f.fix is not None]
    click.echo(f"Found {len(findings)} findings, {len(fixable)} with automatic fixes.")
    if not fixable:
        return

    fixer = Fixer(raw)
    results = fixer.apply_fixes(fixable, dry_run=dry_run)
    click.echo(format_fix_report(results, fixer.get_summary(), dry_run=dry_run), nl=False)

    if dry_run:
        click.echo("Dry run: no files written.")
        return
    target = output or spec_path
    dump_spec(fixer.get_spec(), target)
    click.echo(f"Fixed document saved to {target}")


@main.command("rules")
@click.option("--category", default=None, help="Only list rules in this category.")
def list_rules(category: str | None):
    """List the built-in rules."""
    registry = RuleRegistry.default()
    rules = registry.by_category(category) if category else list(registry)
    for rule in rules:
        click.echo(f"{rule.id:<30} {rule.severity.value:<10} {rule.category:<16} {rule.description}")
    click.echo(f"{len(rules)} rules")
