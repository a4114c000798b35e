"""CLI interface for svgsweep."""

from __future__ import annotations

import json
import logging
import sys
from dataclasses import replace
from pathlib import Path

import click

from svgsweep.core.engine import RunController
from svgsweep.core.output import OutputResolver, should_compress
from svgsweep.core.registry import RuleRegistry
from svgsweep.core.rule_loader import load_rules
from svgsweep.core.scanner import FileScanner
from svgsweep.core.tracker import Tracker
from svgsweep.errors import FatalError, PresetError
from svgsweep.models.config import (
    COMPRESSORS,
    MAX_LEVEL,
    MAX_PRECISION,
    MIN_LEVEL,
    MIN_PRECISION,
    NamingMode,
    NamingPolicy,
    RunConfig,
)
from svgsweep.models.stats import RunReport, RunState, RunStats
from svgsweep.models.task import FileResult
from svgsweep.presets import DEFAULT_PRESET, PresetStore
from svgsweep.settings import Settings
from svgsweep.utils import bytes_to_human, format_duration, saved_ratio, time_ago


def _setup_logging(verbosity: int) -> None:
    level = logging.WARNING
    if verbosity == 1:
        level = logging.INFO
    elif verbosity >= 2:
        level = logging.DEBUG
    logging.basicConfig(level=level, format="%(levelname)s: %(message)s")


def _build_registry() -> RuleRegistry:
    registry = RuleRegistry()
    load_rules(registry, Settings.instance())
    return registry


def _build_controller(on_result=None) -> RunController:
    max_threads = Settings.instance().max_threads
    return RunController(_build_registry(), on_result=on_result, max_threads=max_threads)


def _fail(message: str) -> None:
    click.echo(f"{click.style('Error:', fg='red', bold=True)} {message}", err=True)
    sys.exit(1)


@click.group()
@click.option("-v", "--verbose", count=True, help="Increase verbosity (-v info, -vv debug)")
def main(verbose: int) -> None:
    """svgsweep — batch SVG cleaner."""
    _setup_logging(verbose)


# ── clean ────────────────────────────────────────────────────────────────

def _build_config(
    inputs: tuple[Path, ...],
    base: RunConfig,
    *,
    out_dir: Path | None,
    prefix: str | None,
    suffix: str | None,
    overwrite: bool,
    replace_existing: bool,
    compress: str | None,
    level: int | None,
    compress_all: bool,
    threads: int | None,
    recursive: bool | None,
    rules: tuple[str, ...],
    precision: int | None,
) -> RunConfig:
    """Apply command-line overrides on top of a preset config."""
    config = base

    if inputs:
        if len(inputs) == 1 and inputs[0].is_dir():
            config = config.with_input(root=inputs[0])
        else:
            dirs = [p for p in inputs if p.is_dir()]
            if dirs:
                raise click.UsageError(f"Pass a single folder or only files, not both: {dirs[0]}")
            config = config.with_input(files=inputs)

    naming = config.naming
    if overwrite:
        naming = replace(naming, mode=NamingMode.OVERWRITE)
    elif out_dir is not None:
        naming = replace(naming, mode=NamingMode.OUTPUT_FOLDER, output_dir=out_dir)
    elif prefix is not None or suffix is not None:
        naming = NamingPolicy(
            mode=NamingMode.PREFIX_SUFFIX,
            prefix=prefix or "",
            suffix=suffix or "",
            replace_existing=naming.replace_existing,
        )
    if replace_existing:
        naming = replace(naming, replace_existing=True)

    compression = config.compression
    if compress is not None:
        compression = replace(compression, enabled=True, compressor=compress)
    if level is not None:
        compression = replace(compression, level=level)
    if compress_all:
        compression = replace(compression, enabled=True, compress_all=True)

    clean = config.clean
    if rules:
        clean = replace(clean, rules=tuple(rules))
    if precision is not None:
        clean = replace(
            clean,
            coordinates_precision=precision,
            properties_precision=precision,
            transforms_precision=precision,
            paths_precision=precision,
        )

    return replace(
        config,
        naming=naming,
        compression=compression,
        clean=clean,
        thread_count=threads if threads is not None else config.thread_count,
        recursive=recursive if recursive is not None else config.recursive,
    )


def _echo_result(result: FileResult) -> None:
    name = str(result.task.relative_path)
    elapsed = format_duration(result.elapsed_ns)
    if result.cleaned:
        after = result.size_after or 0
        ratio = saved_ratio(result.task.size_before, after)
        click.echo(
            f"  {click.style('✓', fg='green')} {name:40s} — "
            f"{bytes_to_human(result.task.size_before)} → "
            f"{click.style(bytes_to_human(after), fg='green', bold=True)} "
            f"({ratio:.1f}% saved, {elapsed})"
        )
    else:
        click.echo(f"  {click.style('✗', fg='red')} {name:40s} — crashed: {result.error}")


def _echo_summary(report: RunReport) -> None:
    stats = report.stats
    state_color = "green" if report.state is RunState.COMPLETED else "yellow"
    click.echo(f"\n{click.style(report.state.value.capitalize(), fg=state_color, bold=True)}\n")
    click.echo(f"  Total count:  {stats.total_count:,}")
    click.echo(f"  Cleaned:      {click.style(f'{stats.cleaned_count:,}', fg='green')}")
    crashed_color = "red" if stats.crashed_count else None
    click.echo(f"  Crashed:      {click.style(f'{stats.crashed_count:,}', fg=crashed_color)}")
    click.echo(f"  Size before:  {bytes_to_human(stats.size_before_total)}")
    ratio = saved_ratio(stats.size_before_total, stats.size_after_total)
    click.echo(
        f"  Size after:   {click.style(bytes_to_human(stats.size_after_total), fg='green', bold=True)}"
        f" ({ratio:.1f}% saved)"
    )
    if stats.processed_count:
        click.echo(
            "  Time:         "
            f"min {format_duration(stats.elapsed_min_ns or 0)}, "
            f"avg {format_duration(stats.elapsed_avg_ns or 0)}, "
            f"max {format_duration(stats.elapsed_max_ns or 0)}"
        )
    click.echo()


def _stats_to_dict(stats: RunStats) -> dict:
    return {
        "total_count": stats.total_count,
        "cleaned_count": stats.cleaned_count,
        "crashed_count": stats.crashed_count,
        "size_before_total": stats.size_before_total,
        "size_after_total": stats.size_after_total,
        "elapsed_min_ns": stats.elapsed_min_ns,
        "elapsed_max_ns": stats.elapsed_max_ns,
        "elapsed_avg_ns": stats.elapsed_avg_ns,
    }


def _result_to_dict(result: FileResult) -> dict:
    return {
        "source": str(result.task.source_path),
        "outcome": result.outcome.value,
        "size_before": result.task.size_before,
        "size_after": result.size_after,
        "destination": str(result.destination) if result.destination else None,
        "elapsed_ns": result.elapsed_ns,
        "error": result.error,
    }


def _dry_run(config: RunConfig, as_json: bool) -> None:
    """Show which files would be cleaned and where they would go."""
    try:
        config.validate()
        tasks = FileScanner.for_config(config).collect()
        resolver = OutputResolver(config.naming, recursive=config.recursive)
    except FatalError as exc:
        _fail(str(exc))
        return

    plan = [(t, resolver.destination(t, should_compress(t, config))) for t in tasks]

    if as_json:
        data = [
            {"source": str(t.source_path), "destination": str(dest), "size_before": t.size_before}
            for t, dest in plan
        ]
        click.echo(json.dumps({"status": "dry_run", "files": data}, indent=2))
        return

    for task, dest in plan:
        click.echo(f"  {click.style('·', fg='cyan')} {str(task.source_path):40s} → {dest}")
    total = sum(t.size_before for t in tasks)
    click.echo(f"\n{len(tasks):,} files, {bytes_to_human(total)}")
    click.echo("(dry run — no files were written)")


@main.command()
@click.argument("inputs", nargs=-1, type=click.Path(path_type=Path))
@click.option("--out-dir", "-o", type=click.Path(file_okay=False, path_type=Path),
              help="Save cleaned files into this folder")
@click.option("--prefix", default=None, help="Prefix for cleaned file names")
@click.option("--suffix", default=None, help="Suffix for cleaned file names (default _cleaned)")
@click.option("--overwrite", is_flag=True, help="Overwrite original files")
@click.option("--replace", "replace_existing", is_flag=True, help="Replace existing output files")
@click.option("--compress", type=click.Choice(COMPRESSORS), default=None, help="Compress output to svgz")
@click.option("--level", type=click.IntRange(MIN_LEVEL, MAX_LEVEL), default=None, help="Compression level")
@click.option("--compress-all", is_flag=True, help="Compress plain svg inputs to svgz as well")
@click.option("--threads", "-j", type=click.IntRange(min=1), default=None, help="Number of worker threads")
@click.option("--recursive/--no-recursive", "-r/-R", default=None, help="Scan sub-folders")
@click.option("--rule", "rules", multiple=True, help="Rule ID to apply (repeatable, default: all safe rules)")
@click.option("--precision", type=click.IntRange(MIN_PRECISION, MAX_PRECISION), default=None,
              help="Decimal precision for every number class")
@click.option("--preset", default=None, help="Start from a saved preset")
@click.option("--save-preset", default=None, help="Save the resulting settings as a preset")
@click.option("--force", is_flag=True, help="Overwrite an existing preset with --save-preset")
@click.option("--dry-run", is_flag=True, help="Show what would be cleaned without writing anything")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.option("--no-history", is_flag=True, help="Do not record this run in the history")
def clean(
    inputs: tuple[Path, ...],
    out_dir: Path | None,
    prefix: str | None,
    suffix: str | None,
    overwrite: bool,
    replace_existing: bool,
    compress: str | None,
    level: int | None,
    compress_all: bool,
    threads: int | None,
    recursive: bool | None,
    rules: tuple[str, ...],
    precision: int | None,
    preset: str | None,
    save_preset: str | None,
    force: bool,
    dry_run: bool,
    as_json: bool,
    no_history: bool,
) -> None:
    """Clean SVG and SVGZ files."""
    store = PresetStore()
    try:
        base = store.get(preset or DEFAULT_PRESET)
    except PresetError as exc:
        _fail(str(exc))
        return

    config = _build_config(
        inputs, base,
        out_dir=out_dir, prefix=prefix, suffix=suffix, overwrite=overwrite,
        replace_existing=replace_existing, compress=compress, level=level,
        compress_all=compress_all, threads=threads, recursive=recursive,
        rules=rules, precision=precision,
    )

    if save_preset:
        try:
            store.save(save_preset, config, overwrite=force)
        except PresetError as exc:
            _fail(f"{exc} (use --force to overwrite)" if not force else str(exc))
            return
        if not as_json:
            click.echo(f"Saved preset '{save_preset}'.")

    if dry_run:
        _dry_run(config, as_json)
        return

    if config.input_root is None and not config.input_files:
        raise click.UsageError("No input given. Pass a folder or files, or use a preset with an input.")

    controller = _build_controller(on_result=None if as_json else _echo_result)
    if not as_json:
        click.echo(f"\n{click.style('🧹', bold=True)} Cleaning...\n")

    controller.start(config)
    try:
        report = controller.wait()
    except KeyboardInterrupt:
        click.echo("\nStopping after the files in progress...", err=True)
        controller.cancel()
        report = controller.wait()

    if report.state is RunState.FATAL:
        _fail(str(report.error))
        return

    if not no_history:
        Tracker().record(report)

    if as_json:
        click.echo(json.dumps({
            "status": report.state.value,
            "stats": _stats_to_dict(report.stats),
            "results": [_result_to_dict(r) for r in report.results],
        }, indent=2))
        return

    _echo_summary(report)


# ── rules ────────────────────────────────────────────────────────────────

@main.command("rules")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def rules_cmd(as_json: bool) -> None:
    """List available cleaning rules."""
    registry = _build_registry()
    defaults = {r.id for r in registry.get_default()}

    if as_json:
        data = [
            {
                "id": r.id,
                "name": r.name,
                "description": r.description,
                "risk_level": r.risk_level,
                "default": r.id in defaults,
            }
            for r in registry
        ]
        click.echo(json.dumps(data, indent=2))
        return

    for rule in registry:
        risk_tag = ""
        if rule.risk_level != "safe":
            risk_tag = click.style(f" [{rule.risk_level}]", fg="yellow")
        default_tag = click.style(" [default]", fg="green") if rule.id in defaults else ""
        click.echo(f"  {click.style(rule.id, fg='cyan', bold=True):35s}  {rule.name}{default_tag}{risk_tag}")
        click.echo(f"    {rule.description}")


# ── presets ──────────────────────────────────────────────────────────────

@main.group()
def presets() -> None:
    """Preset management commands."""


@presets.command("list")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def presets_list(as_json: bool) -> None:
    """List saved presets."""
    store = PresetStore()
    items = store.list()
    if as_json:
        click.echo(json.dumps({p.name: p.config.to_dict() for p in items}, indent=2))
        return
    for item in items:
        tag = click.style(" [default]", fg="blue") if item.name == DEFAULT_PRESET else ""
        naming = item.config.naming.mode.value
        click.echo(f"  {click.style(item.name, fg='cyan', bold=True):30s}  {naming}, "
                   f"{item.config.thread_count} threads{tag}")


@presets.command("show")
@click.argument("name")
def presets_show(name: str) -> None:
    """Show the settings stored in a preset."""
    try:
        config = PresetStore().get(name)
    except PresetError as exc:
        _fail(str(exc))
        return
    click.echo(json.dumps(config.to_dict(), indent=2))


@presets.command("remove")
@click.argument("name")
def presets_remove(name: str) -> None:
    """Remove a saved preset."""
    try:
        PresetStore().remove(name)
    except PresetError as exc:
        _fail(str(exc))
        return
    click.echo(f"Removed preset '{name}'.")


# ── stats ────────────────────────────────────────────────────────────────

@main.command()
@click.option("--period", "-p", default="all", type=click.Choice(["today", "week", "month", "all"]))
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def stats(period: str, as_json: bool) -> None:
    """Show space saved by previous runs."""
    data = Tracker().get_stats(period)

    if as_json:
        click.echo(json.dumps(data, indent=2))
        return

    click.echo(f"\n{click.style('📊', bold=True)} Statistics ({period})\n")
    click.echo(f"  Runs:           {data['run_count']}")
    click.echo(f"  Files cleaned:  {data['files_cleaned']:,}")
    click.echo(f"  Files crashed:  {data['files_crashed']:,}")
    click.echo(f"  Bytes saved:    {click.style(bytes_to_human(data['bytes_saved']), fg='green', bold=True)}")
    click.echo(f"  Lifetime total: {click.style(bytes_to_human(data['lifetime_bytes_saved']), fg='cyan', bold=True)}")
    click.echo(f"  Last run:       {time_ago(data['last_run']) if data['last_run'] else 'never'}")
    click.echo()
