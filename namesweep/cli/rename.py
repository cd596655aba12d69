#!/usr/bin/env python3
"""
rename.py
---------
CLI commands for scanning references and applying renames.

Commands:
    namesweep scan <corpus> <entity-id>               - List references
    namesweep scan <corpus> <entity-id> -o scan.yaml  - Save the scan
    namesweep apply <corpus> <entity-id> <new-name>   - Preview the patch plan
    namesweep apply ... --decisions d.yaml --apply    - Write the changes

Decisions default to accepting full-name and metadata matches and
rejecting partial matches; ``--accept-partials`` flips the partials, and
a decisions file (match ids from ``scan``) overrides both.
"""
# --- Annotations ---
from __future__ import annotations

# --- Standard library imports ---
import asyncio
from pathlib import Path
from typing import Optional

# --- Third-party imports ---
import click

# --- Local imports ---
from namesweep.core.cli import RenameStats
from namesweep.core.config import DEFAULT_CONFIG, RenameConfig
from namesweep.core.exceptions import RenameError
from namesweep.core.logging_manager import NamesweepLogger, handle_cli_error
from namesweep.rename.apply import (
    apply_chronicle_patches,
    apply_entity_patches,
    apply_event_patches_to_store,
)
from namesweep.rename.models import Chronicle, Entity
from namesweep.rename.patches import RenamePatches, build_rename_patches
from namesweep.rename.review import (
    ReviewReport,
    accept_partials as accept_partial_matches,
    apply_overrides,
    default_decisions,
    load_decisions,
)
from namesweep.rename.scanner import scan_for_references
from namesweep.rename.snapshot import CorpusSnapshot, load_corpus, save_entities, write_yaml
from namesweep.rename.store import EventListStore, YamlRecordStore


def _target_entity(corpus: CorpusSnapshot, entity_id: str) -> Entity:
    entity = corpus.entity(entity_id)
    if entity is None:
        raise RenameError(f"Entity not found in corpus: '{entity_id}'")
    return entity


def _plan_lines(patches: RenamePatches) -> list:
    return [
        "Patch plan:",
        f"  ✎ {len(patches.entity_patches)} entity patch(es) (plus the renamed entity)",
        f"  ✎ {len(patches.chronicle_patches)} chronicle patch(es)",
        f"  ✎ {len(patches.event_patches)} event patch(es)",
    ]


@click.command()
@click.argument("corpus", type=click.Path(exists=True, file_okay=False))
@click.argument("entity_id")
@click.option(
    "-o",
    "--output",
    type=click.Path(dir_okay=False),
    default=None,
    help="Write the scan result to this YAML file",
)
@click.option("--show-context", is_flag=True, help="Show text around each match")
@click.pass_context
def scan(
    ctx: click.Context,
    corpus: str,
    entity_id: str,
    output: Optional[str],
    show_context: bool,
) -> None:
    """List every reference to an entity's current name."""
    logger: NamesweepLogger = ctx.obj["logger"]
    config: RenameConfig = ctx.obj.get("config", DEFAULT_CONFIG)

    try:
        snapshot = load_corpus(Path(corpus))
        entity = _target_entity(snapshot, entity_id)

        result = scan_for_references(
            entity_id,
            entity.name,
            snapshot.entities,
            snapshot.chronicles,
            snapshot.relationships,
            snapshot.events,
            config=config,
            logger=logger,
        )

        report = ReviewReport(
            result,
            default_decisions(result, config),
            show_context=show_context,
        )
        click.echo(report.summary())

        if output:
            write_yaml(Path(output), result.to_dict())
            click.echo(f"\n💾 Scan written to {output}")

    except Exception as e:
        handle_cli_error(ctx, e, "scan", {"corpus": corpus, "entity_id": entity_id})


@click.command()
@click.argument("corpus", type=click.Path(exists=True, file_okay=False))
@click.argument("entity_id")
@click.argument("new_name")
@click.option(
    "--decisions",
    "decisions_path",
    type=click.Path(exists=True, dir_okay=False),
    default=None,
    help="YAML file of match decisions (overrides defaults)",
)
@click.option("--accept-partials", is_flag=True, help="Accept partial-name matches by default")
@click.option("--show-context", is_flag=True, help="Show text around each match")
@click.option(
    "--apply",
    "do_apply",
    is_flag=True,
    help="Write changes (default is a dry run)",
)
@click.pass_context
def apply(
    ctx: click.Context,
    corpus: str,
    entity_id: str,
    new_name: str,
    decisions_path: Optional[str],
    accept_partials: bool,
    show_context: bool,
    do_apply: bool,
) -> None:
    """
    Rename an entity and patch every accepted reference.

    Without --apply nothing is written: the matches, their decisions and
    the resulting patch plan are printed instead.
    """
    logger: NamesweepLogger = ctx.obj["logger"]
    config: RenameConfig = ctx.obj.get("config", DEFAULT_CONFIG)

    try:
        snapshot = load_corpus(Path(corpus))
        entity = _target_entity(snapshot, entity_id)

        if not new_name.strip():
            raise RenameError("New name is empty")
        if new_name == entity.name:
            raise RenameError("Old name and new name are identical")

        result = scan_for_references(
            entity_id,
            entity.name,
            snapshot.entities,
            snapshot.chronicles,
            snapshot.relationships,
            snapshot.events,
            config=config,
            logger=logger,
        )

        decisions = default_decisions(result, config, new_name=new_name)
        if accept_partials:
            decisions = accept_partial_matches(decisions, result, new_name=new_name)
        if decisions_path:
            decisions = apply_overrides(decisions, load_decisions(Path(decisions_path)))

        patches = build_rename_patches(result, new_name, decisions.values())

        report = ReviewReport(result, decisions, new_name=new_name, show_context=show_context)
        click.echo(report.summary())
        click.echo()
        click.echo("\n".join(_plan_lines(patches)))

        if not do_apply:
            click.echo("\n💡 Dry run: nothing written. Run with --apply to write changes")
            return

        stats = RenameStats(
            chronicles_planned=len(patches.chronicle_patches),
            events_planned=len(patches.event_patches),
        )

        updated = apply_entity_patches(
            snapshot.entities, patches.entity_patches, entity_id, new_name
        )
        save_entities(snapshot.root, updated)
        stats.entities_updated = sum(
            1 for old, new in zip(snapshot.entities, updated) if old is not new
        )

        if patches.chronicle_patches:
            chronicle_store = YamlRecordStore(snapshot.chronicles_dir, Chronicle)
            stats.chronicles_updated = asyncio.run(apply_chronicle_patches(
                patches.chronicle_patches,
                chronicle_store.get,
                chronicle_store.put,
                logger=logger,
            ))

        if patches.event_patches:
            event_store = EventListStore(snapshot.events_path)
            stats.events_updated = asyncio.run(apply_event_patches_to_store(
                patches.event_patches,
                event_store.get,
                event_store.put,
                logger=logger,
            ))

        logger.log_operation("rename_apply", {
            "entity_id": entity_id,
            "old_name": entity.name,
            "new_name": new_name,
            **stats.to_dict(),
        })

        click.echo(f"\n✅ Renamed {entity_id}: {stats.summary()}")
        if stats.failures:
            click.echo(
                f"⚠️  {stats.failures} record(s) could not be updated; see errors.log",
                err=True,
            )

    except Exception as e:
        handle_cli_error(
            ctx, e, "apply",
            {"corpus": corpus, "entity_id": entity_id, "new_name": new_name},
        )
