import json
import logging

import click

from .writer import DryRunProject, GeneratedBatch, InvalidUpstreamArtifacts, LocalProject, MapperFilesWriter, WriterConfig


@click.command()
@click.option("--root", "-r", default=".", type=click.Path(file_okay=False, resolve_path=True), help="Project root the target paths are relative to")
@click.option("--config", "-c", default=None, type=click.Path(exists=True, resolve_path=True))
@click.option("--dry-run", is_flag=True, default=False, help="Merge and report without writing any file")
@click.option("--verbose", "-v", is_flag=True, default=False)
@click.argument("manifest", type=click.Path(exists=True, resolve_path=True))
def mapper_merge(root, config, dry_run, verbose, manifest):
    """Write the files listed in a generator MANIFEST into a project."""
    logging.basicConfig(level=logging.DEBUG if verbose else logging.INFO, format="%(levelname)s %(name)s: %(message)s")

    if config is not None:
        with open(config, encoding="utf-8") as f:
            config = WriterConfig.from_dict(json.load(f))
    else:
        config = WriterConfig()

    project = LocalProject(root, atomic_write=config.atomic_write, encoding=config.encoding)
    if dry_run:
        project = DryRunProject(project, encoding=config.encoding)

    with open(manifest, encoding="utf-8") as f:
        manifest_data = json.load(f)

    try:
        batch = GeneratedBatch.from_dict(manifest_data)
        writer = MapperFilesWriter(project, batch, config)
    except InvalidUpstreamArtifacts as e:
        raise click.UsageError(str(e)) from e

    report = writer.write_all()

    prefix = "Would write" if dry_run else "Wrote"
    click.echo(f"{prefix} {len(report.written)} file(s), kept {len(report.skipped)} existing file(s).")
    for path, reason in report.fallbacks:
        click.echo(f"Regenerated {path} from scratch: {reason}")
