"""
HyperClass CLI - Main Entry Point

Command-line interface for training and inspecting HDC classifiers.

Usage:
    hyperclass train                       # Train with ./config.yaml or defaults
    hyperclass train --epochs 5 --json     # Override epochs, JSON output
    hyperclass -c config.yaml info         # Show effective configuration
"""

import json
from dataclasses import asdict
from pathlib import Path
from typing import Optional

import click
import numpy as np
from loguru import logger

from hyperclass.core.classifier import Classifier
from hyperclass.core.config import HyperClassConfig, load_config
from hyperclass.core.exceptions import HyperClassError, is_debug_mode
from hyperclass.core.logging_config import configure_logging
from hyperclass.core.model import Model

from .formatters import format_config, format_metrics_table, format_run_summary


def _config(ctx: click.Context) -> HyperClassConfig:
    return ctx.obj["config"]


def _fail(error: HyperClassError) -> click.ClickException:
    logger.debug(f"{error.category.value} error: {json.dumps(error.to_dict(include_traceback=is_debug_mode()), default=str)}")
    return click.ClickException(str(error))


# ============================================================================
# CLI Group and Main Entry
# ============================================================================

@click.group()
@click.option(
    "--config",
    "-c",
    type=click.Path(exists=True, dir_okay=False),
    help="Path to config.yaml file",
)
@click.option(
    "--verbose",
    "-v",
    is_flag=True,
    help="Enable verbose output",
)
@click.pass_context
def cli(ctx, config: Optional[str], verbose: bool):
    """
    HyperClass - hyperdimensional computing classifier

    Encodes continuous feature vectors into hypervectors and trains
    class prototypes by iterative correction.
    """
    ctx.ensure_object(dict)

    try:
        loaded = load_config(Path(config) if config else None)
    except HyperClassError as e:
        raise click.ClickException(str(e)) from e
    except (OSError, ValueError) as e:
        raise click.ClickException(f"Could not read config: {e}") from e

    ctx.obj["verbose"] = verbose
    ctx.obj["config_path"] = config
    ctx.obj["config"] = loaded

    # Configure logging
    level = "DEBUG" if verbose else loaded.observability.log_level
    configure_logging(level=level, json_format=loaded.observability.json_logs or None)


# ============================================================================
# CLI Commands
# ============================================================================

@cli.command()
@click.option(
    "--epochs",
    "-e",
    type=click.IntRange(min=0),
    default=None,
    help="Number of training epochs (overrides config)",
)
@click.option(
    "--dataset-dir",
    type=click.Path(file_okay=False),
    default=None,
    help="Directory holding raw train/test .csv files",
)
@click.option(
    "--memory-dir",
    type=click.Path(file_okay=False),
    default=None,
    help="Model checkpoint directory",
)
@click.option(
    "--no-save",
    is_flag=True,
    help="Do not write the model, encoded datasets or metrics report",
)
@click.option(
    "--json",
    "output_json",
    is_flag=True,
    help="Output as JSON",
)
@click.pass_context
def train(
    ctx,
    epochs: Optional[int],
    dataset_dir: Optional[str],
    memory_dir: Optional[str],
    no_save: bool,
    output_json: bool,
):
    """
    Train a classifier.

    Loads the model checkpoint if present, loads encoded datasets (or
    encodes the raw ones), trains, then saves the metrics report and model.

    Example:
        hyperclass train --epochs 3
    """
    config = _config(ctx)
    paths = config.paths
    epochs = config.training.epochs if epochs is None else epochs
    memory_dir = memory_dir or paths.memory_dir
    dataset_dir = dataset_dir or paths.dataset_dir
    fraction = config.training.training_fraction

    try:
        rng = np.random.default_rng(config.model.seed)
        model = Model.from_config(config, rng)
        if not model.load(memory_dir):
            logger.info("No model could be loaded; continuing with untrained model.")

        classifier = Classifier(
            model,
            rng=rng,
            dropout=config.training.dropout,
            encode_workers=config.training.encode_workers,
        )
        if not classifier.load_datasets(paths.encoded_dataset_dir, fraction):
            if not classifier.load_datasets(dataset_dir, fraction):
                raise click.ClickException(
                    f"No dataset could be loaded from {paths.encoded_dataset_dir} or {dataset_dir}"
                )
            if not no_save:
                classifier.save_datasets(paths.encoded_dataset_dir)

        metrics = classifier.train(epochs)
    except HyperClassError as e:
        raise _fail(e) from e

    summary = {
        "success": True,
        "epochs": epochs,
        "final_accuracy": metrics[-1].accuracy,
        "report_path": None,
        "model_saved": None,
        "model_path": None,
    }
    if not no_save:
        try:
            summary["report_path"] = str(metrics.save(paths.experiments_dir, paths.experiment_name))
        except HyperClassError as e:
            logger.error(f"Failed to save metrics report: {e}")
        summary["model_saved"] = model.save(memory_dir)
        summary["model_path"] = str(memory_dir)

    if output_json:
        summary.update(metrics.to_dict())
        click.echo(json.dumps(summary, indent=2))
    else:
        click.echo(format_metrics_table(metrics))
        click.echo()
        click.echo(format_run_summary(summary))


@cli.command()
@click.option(
    "--json",
    "output_json",
    is_flag=True,
    help="Output as JSON",
)
@click.pass_context
def info(ctx, output_json: bool):
    """
    Show the effective configuration.

    Example:
        hyperclass info --json
    """
    config = _config(ctx)
    if output_json:
        click.echo(json.dumps(asdict(config), indent=2))
    else:
        if ctx.obj.get("config_path"):
            click.echo(f"Config file: {ctx.obj['config_path']}")
        click.echo(format_config(config))


def main():
    cli(obj={})


if __name__ == "__main__":
    main()
