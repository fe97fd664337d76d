"""
CLI Output Formatters

Tables and colored output for training runs and configuration.
"""

from dataclasses import asdict
from typing import Any, Dict, List

from tabulate import tabulate

from hyperclass.core.config import HyperClassConfig
from hyperclass.core.metrics import TrainingLog


# Color codes for terminal output
class Colors:
    """ANSI color codes for terminal output."""
    OKGREEN = "\033[92m"
    WARNING = "\033[93m"
    ENDC = "\033[0m"
    BOLD = "\033[1m"

    @staticmethod
    def green(text: str) -> str:
        return f"{Colors.OKGREEN}{text}{Colors.ENDC}"

    @staticmethod
    def yellow(text: str) -> str:
        return f"{Colors.WARNING}{text}{Colors.ENDC}"

    @staticmethod
    def bold(text: str) -> str:
        return f"{Colors.BOLD}{text}{Colors.ENDC}"


def format_metrics_table(metrics: TrainingLog) -> str:
    """
    Format a training log as a table.

    Args:
        metrics: Log returned by ``Classifier.train``

    Returns:
        Formatted table string
    """
    if not len(metrics):
        return "No metrics recorded."

    headers = ["Epoch", "Error %", "Accuracy %"]
    rows = [[m.epoch, f"{m.error:.2f}", f"{m.accuracy:.2f}"] for m in metrics]
    return tabulate(rows, headers=headers, tablefmt="grid", disable_numparse=True)


def _flatten(prefix: str, values: Dict[str, Any]) -> List[List[str]]:
    rows = []
    for key, value in values.items():
        name = f"{prefix}.{key}" if prefix else key
        if isinstance(value, dict):
            rows.extend(_flatten(name, value))
        else:
            rows.append([name, "-" if value is None else str(value)])
    return rows


def format_config(config: HyperClassConfig) -> str:
    """Effective configuration as a two-column table."""
    rows = _flatten("", asdict(config))
    return tabulate(rows, headers=["Setting", "Value"], tablefmt="simple")


def format_run_summary(summary: Dict[str, Any]) -> str:
    """One line per outcome of a ``train`` run."""
    lines = [Colors.bold("=== SUCCESS ===")]
    final = summary.get("final_accuracy")
    if final is not None:
        lines.append(f"Final accuracy: {Colors.green(f'{final:.2f}%')}")
    if summary.get("report_path"):
        lines.append(f"Metrics report: {summary['report_path']}")
    if summary.get("model_saved") is False:
        lines.append(Colors.yellow("Model was not saved"))
    elif summary.get("model_path"):
        lines.append(f"Model saved to: {summary['model_path']}")
    return "\n".join(lines)
