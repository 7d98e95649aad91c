import json
from typing import Callable, Iterable

import typer

from php_solid.models.run_result import RunResult


# --- Pretty printing & JSON export ------------------------------------------

class ReportWriter:
    """
    Writes a run's report. In text mode every class gets a ``[PASS]`` or
    ``[FAIL]`` line, followed by its violations, and a summary closes the
    report. In JSON mode nothing is written until ``write_json``.
    """

    def __init__(self, json_output: bool = False, echo: Callable[[str], None] = typer.echo):
        self.json_output = json_output
        self.echo = echo

    def heading(self, text: str):
        if not self.json_output:
            self.echo(f"{text}\n")

    def class_result(self, class_name: str, lines: Iterable[str], ok: bool):
        if self.json_output:
            return
        self.echo(f"{'[PASS]' if ok else '[FAIL]'} {class_name}")
        for line in lines:
            self.echo(f"       -> {line}")

    def file_error(self, path: str, message: str):
        if not self.json_output:
            self.echo(f"[ERROR] {path}: {message}")

    def summary(self, result: RunResult):
        if self.json_output:
            self.write_json(result)
            return
        total = len(result.classes)
        self.echo("")
        self.echo(f"Classes checked: {total}")
        self.echo(f"Passed: {result.passed_count} / {total}")
        self.echo(f"Total violations: {result.total_violations}")

    def write_json(self, result: RunResult):
        self.echo(to_json(result))


def to_json(result: RunResult) -> str:
    """
    Serializes the run to the JSON report:
    ``{"violations": [...], "errors": [...]}``.
    """
    return json.dumps(result.to_json_report(), indent=2)
