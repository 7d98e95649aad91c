"""
Application runner: discovers classes from a config, runs the LSP and ISP
checkers over them and returns a RunResult. Usable without the CLI.
"""
from dataclasses import dataclass
from typing import Callable, Optional

from php_solid.config import SolidConfig
from php_solid.errors import ClassLoadError
from php_solid.inputs.directory_scanning import index_paths
from php_solid.logging import get_logger
from php_solid.logging_tags import CLI
from php_solid.models.run_result import RunResult
from php_solid.outputs.output import ReportWriter
from php_solid.rules.isp import FatInterfaceRule
from php_solid.session import AnalysisSession

logger = get_logger(__name__)


@dataclass
class RunOptions:
    config: SolidConfig
    run_lsp: bool = True
    run_isp: bool = True
    isp_threshold: Optional[int] = None  # overrides config.isp_threshold
    json_output: bool = False

    @property
    def effective_threshold(self) -> int:
        if self.isp_threshold is not None:
            return self.isp_threshold
        if self.config.isp_threshold is not None:
            return self.config.isp_threshold
        return FatInterfaceRule.DEFAULT_THRESHOLD


class Application:
    def run(self, options: RunOptions, writer: Optional[ReportWriter] = None) -> RunResult:
        writer = writer or ReportWriter(json_output=options.json_output)
        session = AnalysisSession(isp_threshold=options.effective_threshold)

        scan = index_paths(session.indexer, options.config)
        result = RunResult(classes=list(scan.classes), errors=list(scan.errors))
        for error in scan.errors:
            writer.file_error(error["file"], error["message"])

        if not scan.classes:
            logger.info(f"{CLI} No classes to check")
            writer.summary(result)
            return result

        if options.run_lsp:
            writer.heading("Checking Liskov Substitution Principle...")
            self._run_principle(scan.classes, session.check_lsp, writer, result)

        if options.run_isp:
            writer.heading("\nChecking Interface Segregation Principle...")
            self._run_principle(scan.classes, session.check_isp, writer, result)

        writer.summary(result)
        return result

    def _run_principle(self, classes: list, check: Callable[[str], list],
                       writer: ReportWriter, result: RunResult):
        for class_name in classes:
            try:
                violations = check(class_name)
            except ClassLoadError as e:
                logger.warning(f"{CLI} Could not load {class_name}: {e}")
                result.failed_class_names.append(class_name)
                result.errors.append({"class": class_name, "message": str(e)})
                writer.class_result(class_name, [f"Error: {e}"], ok=False)
                continue

            if not violations:
                writer.class_result(class_name, [], ok=True)
                continue

            result.failed_class_names.append(class_name)
            result.violations.extend(v.to_dict() for v in violations)
            writer.class_result(class_name, [str(v) for v in violations], ok=False)
