import json

from php_solid.application import Application, RunOptions
from php_solid.config import SolidConfig
from php_solid.errors import ClassNotFoundError
from php_solid.models.run_result import RunResult
from php_solid.outputs.output import ReportWriter, to_json


class Captured:
    def __init__(self):
        self.lines = []

    def __call__(self, text: str):
        self.lines.append(text)

    @property
    def text(self) -> str:
        return "\n".join(self.lines)


def _run(options: RunOptions):
    echo = Captured()
    result = Application().run(options, ReportWriter(options.json_output, echo=echo))
    return result, echo


def test_no_classes_gives_empty_result(tmp_path):
    result, echo = _run(RunOptions(config=SolidConfig(directories=[str(tmp_path)])))

    assert result.classes == []
    assert result.violations == []
    assert result.errors == []
    assert result.failed_count == 0
    assert "Classes checked: 0" in echo.text


def test_compliant_directory(fixtures_dir):
    config = SolidConfig(directories=[str(fixtures_dir / "cli-only-ok")])
    result, echo = _run(RunOptions(config=config))

    assert result.classes == ["CompliantJob"]
    assert result.violations == []
    assert result.failed_count == 0
    assert "[PASS] CompliantJob" in echo.lines
    assert "Passed: 1 / 1" in echo.lines
    assert set(result.to_json_report()) == {"violations", "errors"}


def test_lsp_violations_are_structured(fixtures_dir):
    config = SolidConfig(directories=[str(fixtures_dir / "cli-example")])
    result, echo = _run(RunOptions(config=config, run_isp=False))

    assert result.classes == ["AllowedTask", "FailingTask"]
    assert result.failed_count == 1
    assert result.total_violations == 1
    violation = result.violations[0]
    assert violation["principle"] == "LSP"
    assert violation["className"] == "FailingTask"
    assert violation["methodName"] == "run"
    assert violation["contractName"] == "TaskWithoutThrows"
    assert "RuntimeException" in violation["reason"]

    assert echo.lines[0] == "Checking Liskov Substitution Principle...\n"
    assert "[PASS] AllowedTask" in echo.lines
    assert "[FAIL] FailingTask" in echo.lines
    assert any(line.startswith("       -> FailingTask::run() violates TaskWithoutThrows") for line in echo.lines)
    assert echo.lines[-3:] == ["Classes checked: 2", "Passed: 1 / 2", "Total violations: 1"]


def test_isp_only_skips_lsp(fixtures_dir, tmp_path):
    (tmp_path / "stub.php").write_text(
        "<?php\n"
        "interface Door { public function open(): void; public function lock(): void; }\n"
        "class Arch implements Door {\n"
        "    public function open(): void { echo 'open'; }\n"
        "    public function lock(): void { throw new RuntimeException('no lock'); }\n"
        "}\n"
        "class Gate implements Door {\n"
        "    public function open(): void { echo 'open'; }\n"
        "    public function lock(): void {}\n"
        "}\n",
        encoding="utf-8",
    )
    result, echo = _run(RunOptions(config=SolidConfig(directories=[str(tmp_path)]), run_lsp=False))

    assert "Checking Liskov Substitution Principle...\n" not in echo.lines
    assert [v["principle"] for v in result.violations] == ["ISP"]
    assert result.violations[0]["interfaceName"] == "Door"
    assert result.failed_class_names == ["Gate"]


def test_threshold_precedence():
    config = SolidConfig(isp_threshold=7)
    assert RunOptions(config=config, isp_threshold=2).effective_threshold == 2
    assert RunOptions(config=config).effective_threshold == 7
    assert RunOptions(config=SolidConfig()).effective_threshold == 5


def test_threshold_reaches_the_fat_interface_rule(tmp_path):
    (tmp_path / "wide.php").write_text(
        "<?php\n"
        "interface Wide { public function a(): int; public function b(): int; public function c(): int; }\n"
        "class Impl implements Wide {\n"
        "    public function a(): int { return 10; }\n"
        "    public function b(): int { return 20; }\n"
        "    public function c(): int { return 30; }\n"
        "}\n",
        encoding="utf-8",
    )
    config = SolidConfig(directories=[str(tmp_path)], isp_threshold=2)

    result, _ = _run(RunOptions(config=config, run_lsp=False))
    assert result.total_violations == 1
    result, _ = _run(RunOptions(config=config, run_lsp=False, isp_threshold=3))
    assert result.total_violations == 0


def test_class_counted_once_when_failing_both_principles(tmp_path):
    (tmp_path / "both.php").write_text(
        "<?php\n"
        "interface Job { public function run(): void; public function stop(): void; }\n"
        "class BadJob implements Job {\n"
        "    public function run(): void { throw new LogicException('x'); }\n"
        "    public function stop(): void {}\n"
        "}\n",
        encoding="utf-8",
    )
    result, echo = _run(RunOptions(config=SolidConfig(directories=[str(tmp_path)])))

    assert result.failed_class_names == ["BadJob", "BadJob"]
    assert result.failed_count == 1
    assert result.total_violations == 2
    assert "Passed: 0 / 1" in echo.lines


def test_parse_errors_are_reported(tmp_path):
    (tmp_path / "broken.php").write_text("<?php\nclass {\n", encoding="utf-8")
    result, echo = _run(RunOptions(config=SolidConfig(directories=[str(tmp_path)])))

    assert result.classes == []
    assert len(result.errors) == 1
    assert result.errors[0]["file"].endswith("broken.php")
    assert echo.lines[0].startswith("[ERROR] ")


def test_json_output(fixtures_dir):
    config = SolidConfig(directories=[str(fixtures_dir / "cli-example")])
    result, echo = _run(RunOptions(config=config, json_output=True))

    assert len(echo.lines) == 1
    report = json.loads(echo.lines[0])
    assert report == json.loads(to_json(result))
    assert [v["className"] for v in report["violations"]] == ["FailingTask"]
    assert report["errors"] == []


def test_unknown_class_becomes_error_entry():
    echo = Captured()
    result = RunResult(classes=["Ghost"])
    Application()._run_principle(["Ghost"], _raise_not_found, ReportWriter(echo=echo), result)

    assert result.errors == [{"class": "Ghost", "message": 'Class "Ghost" does not exist'}]
    assert result.violations == []
    assert result.failed_count == 1
    assert echo.lines == ["[FAIL] Ghost", '       -> Error: Class "Ghost" does not exist']


def _raise_not_found(class_name):
    raise ClassNotFoundError(class_name)
