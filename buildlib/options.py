import types

from dataclasses import dataclass
from dataclasses import field
from typing import Dict
from typing import List
from typing import Mapping
from typing import Optional

from buildlib.targets import BuildTarget

# Flags whose values must never show up in the log
secrets = ["androidKeystorePass", "androidKeyaliasName", "androidKeyaliasPass"]
hidden = "*HIDDEN*"

default_build_name = "TestBuild"

# These are consumed by calling automation, don't renumber them
exit_missing_project_path = 110
exit_missing_build_target = 120
exit_invalid_build_target = 121
exit_missing_build_path = 130

def banner(title: str) -> str:
    return "\n".join([
        "",
        "###########################",
        f"#{title.center(25)}#",
        "###########################",
        "",
    ])

def parse_arguments(argv: List[str]) -> Dict[str, str]:
    # `-flag value` pairs; a flag followed by another flag (or nothing) gets ""
    options = {}

    print(banner("Parsing settings"))

    # Step one token at a time; a consumed value gets looked at again on the next pass,
    # but it can't start with `-` so it's skipped as a flag.
    for current in range(len(argv)):
        if not argv[current].startswith("-"):
            continue
        flag = argv[current].lstrip("-")

        following = current + 1
        hasvalue = following < len(argv) and not argv[following].startswith("-")
        value = argv[following].lstrip("-") if hasvalue else ""

        if flag in secrets:
            display = hidden
        else:
            display = f'"{value}"'
        print(f'Found flag "{flag}" with value {display}.')

        options[flag] = value

    return options

@dataclass(frozen = True)
class ValidationFailure:
    code: int
    message: str

@dataclass
class ValidationResult:
    options: Mapping[str, str]
    failures: List[ValidationFailure] = field(default_factory = list)

    @property
    def ok(self) -> bool:
        return len(self.failures) == 0

    @property
    def exit_code(self) -> Optional[int]:
        if self.ok:
            return None

        return self.failures[0].code

    @property
    def target(self) -> Optional[BuildTarget]:
        return BuildTarget.parse(self.options.get("buildTarget"))

def validate_options(options: Dict[str, str]) -> ValidationResult:
    # every rule gets checked and printed, main() picks the exit code
    validated = dict(options)
    failures = []

    def fail(code: int, message: str) -> None:
        print(message)
        failures.append(ValidationFailure(code, message))

    if "projectPath" not in validated:
        fail(exit_missing_project_path, "Missing argument -projectPath")

    if "buildTarget" not in validated:
        fail(exit_missing_build_target, "Missing argument -buildTarget")
    elif BuildTarget.parse(validated["buildTarget"]) is None:
        fail(exit_invalid_build_target, f'Invalid argument -buildTarget, "{validated["buildTarget"]}" is not a recognized build target')

    if "customBuildPath" not in validated:
        fail(exit_missing_build_path, "Missing argument -customBuildPath")

    if "customBuildName" not in validated:
        print(f"Missing argument -customBuildName, defaulting to {default_build_name}.")
        validated["customBuildName"] = default_build_name
    elif validated["customBuildName"] == "":
        print(f"Invalid argument -customBuildName, defaulting to {default_build_name}.")
        validated["customBuildName"] = default_build_name

    return ValidationResult(options = types.MappingProxyType(validated), failures = failures)
