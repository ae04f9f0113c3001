import json
import os
import pathlib
import shlex
import sys

from typing import List
from typing import Optional

from buildlib.engine import BuildEngine
from buildlib.engine import BuildResult
from buildlib.engine import CommandEngine
from buildlib.engine import enabled_scenes
from buildlib.engine import execute
from buildlib.options import parse_arguments
from buildlib.options import validate_options
from buildlib.prof import Context
from buildlib.prof import prof
from buildlib.profile import BuildProfile
from buildlib.profile import resolve_profile
from buildlib.relocate import relocate_artifacts
from buildlib.report import exit_code
from buildlib.report import report_summary
from buildlib.targets import BuildTarget
from buildlib.xcode import patch_project

def engine_config_path() -> pathlib.Path:
    # lives beside this script, wherever we happen to be run from
    return pathlib.Path(__file__).parent.joinpath("config", "engine.json")

def request_id() -> str:
    if "BUILD-NUMBER" in os.environ:
        return f"jenkins-{os.environ['BUILD-NUMBER']}"

    return f"custom.{os.getpid()}"

def load_engine_command() -> List[str]:
    if os.environ.get("UNITYBUILD_ENGINE"):
        return shlex.split(os.environ["UNITYBUILD_ENGINE"])

    engine_config = engine_config_path()
    if not engine_config.is_file():
        raise Exception(f"No build engine configured; set UNITYBUILD_ENGINE or write {engine_config}")

    with open(engine_config, "r") as f:
        command = json.load(f).get("command")

    if not isinstance(command, list) or len(command) == 0:
        raise Exception(f"{engine_config} needs a non-empty `command` list")

    return [str(part) for part in command]

def post_build(profile: BuildProfile) -> None:
    if profile.target == BuildTarget.ANDROID:
        with Context("relocate"):
            relocate_artifacts(profile)
    elif profile.target == BuildTarget.IOS:
        # patch in place first, the project file moves along with everything else
        with Context("xcode patch"):
            patch_project(profile.output_path)
        with Context("relocate"):
            relocate_artifacts(profile)

@prof
def main(argv: Optional[List[str]] = None, engine: Optional[BuildEngine] = None) -> int:
    if argv is None:
        argv = sys.argv

    with Context("options"):
        validation = validate_options(parse_arguments(argv))
    if not validation.ok:
        return validation.exit_code
    options = validation.options

    profile = resolve_profile(options, validation.target)
    if profile.configuration.bundle_version is not None:
        print(f"Building version {profile.configuration.bundle_version}")

    if engine is None:
        engine = CommandEngine(load_engine_command(), requestid = request_id())

    scenes = enabled_scenes(profile.project_path)
    summary = execute(profile, scenes, engine)

    # no point moving or patching output that a failed build never finished writing
    if summary.result == BuildResult.SUCCEEDED:
        post_build(profile)
    else:
        print(f"Skipping post-build steps, build result was {summary.result.value}")

    report_summary(summary)
    return exit_code(summary.result)

def run() -> None:
    sys.exit(main())

if __name__ == "__main__":
    run()
