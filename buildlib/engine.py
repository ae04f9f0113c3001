import datetime
import dateutil.parser
import enum
import json
import os
import psutil
import re
import subprocess
import tempfile

from dataclasses import dataclass
from typing import List
from typing import Optional

from buildlib.prof import Context
from buildlib.profile import BuildProfile
from buildlib.targets import BuildTarget

class BuildResult(enum.Enum):
    SUCCEEDED = "Succeeded"
    FAILED = "Failed"
    CANCELLED = "Cancelled"
    UNKNOWN = "Unknown"

    @classmethod
    def parse(cls, value) -> "BuildResult":
        for result in cls:
            if result.value == value:
                return result

        return cls.UNKNOWN

@dataclass(frozen = True)
class BuildSummary:
    total_time: datetime.timedelta
    total_warnings: int
    total_errors: int
    total_size: int
    result: BuildResult

    @classmethod
    def failed(cls) -> "BuildSummary":
        return cls(datetime.timedelta(0), 0, 0, 0, BuildResult.FAILED)

    @classmethod
    def unknown(cls) -> "BuildSummary":
        return cls(datetime.timedelta(0), 0, 0, 0, BuildResult.UNKNOWN)

def read_report(path: str) -> BuildSummary:
    with open(path, "r") as f:
        report = json.load(f)

    if not isinstance(report, dict):
        raise ValueError(f"expected a JSON object, got {type(report).__name__}")

    if "totalTime" in report:
        totaltime = datetime.timedelta(seconds = float(report["totalTime"]))
    elif "startedAt" in report and "endedAt" in report:
        totaltime = dateutil.parser.parse(report["endedAt"]) - dateutil.parser.parse(report["startedAt"])
    else:
        totaltime = datetime.timedelta(0)

    return BuildSummary(
        total_time = totaltime,
        total_warnings = int(report.get("totalWarnings", 0)),
        total_errors = int(report.get("totalErrors", 0)),
        total_size = int(report.get("totalSize", 0)),
        result = BuildResult.parse(report.get("result")))

build_settings_file = os.path.join("ProjectSettings", "EditorBuildSettings.asset")

def enabled_scenes(project_path: str) -> List[str]:
    # engine-flavoured YAML, we only want m_Scenes so it gets read line by line
    settingspath = os.path.join(project_path, build_settings_file)
    if not os.path.isfile(settingspath):
        print(f"SCENES: no build settings found at {settingspath}, building without scenes")
        return []

    with open(settingspath, "r", encoding = "utf-8") as f:
        lines = f.read().splitlines()

    entries = []
    sceneindent = None
    for line in lines:
        stripped = line.strip()
        indent = len(line) - len(line.lstrip())

        if sceneindent is None:
            match = re.match(r"m_Scenes:\s*(\[\s*\])?$", stripped)
            if match:
                if match.group(1) is not None:
                    break   # explicitly empty
                sceneindent = indent
            continue

        if stripped == "":
            continue

        if stripped.startswith("- ") and indent >= sceneindent:
            entries.append({})
            stripped = stripped[2:].strip()
        elif indent <= sceneindent:
            # back out to the next key, the list is over
            break

        if entries and ":" in stripped:
            key, _, value = stripped.partition(":")
            entries[-1][key.strip()] = value.strip()

    return [entry["path"] for entry in entries if entry.get("enabled") == "1" and entry.get("path")]

class BuildEngine:
    def build(self, profile: BuildProfile, scenes: List[str]) -> BuildSummary:
        raise NotImplementedError

class CommandEngine(BuildEngine):
    """Runs an external engine command that speaks the request/report JSON protocol."""

    def __init__(self, command: List[str], requestid: str = "custom"):
        self.command = command
        self.requestid = requestid

    def build(self, profile: BuildProfile, scenes: List[str]) -> BuildSummary:
        with tempfile.TemporaryDirectory(prefix = "unitybuild-") as workdir:
            requestpath = os.path.join(workdir, "request.json")
            reportpath = os.path.join(workdir, "report.json")

            with open(requestpath, "w") as f:
                json.dump({
                    "id": self.requestid,
                    "profile": profile.as_dict(),
                    "scenes": scenes,
                }, f, indent = 2)

            print(f"ENGINE: launching {self.command[0]} for {profile.target.value}")
            try:
                returncode = subprocess.call(self.command + [
                    "--request", requestpath,
                    "--report", reportpath,
                ])
            except OSError as e:
                print(f"ENGINE: could not launch {self.command[0]}: {e}")
                return BuildSummary.failed()

            if os.path.isfile(reportpath):
                try:
                    return read_report(reportpath)
                except (ValueError, TypeError) as e:
                    print(f"ENGINE: report is unreadable: {e}")
                    return BuildSummary.failed()

            if returncode != 0:
                print(f"ENGINE: exited with {returncode} and no report")
                return BuildSummary.failed()

            print("ENGINE: exited cleanly but wrote no report")
            return BuildSummary.unknown()

def execute(profile: BuildProfile, scenes: List[str], engine: BuildEngine) -> BuildSummary:
    """One blocking engine call, no retries."""
    cpus = psutil.cpu_count()
    memory = round(psutil.virtual_memory().total / (1 << 30))
    print(f"ENGINE: host has {cpus} CPUs and {memory}GB of RAM")
    print(f"ENGINE: building {len(scenes)} scene(s) for {profile.target.value} into {profile.output_path}")

    if profile.target == BuildTarget.ANDROID:
        # the exported project goes into a directory named after the output path
        if not os.path.isdir(profile.output_path):
            os.makedirs(profile.output_path)

    with Context("engine build"):
        return engine.build(profile, scenes)
