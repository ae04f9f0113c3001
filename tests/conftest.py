"""
Shared pytest fixtures for the unitybuild tests.

- **pbxproj_text**: a trimmed-down generated Xcode project with the main and framework targets
- **fake_engine**: factory for in-process build engines that record what they were asked to build
- **build_settings_asset**: a project directory with an EditorBuildSettings.asset
"""

import datetime
import os

from pathlib import Path
from typing import Callable
from typing import List
from typing import Optional

import pytest

from buildlib import prof
from buildlib.engine import BuildEngine
from buildlib.engine import BuildResult
from buildlib.engine import BuildSummary


def oid(prefix: str, n: int) -> str:
    return f"{prefix}{n:022X}"


DATA_BUILD_FILE = oid("AA", 1)
DATA_FILE_REF = oid("BB", 1)
MAIN_TARGET = oid("CC", 1)
FRAMEWORK_TARGET = oid("CC", 2)
MAIN_CONFIG_LIST = oid("DD", 1)
FRAMEWORK_CONFIG_LIST = oid("DD", 2)
MAIN_RESOURCES = oid("EE", 1)
FRAMEWORK_RESOURCES = oid("EE", 2)
PROJECT = oid("FF", 1)
MAIN_RELEASE = oid("D1", 1)
MAIN_DEBUG = oid("D1", 2)
FRAMEWORK_RELEASE = oid("D2", 1)


PBXPROJ = f"""// !$*UTF8*$!
{{
	archiveVersion = 1;
	classes = {{
	}};
	objectVersion = 50;
	objects = {{

/* Begin PBXBuildFile section */
		{DATA_BUILD_FILE} /* Data in Resources */ = {{isa = PBXBuildFile; fileRef = {DATA_FILE_REF} /* Data */; }};
/* End PBXBuildFile section */

/* Begin PBXFileReference section */
		{DATA_FILE_REF} /* Data */ = {{isa = PBXFileReference; lastKnownFileType = folder; path = Data; sourceTree = "<group>"; }};
/* End PBXFileReference section */

/* Begin PBXNativeTarget section */
		{MAIN_TARGET} /* Unity-iPhone */ = {{
			isa = PBXNativeTarget;
			buildConfigurationList = {MAIN_CONFIG_LIST} /* Build configuration list for PBXNativeTarget "Unity-iPhone" */;
			buildPhases = (
				{MAIN_RESOURCES} /* Resources */,
			);
			name = "Unity-iPhone";
			productName = "Unity-iPhone";
		}};
		{FRAMEWORK_TARGET} /* UnityFramework */ = {{
			isa = PBXNativeTarget;
			buildConfigurationList = {FRAMEWORK_CONFIG_LIST};
			buildPhases = (
				{FRAMEWORK_RESOURCES} /* Resources */,
			);
			name = UnityFramework;
			productName = UnityFramework;
		}};
/* End PBXNativeTarget section */

/* Begin PBXProject section */
		{PROJECT} /* Project object */ = {{
			isa = PBXProject;
			targets = (
				{MAIN_TARGET} /* Unity-iPhone */,
				{FRAMEWORK_TARGET} /* UnityFramework */,
			);
		}};
/* End PBXProject section */

/* Begin PBXResourcesBuildPhase section */
		{MAIN_RESOURCES} /* Resources */ = {{
			isa = PBXResourcesBuildPhase;
			buildActionMask = 2147483647;
			files = (
				{DATA_BUILD_FILE} /* Data in Resources */,
			);
			runOnlyForDeploymentPostprocessing = 0;
		}};
		{FRAMEWORK_RESOURCES} /* Resources */ = {{
			isa = PBXResourcesBuildPhase;
			buildActionMask = 2147483647;
			files = (
			);
			runOnlyForDeploymentPostprocessing = 0;
		}};
/* End PBXResourcesBuildPhase section */

/* Begin XCBuildConfiguration section */
		{MAIN_RELEASE} /* Release */ = {{
			isa = XCBuildConfiguration;
			buildSettings = {{
				ENABLE_BITCODE = YES;
				HEADER_SEARCH_PATHS = (
					"\\"$(SRCROOT)/Classes\\"",
					"$(inherited)",
				);
				OTHER_LDFLAGS = "$(inherited)";
				PRODUCT_NAME = "$(TARGET_NAME)";
			}};
			name = Release;
		}};
		{MAIN_DEBUG} /* Debug */ = {{
			isa = XCBuildConfiguration;
			buildSettings = {{
				ENABLE_BITCODE = YES;
				PRODUCT_NAME = "$(TARGET_NAME)";
			}};
			name = Debug;
		}};
		{FRAMEWORK_RELEASE} /* Release */ = {{
			isa = XCBuildConfiguration;
			buildSettings = {{
				PRODUCT_NAME = UnityFramework;
			}};
			name = Release;
		}};
/* End XCBuildConfiguration section */

/* Begin XCConfigurationList section */
		{MAIN_CONFIG_LIST} /* Build configuration list for PBXNativeTarget "Unity-iPhone" */ = {{
			isa = XCConfigurationList;
			buildConfigurations = (
				{MAIN_RELEASE} /* Release */,
				{MAIN_DEBUG} /* Debug */,
			);
			defaultConfigurationIsVisible = 0;
			defaultConfigurationName = Release;
		}};
		{FRAMEWORK_CONFIG_LIST} = {{
			isa = XCConfigurationList;
			buildConfigurations = (
				{FRAMEWORK_RELEASE} /* Release */,
			);
			defaultConfigurationName = Release;
		}};
/* End XCConfigurationList section */
	}};
	rootObject = {PROJECT} /* Project object */;
}}
"""


BUILD_SETTINGS_ASSET = """%YAML 1.1
%TAG !u! tag:unity3d.com,2011:
--- !u!1045 &1
EditorBuildSettings:
  m_ObjectHideFlags: 0
  serializedVersion: 2
  m_Scenes:
  - enabled: 1
    path: Assets/Scenes/Boot.unity
    guid: 2cda990e2423bbf4892e6590ba056729
  - enabled: 0
    path: Assets/Scenes/Sandbox.unity
    guid: 8c9cfa26abfee488c85f1582747f6a02
  - enabled: 1
    path: Assets/Scenes/Main.unity
    guid: 99c9720ab356a0642a771bea13969a05
  m_configObjectVersion: {fileID: 0}
"""


class FakeEngine(BuildEngine):
    """Records build calls and optionally lays down output before returning a fixed summary."""

    def __init__(self, result: BuildResult = BuildResult.SUCCEEDED, produce: Optional[Callable[[str], None]] = None):
        self.result = result
        self.produce = produce
        self.calls: List = []

    def build(self, profile, scenes):
        self.calls.append((profile, list(scenes)))
        if self.produce is not None:
            self.produce(profile.output_path)
        return BuildSummary(
            total_time = datetime.timedelta(seconds = 42),
            total_warnings = 3,
            total_errors = 0 if self.result == BuildResult.SUCCEEDED else 1,
            total_size = 1024,
            result = self.result,
        )


@pytest.fixture(autouse = True)
def fresh_timings():
    """Keep the stage timing tree from growing across tests."""
    prof.reset()
    yield
    prof.reset()


@pytest.fixture
def pbxproj_text() -> str:
    return PBXPROJ


@pytest.fixture
def fake_engine() -> Callable[..., FakeEngine]:
    return FakeEngine


@pytest.fixture
def project_dir(tmp_path: Path) -> Path:
    """Project directory with a build settings asset listing three scenes (two enabled)."""
    project = tmp_path / "project"
    settings = project / "ProjectSettings"
    settings.mkdir(parents = True)
    (settings / "EditorBuildSettings.asset").write_text(BUILD_SETTINGS_ASSET, encoding = "utf-8")
    return project


def write_xcode_project(build_path: str, text: str = PBXPROJ) -> str:
    projdir = os.path.join(build_path, "Unity-iPhone.xcodeproj")
    os.makedirs(projdir, exist_ok = True)
    projpath = os.path.join(projdir, "project.pbxproj")
    with open(projpath, "w", encoding = "utf-8") as f:
        f.write(text)
    return projpath
