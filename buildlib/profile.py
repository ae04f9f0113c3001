import enum

from dataclasses import dataclass
from dataclasses import field
from typing import Any
from typing import Dict
from typing import Mapping
from typing import Optional

from buildlib.targets import BuildTarget

class BuildOptions(enum.Flag):
    NONE = 0
    DEVELOPMENT = enum.auto()
    ALLOW_DEBUGGING = enum.auto()
    ACCEPT_EXTERNAL_MODIFICATIONS_TO_PLAYER = enum.auto()

# Engine-wide settings that get applied before the build call.
# Anything left as None falls back to whatever the project itself has configured.
@dataclass
class BuildConfiguration:
    bundle_version: Optional[str] = None
    macos_build_number: Optional[str] = None
    android_version_code: Optional[int] = None

    android_keystore_name: Optional[str] = None
    android_keystore_pass: Optional[str] = None
    android_keyalias_name: Optional[str] = None
    android_keyalias_pass: Optional[str] = None

    build_app_bundle: bool = False
    export_android_project: bool = False

    # build target group -> scripting backend
    scripting_backends: Dict[str, str] = field(default_factory = dict)

    def as_dict(self) -> Dict[str, Any]:
        return {
            "bundleVersion": self.bundle_version,
            "macOSBuildNumber": self.macos_build_number,
            "androidVersionCode": self.android_version_code,
            "androidKeystoreName": self.android_keystore_name,
            "androidKeystorePass": self.android_keystore_pass,
            "androidKeyaliasName": self.android_keyalias_name,
            "androidKeyaliasPass": self.android_keyalias_pass,
            "buildAppBundle": self.build_app_bundle,
            "exportAsGoogleAndroidProject": self.export_android_project,
            "scriptingBackends": dict(self.scripting_backends),
        }

@dataclass(frozen = True)
class BuildProfile:
    target: BuildTarget
    project_path: str
    output_path: str
    build_name: str
    options: BuildOptions
    configuration: BuildConfiguration

    def as_dict(self) -> Dict[str, Any]:
        return {
            "target": self.target.value,
            "projectPath": self.project_path,
            "locationPathName": self.output_path,
            "buildName": self.build_name,
            "options": [option.name for option in BuildOptions if option != BuildOptions.NONE and option in self.options],
            "configuration": self.configuration.as_dict(),
        }

app_bundle_extension = ".aab"
legacy_scripting_backend = "Mono2x"

def provided(options: Mapping[str, str], flag: str) -> Optional[str]:
    value = options.get(flag)
    if value is None or value == "":
        return None

    return value

def resolve_configuration(options: Mapping[str, str]) -> BuildConfiguration:
    configuration = BuildConfiguration()

    version = provided(options, "buildVersion")
    if version is not None:
        configuration.bundle_version = version
        configuration.macos_build_number = version

    versioncode = provided(options, "androidVersionCode")
    if versioncode is not None:
        if not versioncode.isdigit():
            raise Exception(f"{versioncode} is not a valid version code for -androidVersionCode (must be numeric)")
        configuration.android_version_code = int(versioncode)

    return configuration

def resolve_profile(options: Mapping[str, str], target: BuildTarget) -> BuildProfile:
    """Maps validated options onto the settings the engine gets for this target."""
    configuration = resolve_configuration(options)
    buildoptions = BuildOptions.NONE
    outputpath = options["customBuildPath"]

    if target == BuildTarget.ANDROID:
        configuration.build_app_bundle = outputpath.endswith(app_bundle_extension)
        configuration.export_android_project = True

        # each of these is optional, missing ones keep the project's own keystore setup
        configuration.android_keystore_name = provided(options, "androidKeystoreName")
        configuration.android_keystore_pass = provided(options, "androidKeystorePass")
        configuration.android_keyalias_name = provided(options, "androidKeyaliasName")
        configuration.android_keyalias_pass = provided(options, "androidKeyaliasPass")

        buildoptions = BuildOptions.ACCEPT_EXTERNAL_MODIFICATIONS_TO_PLAYER | BuildOptions.DEVELOPMENT | BuildOptions.ALLOW_DEBUGGING
    elif target == BuildTarget.STANDALONE_OSX:
        configuration.scripting_backends["Standalone"] = legacy_scripting_backend

    return BuildProfile(
        target = target,
        project_path = options["projectPath"],
        output_path = outputpath,
        build_name = options["customBuildName"],
        options = buildoptions,
        configuration = configuration)
