import enum

from typing import Optional

# Names match the engine's own target identifiers exactly, since that's what gets passed on the command line.
class BuildTarget(enum.Enum):
    STANDALONE_OSX = "StandaloneOSX"
    STANDALONE_WINDOWS = "StandaloneWindows"
    STANDALONE_WINDOWS64 = "StandaloneWindows64"
    STANDALONE_LINUX64 = "StandaloneLinux64"
    IOS = "iOS"
    ANDROID = "Android"
    WEBGL = "WebGL"
    WSA_PLAYER = "WSAPlayer"
    PS4 = "PS4"
    PS5 = "PS5"
    XBOX_ONE = "XboxOne"
    TVOS = "tvOS"
    SWITCH = "Switch"
    GAMECORE_XBOX_SERIES = "GameCoreXboxSeries"
    GAMECORE_XBOX_ONE = "GameCoreXboxOne"
    LINUX_HEADLESS_SIMULATION = "LinuxHeadlessSimulation"
    EMBEDDED_LINUX = "EmbeddedLinux"
    QNX = "QNX"
    VISIONOS = "VisionOS"
    LUMIN = "Lumin"
    STADIA = "Stadia"
    CLOUD_RENDERING = "CloudRendering"
    NO_TARGET = "NoTarget"

    @classmethod
    def parse(cls, name: Optional[str]) -> Optional["BuildTarget"]:
        # case-sensitive on purpose; "android" is not a target
        for target in cls:
            if target.value == name:
                return target

        return None

# Where the engine actually drops its output relative to the requested output path.
# Targets missing from this table produce output exactly where they're asked to.
relocation_fragments = {
    BuildTarget.ANDROID: "/build/Android/Android.apk",
    BuildTarget.IOS: "/build/iOS/iOS",
}

def relocation_fragment(target: BuildTarget) -> Optional[str]:
    return relocation_fragments.get(target)
