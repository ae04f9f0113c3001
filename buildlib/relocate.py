import os
import shutil

from typing import Optional
from typing import Tuple

from buildlib.profile import BuildProfile
from buildlib.targets import relocation_fragment

def relocation_paths(build_path: str, fragment: str) -> Optional[Tuple[str, str]]:
    """Returns (temp, final) for a build path ending in `fragment`, or None if it doesn't."""
    if not build_path.endswith(fragment):
        return None

    base = build_path[:-len(fragment)]
    return base + "/temp", base + "/build"

def move_directory(src: str, dst: str) -> None:
    # a plain directory move; never merge into (or nest inside) something that's already there
    if os.path.exists(dst):
        raise Exception(f"RELOCATE: {dst} already exists, refusing to move {src} on top of it")

    shutil.move(src, dst)

def relocate(build_path: str, fragment: str) -> bool:
    # not transactional, a crash partway through leaves temp/ behind
    paths = relocation_paths(build_path, fragment)
    if paths is None:
        print(f"RELOCATE: {build_path} doesn't end in {fragment}, leaving output where it is")
        return False
    temppath, finalpath = paths

    print(f"RELOCATE: moving {build_path} to {temppath}")
    move_directory(build_path, temppath)

    if os.path.isdir(finalpath):
        print(f"RELOCATE: deleting stale output {finalpath}")
        shutil.rmtree(finalpath)

    print(f"RELOCATE: moving {temppath} to {finalpath}")
    move_directory(temppath, finalpath)

    return True

def relocate_artifacts(profile: BuildProfile) -> bool:
    fragment = relocation_fragment(profile.target)
    if fragment is None:
        return False

    return relocate(profile.output_path, fragment)
