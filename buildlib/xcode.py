import os
import re

from typing import Optional

from buildlib.pbxproj import PbxProject

project_file = os.path.join("Unity-iPhone.xcodeproj", "project.pbxproj")

main_target_name = "Unity-iPhone"
framework_target_name = "UnityFramework"
resource_name = "Data"

# lets the host app that embeds us provide this symbol at link time
undefined_symbol_flag = "-Wl,-U,_FlutterUnityPluginOnMessage"

def locate_resource_by_marker(source: str, name: str) -> Optional[str]:
    # relies on the comment Xcode writes beside the resource's build file
    marker = f"/* {name} in Resources */ = {{isa = PBXBuildFile; fileRef = "
    index = source.find(marker)
    if index < 0:
        return None

    identifier = source[index + len(marker):index + len(marker) + 24]
    if not re.fullmatch(r"[0-9A-Fa-f]{24}", identifier):
        return None

    return identifier

def locate_resource(project: PbxProject, source: str, name: str) -> str:
    identifier = project.find_file_ref_by_path(name)
    if identifier is not None:
        return identifier

    print(f"XCODE: no file reference with path {name}, scanning project text instead")
    identifier = locate_resource_by_marker(source, name)
    if identifier is None:
        raise Exception(f"XCODE: can't find the {name} resource in the project")

    return identifier

def patch_project(build_path: str) -> str:
    # safe to run twice
    projpath = os.path.join(build_path, project_file)
    with open(projpath, "r", encoding = "utf-8") as f:
        source = f.read()

    project = PbxProject.parse(source)

    maintarget = project.target_by_name(main_target_name)
    project.set_build_property(maintarget, "ENABLE_BITCODE", "NO")
    project.add_build_property(maintarget, "OTHER_LDFLAGS", undefined_symbol_flag)

    frameworktarget = project.target_by_name(framework_target_name)
    resource = locate_resource(project, source, resource_name)
    print(f"XCODE: {framework_target_name} is {frameworktarget}, {resource_name} is {resource}")

    phase = project.resources_build_phase(frameworktarget)
    buildfile = project.add_file_to_build_phase(phase, resource)
    print(f"XCODE: {resource_name} registered in {framework_target_name} resources as {buildfile}")

    with open(projpath, "w", encoding = "utf-8") as f:
        f.write(project.write())

    return projpath
