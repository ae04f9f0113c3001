import os
import re
import uuid

from typing import Any
from typing import Dict
from typing import List
from typing import Optional

# Reader and writer for Xcode's project.pbxproj (an old-style OpenStep property list),
# plus the handful of project operations we need on top of it.
#
# Parsed documents are plain dicts, lists and strings. Comments in the file are thrown
# away on read and regenerated on write, same as Xcode does whenever it saves.

header = "// !$*UTF8*$!"

# objects that Xcode writes on a single line
inline_isas = ["PBXBuildFile", "PBXFileReference"]

class Reader:
    delimiters = '{}()=;,"'

    def __init__(self, text: str):
        self.text = text
        self.pos = 0

    def error(self, message: str):
        raise Exception(f"pbxproj: {message} at offset {self.pos}")

    def skip(self) -> None:
        text = self.text
        while self.pos < len(text):
            if text[self.pos].isspace():
                self.pos += 1
            elif text.startswith("/*", self.pos):
                end = text.find("*/", self.pos + 2)
                if end < 0:
                    self.error("unterminated comment")
                self.pos = end + 2
            elif text.startswith("//", self.pos):
                end = text.find("\n", self.pos)
                self.pos = len(text) if end < 0 else end + 1
            else:
                break

    def peek(self) -> str:
        self.skip()
        if self.pos >= len(self.text):
            return ""
        return self.text[self.pos]

    def expect(self, char: str) -> None:
        if self.peek() != char:
            self.error(f"expected '{char}'")
        self.pos += 1

    def value(self) -> Any:
        char = self.peek()
        if char == "{":
            return self.dictionary()
        if char == "(":
            return self.array()
        if char == '"':
            return self.quoted()
        if char == "":
            self.error("unexpected end of file")
        return self.bare()

    def dictionary(self) -> Dict[str, Any]:
        self.expect("{")
        result = {}
        while True:
            if self.peek() == "}":
                self.pos += 1
                return result

            if self.peek() == '"':
                key = self.quoted()
            else:
                key = self.bare()
            self.expect("=")
            result[key] = self.value()
            self.expect(";")

    def array(self) -> List[Any]:
        self.expect("(")
        result = []
        while True:
            if self.peek() == ")":
                self.pos += 1
                return result

            result.append(self.value())

            # trailing commas are normal here
            char = self.peek()
            if char == ",":
                self.pos += 1
            elif char != ")":
                self.error("expected ',' or ')'")

    def bare(self) -> str:
        self.skip()
        start = self.pos
        while self.pos < len(self.text) and not self.text[self.pos].isspace() and self.text[self.pos] not in self.delimiters:
            self.pos += 1

        if self.pos == start:
            self.error("unexpected character")

        return self.text[start:self.pos]

    def quoted(self) -> str:
        self.expect('"')
        parts = []
        text = self.text
        while True:
            if self.pos >= len(text):
                self.error("unterminated string")

            char = text[self.pos]
            if char == '"':
                self.pos += 1
                return "".join(parts)

            if char != "\\":
                parts.append(char)
                self.pos += 1
                continue

            if self.pos + 1 >= len(text):
                self.error("unterminated escape")
            escape = text[self.pos + 1]
            self.pos += 2
            if escape == "n":
                parts.append("\n")
            elif escape == "t":
                parts.append("\t")
            elif escape == "r":
                parts.append("\r")
            elif escape == "U":
                digits = text[self.pos:self.pos + 4]
                if not re.fullmatch(r"[0-9A-Fa-f]{4}", digits):
                    self.error("bad unicode escape")
                parts.append(chr(int(digits, 16)))
                self.pos += 4
            else:
                parts.append(escape)

def loads(text: str) -> Dict[str, Any]:
    reader = Reader(text)
    if reader.peek() != "{":
        reader.error("expected a dictionary at the top level")

    document = reader.dictionary()
    if reader.peek() != "":
        reader.error("trailing content")

    return document

bare_pattern = re.compile(r"[A-Za-z0-9_$/.]+")

def quote(value: str) -> str:
    if bare_pattern.fullmatch(value) and "//" not in value and "/*" not in value:
        return value

    escaped = value.replace("\\", "\\\\").replace('"', '\\"').replace("\n", "\\n").replace("\t", "\\t")
    return f'"{escaped}"'

def ordered(dictionary: Dict[str, Any]) -> List[str]:
    # Xcode's ordering: isa first, everything else alphabetical
    return sorted(dictionary.keys(), key = lambda key: (key != "isa", key))

class Writer:
    def __init__(self, document: Dict[str, Any]):
        self.document = document
        self.objects = document.get("objects", {})

        # reverse lookups for comment generation
        self.phases = {}
        self.owners = {}
        for identifier, obj in self.objects.items():
            if obj.get("isa", "").endswith("BuildPhase"):
                for buildfile in obj.get("files", []):
                    self.phases[buildfile] = identifier

            configlist = obj.get("buildConfigurationList")
            if isinstance(configlist, str):
                self.owners[configlist] = identifier

    def display_name(self, identifier: Optional[str]) -> Optional[str]:
        obj = self.objects.get(identifier)
        if not isinstance(obj, dict):
            return None

        if "name" in obj:
            return obj["name"]
        if "path" in obj:
            return os.path.basename(obj["path"])
        return obj.get("productName")

    def comment(self, identifier: str) -> Optional[str]:
        obj = self.objects.get(identifier)
        if not isinstance(obj, dict):
            return None

        isa = obj.get("isa", "")
        if isa == "PBXBuildFile":
            name = self.display_name(obj.get("fileRef") or obj.get("productRef"))
            phase = self.phases.get(identifier)
            if name is not None and phase is not None:
                return f"{name} in {self.comment(phase)}"
            return name
        if isa == "PBXProject":
            return "Project object"
        if isa == "XCConfigurationList":
            owner = self.owners.get(identifier)
            if owner is None:
                return "Build configuration list"
            ownername = self.display_name(owner) or "Project"
            return f'Build configuration list for {self.objects[owner]["isa"]} "{ownername}"'
        if isa.endswith("BuildPhase"):
            return obj.get("name") or isa[len("PBX"):-len("BuildPhase")]
        if isa in ["PBXContainerItemProxy", "PBXTargetDependency"]:
            return isa
        return self.display_name(identifier)

    def scalar(self, value: Any) -> str:
        text = quote(str(value))
        if isinstance(value, str) and value in self.objects:
            comment = self.comment(value)
            if comment is not None:
                return f"{text} /* {comment} */"
        return text

    def value(self, value: Any, indent: int, inline: bool = False) -> str:
        if isinstance(value, dict):
            return self.dictionary(value, indent, inline)
        if isinstance(value, list):
            return self.array(value, indent, inline)
        return self.scalar(value)

    def dictionary(self, dictionary: Dict[str, Any], indent: int, inline: bool) -> str:
        if inline:
            return "{" + "".join(f"{quote(key)} = {self.value(dictionary[key], indent, True)}; " for key in ordered(dictionary)) + "}"

        tabs = "\t" * (indent + 1)
        lines = ["{"]
        for key in ordered(dictionary):
            lines += [f"{tabs}{quote(key)} = {self.value(dictionary[key], indent + 1)};"]
        lines += ["\t" * indent + "}"]
        return "\n".join(lines)

    def array(self, items: List[Any], indent: int, inline: bool) -> str:
        if inline:
            return "(" + "".join(f"{self.value(item, indent, True)}, " for item in items) + ")"

        tabs = "\t" * (indent + 1)
        lines = ["("]
        for item in items:
            lines += [f"{tabs}{self.value(item, indent + 1)},"]
        lines += ["\t" * indent + ")"]
        return "\n".join(lines)

    def objects_section(self) -> str:
        sections = {}
        for identifier, obj in self.objects.items():
            sections.setdefault(obj.get("isa", "Unknown"), []).append(identifier)

        lines = ["{", ""]
        for isa in sorted(sections.keys()):
            lines += [f"/* Begin {isa} section */"]
            for identifier in sorted(sections[isa]):
                body = self.value(self.objects[identifier], 2, inline = isa in inline_isas)
                lines += [f"\t\t{self.scalar(identifier)} = {body};"]
            lines += [f"/* End {isa} section */", ""]

        # the last section's blank line is followed directly by the closing brace
        lines = lines[:-1] + ["\t}"]
        return "\n".join(lines)

    def write(self) -> str:
        lines = [header, "{"]
        for key in ordered(self.document):
            if key == "objects":
                lines += [f"\tobjects = {self.objects_section()};"]
            else:
                lines += [f"\t{quote(key)} = {self.value(self.document[key], 1)};"]
        lines += ["}", ""]
        return "\n".join(lines)

def dumps(document: Dict[str, Any]) -> str:
    return Writer(document).write()

class PbxProject:
    def __init__(self, document: Dict[str, Any]):
        self.document = document
        self.objects = document.setdefault("objects", {})

    @classmethod
    def parse(cls, text: str) -> "PbxProject":
        return cls(loads(text))

    def write(self) -> str:
        return dumps(self.document)

    def new_id(self) -> str:
        while True:
            identifier = uuid.uuid4().hex[:24].upper()
            if identifier not in self.objects:
                return identifier

    def target_by_name(self, name: str) -> str:
        for identifier, obj in self.objects.items():
            if obj.get("isa") == "PBXNativeTarget" and obj.get("name") == name:
                return identifier

        raise Exception(f"pbxproj: no native target named {name}")

    def build_configurations(self, target: str) -> List[str]:
        configlist = self.objects[self.objects[target]["buildConfigurationList"]]
        return configlist.get("buildConfigurations", [])

    def set_build_property(self, target: str, key: str, value: str) -> None:
        for configuration in self.build_configurations(target):
            self.objects[configuration].setdefault("buildSettings", {})[key] = value

    def add_build_property(self, target: str, key: str, value: str) -> None:
        """Adds `value` to a (possibly multi-valued) setting unless it's already there."""
        for configuration in self.build_configurations(target):
            settings = self.objects[configuration].setdefault("buildSettings", {})
            existing = settings.get(key)
            if existing is None:
                settings[key] = value
            elif isinstance(existing, list):
                if value not in existing:
                    existing.append(value)
            elif existing != value:
                settings[key] = [existing, value]

    def find_file_ref_by_path(self, path: str) -> Optional[str]:
        path = path.lstrip("/")
        for identifier, obj in self.objects.items():
            if obj.get("isa") != "PBXFileReference":
                continue
            if obj.get("path") == path or obj.get("name") == path:
                return identifier

        return None

    def build_phase(self, target: str, isa: str) -> str:
        for phase in self.objects[target].get("buildPhases", []):
            if self.objects[phase].get("isa") == isa:
                return phase

        raise Exception(f"pbxproj: target {self.objects[target].get('name')} has no {isa}")

    def resources_build_phase(self, target: str) -> str:
        return self.build_phase(target, "PBXResourcesBuildPhase")

    def add_file_to_build_phase(self, phase: str, file_ref: str) -> str:
        """Registers `file_ref` in the phase, returning the build file id (existing or new)."""
        files = self.objects[phase].setdefault("files", [])
        for buildfile in files:
            if self.objects.get(buildfile, {}).get("fileRef") == file_ref:
                return buildfile

        buildfile = self.new_id()
        self.objects[buildfile] = {
            "isa": "PBXBuildFile",
            "fileRef": file_ref,
        }
        files.append(buildfile)
        return buildfile
