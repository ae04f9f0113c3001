# Stub build engine for unitybuild.
# Reads a build request, drops a marker file where the build output would go, and writes a report.
# This is fast and useful for debugging the orchestration without a real engine install.

import argparse
import datetime
import json
import os

parser = argparse.ArgumentParser()

required = parser.add_argument_group('required arguments')
required.add_argument("--request", help="Build request written by unitybuild", required = True)
required.add_argument("--report", help="Where to write the build report", required = True)

parser.add_argument("--result", help="Result to report (Succeeded, Failed, Cancelled, Unknown)", default="Succeeded")
parser.add_argument("--warnings", help="Warning count to report", type=int, default=0)
parser.add_argument("--message", help="Text for the marker file", default="stub build")

args = parser.parse_args()

startedat = datetime.datetime.now(datetime.timezone.utc)

with open(args.request, "r") as f:
    request = json.load(f)
profile = request["profile"]

size = 0
if args.result == "Succeeded":
    output = profile["locationPathName"]
    os.makedirs(output, exist_ok = True)

    with open(os.path.join(output, "results.txt"), "w") as text_file:
        size = text_file.write(args.message)

    print(f"STUB: built {len(request['scenes'])} scene(s) for {profile['target']} into {output}")
else:
    print(f"STUB: pretending the build ended with {args.result}")

with open(args.report, "w") as f:
    json.dump({
        "result": args.result,
        "totalWarnings": args.warnings,
        "totalErrors": 0 if args.result == "Succeeded" else 1,
        "totalSize": size,
        "startedAt": startedat.isoformat(),
        "endedAt": datetime.datetime.now(datetime.timezone.utc).isoformat(),
    }, f)
