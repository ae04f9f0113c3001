from buildlib.engine import BuildResult
from buildlib.engine import BuildSummary
from buildlib.options import banner

exit_codes = {
    BuildResult.SUCCEEDED: (0, "Build succeeded!"),
    BuildResult.FAILED: (101, "Build failed!"),
    BuildResult.CANCELLED: (102, "Build cancelled!"),
    BuildResult.UNKNOWN: (103, "Build result is unknown!"),
}

def report_summary(summary: BuildSummary) -> None:
    print(banner("Build results"))
    print(f"Duration: {summary.total_time}")
    print(f"Warnings: {summary.total_warnings}")
    print(f"Errors: {summary.total_errors}")
    print(f"Size: {summary.total_size} bytes")
    print()

def exit_code(result) -> int:
    code, message = exit_codes.get(result, exit_codes[BuildResult.UNKNOWN])
    print(message)
    return code
