import atexit
import functools
import time

from typing import List
from typing import Optional

class Stage:
    label = None
    start = None
    end = None
    children = None

    def __init__(self, label: str):
        self.label = label
        self.children = []

    def elapsed(self) -> float:
        if self.start is None:
            return 0.0

        # still running stages report how long they've been going so far
        if self.end is None:
            return time.perf_counter() - self.start

        return self.end - self.start

    def lines(self, indent: int = 0, suppress: bool = False) -> List[str]:
        result = []
        if not suppress:
            result += [" " * indent + f"{self.label}: {self.elapsed():0.2f}"]

        childindent = indent if suppress else indent + 2
        for child in self.children:
            result += child.lines(childindent)

        return result

root = Stage("root")
root.start = time.perf_counter()
current_stage = root

def reset() -> None:
    global root
    global current_stage

    root = Stage("root")
    root.start = time.perf_counter()
    current_stage = root

def prof(func):
    @functools.wraps(func)
    def wrapper_timer(*args, **kwargs):
        with Context(func.__name__):
            return func(*args, **kwargs)

    return wrapper_timer

class Context:
    def __init__(self, label: str):
        self.stage = Stage(label)
        self.parent: Optional[Stage] = None

    def __enter__(self):
        global current_stage

        current_stage.children += [self.stage]
        self.parent = current_stage
        current_stage = self.stage

        self.stage.start = time.perf_counter()
        return self.stage

    def __exit__(self, exception_type, exception_value, exception_traceback):
        global current_stage

        self.stage.end = time.perf_counter()
        current_stage = self.parent

        if exception_type is None:
            print(f"Finished {self.stage.label}, {self.stage.elapsed():0.2f} seconds")
        else:
            print(f"Aborted {self.stage.label} after {self.stage.elapsed():0.2f} seconds ({exception_type.__name__})")

@atexit.register
def printall() -> None:
    # nothing worth dumping if main() never ran
    if not root.children:
        return

    print()
    print("========= Stage timings")
    for line in root.lines(suppress = True):
        print(line)
