from typing import Optional


class DebugLog:
    """Verbosity-gated trace output.

    Level 1 traces phase boundaries, level 2 bindings and level 3 individual
    statements and calls. Messages go to `path` when one is given and to
    stdout otherwise.
    """
    def __init__(self, level: int = 0, path: Optional[str] = 'debug.txt'):
        self.level = level
        self.fp = open(path, 'w', encoding='utf-8') if level > 0 and path else None

    def enabled(self, level: int) -> bool:
        return self.level >= level

    def write(self, level: int, msg: str):
        if self.level < level:
            return
        if self.fp:
            self.fp.write(msg + '\n')
            self.fp.flush()
        else:
            print(msg)

    def close(self):
        if self.fp:
            self.fp.close()
            self.fp = None
