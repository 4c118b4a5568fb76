import dataclasses
import enum

from rich.pretty import pprint

from clibind import *


class Level(enum.Enum):
    DEBUG = 10
    INFO = 20
    WARNING = 30


@dataclasses.dataclass
class CloneOptions:
    command: str = option(index=0, required=True, help="action to run")
    url: str = option(index=1, metavar="URL", help="repository to clone")
    depth: int = option("-d", "--depth", default=1, env="CLONE_DEPTH")
    tags: list[str] = option("-t", "--tags", separator=",")
    level: Level = option("--level", default=Level.INFO)
    verbose: bool = option("-v", "--verbose")


if __name__ == '__main__':
    configure_logging("DEBUG")
    options = invoke(CloneOptions)
    pprint(options)
    print(format_command_line(options, FormatMethod.SIMPLIFY_EQUAL_SIGN))
