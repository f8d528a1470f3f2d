from dataclasses import dataclass

from rich.pretty import pprint

from argotag import *


@dataclass
class Arguments:
    name: str = tag("short=n;long=name;required;help='-n, --name\\tname to greet'")
    count: int = tag("short=c;long=count;default=1;help='-c, --count\\trepetitions'")
    loud: bool = tag("short=l;long=loud;help='-l, --loud\\tshout the greeting'")
    help: bool = tag("short=h;long=help;help='-h, --help\\tshow this help'")


if __name__ == '__main__':
    arguments, positionals = parseargs(Arguments)
    if arguments.help:
        printhelp(Arguments)
    else:
        pprint(arguments)
        pprint(positionals)
