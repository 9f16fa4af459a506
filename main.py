from rich.pretty import pprint

from vexil import *

port = IntFlag("port", "listening port", short="p", default=8080, valid=(80, 443, 8080))
timeout = DurationFlag("timeout", default="30s")
labels = StringMapFlag("labels", "resource labels")
verbose = CounterFlag("verbose", short="v")


if __name__ == '__main__':
    flags = bind_keys((port, timeout, labels, verbose), prefix="demo", auto=True)
    sources = (EnvironmentSource(), MemorySource({"DEMO_LABELS": "env:dev"}))
    for flag in flags:
        flag.reset_to_default()
        if (raw := lookup(sources, flag.key)) is not Unset:
            try:
                flag.set(raw)
            except FlagError as fault:
                report(fault)
    pprint(flags)
