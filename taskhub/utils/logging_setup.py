import logging
import sys


def setup_logging(level="INFO"):
    """
    Configure the root logger with a single stderr handler.

    Safe to call more than once (e.g. one app per test): existing handlers
    are replaced rather than duplicated.
    """
    root = logging.getLogger()
    root.setLevel(level)

    for h in list(root.handlers):
        root.removeHandler(h)

    fmt = logging.Formatter(
        fmt="%(asctime)s.%(msecs)03d %(levelname)s %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(fmt)
    root.addHandler(handler)

    # Driver heartbeat and topology chatter
    logging.getLogger("pymongo").setLevel(logging.WARNING)
