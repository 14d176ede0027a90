import sys

from secprobe.core.config import load_settings
from secprobe.core.handler import GlobalHandler
from secprobe.core.registry import default_registry
from secprobe.core.runner import JobRunner
from secprobe.parsers.command import CommandParser
from secprobe.parsers.schema import default_schema
from secprobe.reporters.backend import BackendReporter
from secprobe.reporters.console import ConsoleReporter, Log


def build_handler(settings, log: Log) -> GlobalHandler:
    schema = default_schema()
    registry = default_registry()

    def runner_factory():
        if settings.machine_mode:
            reporter = BackendReporter(settings.back_url, task_id=settings.task_id, logger=log)
        else:
            reporter = ConsoleReporter()
        return JobRunner(registry, reporter, settings=settings, logger=log)

    return GlobalHandler(CommandParser(schema, logger=log), runner_factory,
                         machine_mode=settings.machine_mode, logger=log)


def main(argv=None):
    settings, found, warnings = load_settings()
    if not found:
        print("Cannot read .env file")
    log = Log(verbose=settings.verbose)
    for w in warnings:
        log.warn(w)

    handler = build_handler(settings, log)
    sys.exit(handler.run_safe(sys.argv if argv is None else argv))


if __name__ == "__main__":
    main()
