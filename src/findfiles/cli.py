"""
Command-line interface for FindFiles.

Parses arguments, merges them over the configuration file defaults, builds
SearchOptions and runs the search pipeline.
"""

import argparse
import logging
import sys
from typing import List, Optional

from pydantic import ValidationError

from . import __version__
from .config.parser import ConfigParser, ConfigurationError, create_config_template
from .models.config import FindFilesConfig
from .models.search_options import DisplayMode, SearchOptions
from .search import EXIT_CONFIG_ERROR, EXIT_OK, FileSearch
from .tools.date_filter import build_date_window
from .tools.formatter import ConsoleInfo, detect_console_width


logger = logging.getLogger(__name__)

DATE_HELP = "YYYYMMDD[HHMM[SS]] or YYYY/MM/DD[-HH:MM[:SS]], UTC"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="findfiles",
        description="Find files by wildcard or regex, then list them or run a command on each.",
        epilog="Sort keys: p=path n=name s=size c=created m=modified; prefix a key with - for "
               "descending (e.g. 's-m'). Command placeholders: %%d=directory %%n=filename %%f=full path.",
    )
    parser.add_argument("directory", nargs="?", help="Directory to search")
    parser.add_argument("pattern", nargs="?", default="*", help="Wildcard pattern (default: *)")

    search = parser.add_argument_group("search")
    search.add_argument("-r", "--regex", dest="use_regex", action="store_true", default=None,
                        help="Treat pattern as a regular expression instead of a wildcard")
    search.add_argument("-s", "--shallow", action="store_true", default=None,
                        help="Do not recurse into subdirectories")
    search.add_argument("-p", "--path-match", action="store_true", default=None,
                        help="Match the pattern against the full path instead of the filename")
    search.add_argument("--sort", dest="sort_spec", metavar="KEYS", help="Sort results by KEYS")
    search.add_argument("--created-after", metavar="DATE", help=f"Created at or after DATE ({DATE_HELP})")
    search.add_argument("--created-before", metavar="DATE", help="Created before DATE")
    search.add_argument("--modified-after", metavar="DATE", help="Modified at or after DATE")
    search.add_argument("--modified-before", metavar="DATE", help="Modified before DATE")

    display = parser.add_argument_group("display")
    display.add_argument("-t", "--tab", action="store_true", help="Tab-separated columns (better for parsing)")
    display.add_argument("-b", "--bare", action="store_true", help="Display only file paths (implies --concise)")
    display.add_argument("-c", "--concise", action="store_true", default=None,
                         help="Display results without headers or summary")
    display.add_argument("-g", "--group", dest="group_by_directory", action="store_true", default=None,
                         help="Group results by directory")
    display.add_argument("--shared-headers", action="store_true", default=None,
                         help="With --group, print one column header for all groups")
    display.add_argument("--utc", dest="utc_timestamps", action="store_true", default=None,
                         help="Show timestamps in UTC")

    execution = parser.add_argument_group("execution")
    execution.add_argument("-x", "--execute", dest="command", metavar="CMD",
                           help="Execute CMD on each found file")
    execution.add_argument("-n", "--dry-run", action="store_true", default=None,
                           help="Print the commands instead of running them")
    execution.add_argument("--fail-on-exit-code", action="store_true", default=None,
                           help="Count a non-zero command exit status as a failure")

    parser.add_argument("-d", "--debug", action="store_true", help="Show debug information during the search")
    parser.add_argument("--config", metavar="FILE", help="Configuration file (default: search standard locations)")
    parser.add_argument("--write-config", metavar="FILE", help="Write a configuration template to FILE and exit")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def _pick(value, default):
    return default if value is None else value


def join_sort_values(argv: List[str]) -> List[str]:
    """
    Attach the value of each "--sort" to the flag.

    Descending keys start with "-", which argparse would otherwise read as an
    option instead of the value of --sort.
    """
    joined = []
    args = iter(argv)
    for arg in args:
        if arg == "--":
            joined.append(arg)
            joined.extend(args)
            break
        if arg == "--sort":
            value = next(args, None)
            joined.append(arg if value is None else f"--sort={value}")
        else:
            joined.append(arg)
    return joined


def build_options(args: argparse.Namespace, config: FindFilesConfig) -> SearchOptions:
    """
    Merge parsed arguments over configuration defaults.

    Raises:
        ConfigurationError: If a date bound cannot be parsed or an option
            fails validation
    """
    if args.bare:
        mode = DisplayMode.BARE
    elif args.tab:
        mode = DisplayMode.TAB
    else:
        mode = config.display.mode

    window = build_date_window(
        created_from=args.created_after,
        created_to=args.created_before,
        modified_from=args.modified_after,
        modified_to=args.modified_before,
    )

    try:
        return SearchOptions(
            directory=args.directory,
            pattern=args.pattern,
            use_regex=_pick(args.use_regex, config.search.use_regex),
            shallow=_pick(args.shallow, config.search.shallow),
            path_match=_pick(args.path_match, config.search.path_match),
            sort_spec=_pick(args.sort_spec, config.search.sort),
            date_window=window,
            command=args.command,
            dry_run=_pick(args.dry_run, config.execution.dry_run),
            debug=args.debug,
            display_mode=mode,
            concise=_pick(args.concise, config.display.concise),
            group_by_directory=_pick(args.group_by_directory, config.display.group_by_directory),
            shared_headers=_pick(args.shared_headers, config.display.shared_headers),
            show_source_path=config.execution.show_source_path,
            fail_on_exit_code=_pick(args.fail_on_exit_code, config.execution.fail_on_exit_code),
        )
    except ValidationError as e:
        raise ConfigurationError(f"Invalid search options: {e}") from e


def configure_logging(debug: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.WARNING,
        format="%(levelname)s: %(message)s",
        stream=sys.stderr,
    )


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(join_sort_values(sys.argv[1:] if argv is None else argv))
    configure_logging(args.debug)

    if args.write_config:
        try:
            create_config_template(args.write_config)
        except ConfigurationError as e:
            logger.error(str(e))
            return EXIT_CONFIG_ERROR
        return EXIT_OK

    if not args.directory:
        parser.error("No directory specified.")

    try:
        result = ConfigParser().load_config(args.config)
        for warning in result.warnings:
            logger.debug(warning)
        config = result.config
        options = build_options(args, config)
    except ConfigurationError as e:
        logger.error(str(e))
        return EXIT_CONFIG_ERROR

    console = ConsoleInfo(
        width=config.display.console_width or detect_console_width(),
        fallback_width=config.display.fallback_width,
        min_width=config.display.min_width,
    )
    search = FileSearch(
        options,
        console=console,
        output=sys.stdout,
        utc_timestamps=_pick(args.utc_timestamps, config.display.utc_timestamps),
    )
    return search.run().exit_code
