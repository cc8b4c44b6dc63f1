"""
Command Line Interface for the thumbnail conversion service.
"""

import argparse
import logging
import os
import signal
import threading
from typing import List, Optional

import urllib3
from botocore.exceptions import BotoCoreError, ClientError

from .config import ThumbnailConfig, parse_dimensions
from .conversion_service import ConversionService
from .conversion_worker import ConversionWorker
from .errors import IndexPersistError, IndexUnavailable
from .image_conversion import ImageConverter
from .reporter import Reporter
from .repository import LocalRepository, Repository
from .s3_repository import S3Config, S3Repository
from .shutdown import ShutdownCoordinator
from .thumbnail_index import ThumbnailIndex


def setup_logging(verbose: bool) -> logging.Logger:
    """Configure logging."""
    level = logging.DEBUG if verbose else logging.INFO

    logging.basicConfig(
        level=level,
        format='%(asctime)s [%(levelname)s] %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )

    logging.getLogger('boto3').setLevel(logging.WARNING)
    logging.getLogger('botocore').setLevel(logging.WARNING)
    logging.getLogger('urllib3').setLevel(logging.WARNING)
    logging.getLogger('PIL').setLevel(logging.WARNING)

    return logging.getLogger('thumbcache')


def get_config(args: argparse.Namespace) -> ThumbnailConfig:
    """Get service configuration from environment and CLI overrides."""
    config = ThumbnailConfig.from_env()

    if getattr(args, 'metadata_root', None):
        config.metadata_root = args.metadata_root
    elif not config.metadata_root and getattr(args, 'root', None):
        config.metadata_root = f"{args.root.rstrip('/')}/.thumbcache"
    if getattr(args, 'dimensions', None):
        config.dimensions = parse_dimensions(args.dimensions)
    if getattr(args, 'delay', None) is not None:
        config.delay = args.delay

    return config


def get_s3_config(args: argparse.Namespace) -> S3Config:
    """Get S3 configuration from environment and CLI overrides."""
    config = S3Config.from_env()

    if getattr(args, 's3_endpoint', None):
        config.endpoint = args.s3_endpoint
    if getattr(args, 's3_bucket', None):
        config.bucket = args.s3_bucket
    if getattr(args, 's3_prefix', None):
        config.prefix = args.s3_prefix
    if getattr(args, 's3_access_key', None):
        config.access_key = args.s3_access_key
    if getattr(args, 's3_secret_key', None):
        config.secret_key = args.s3_secret_key

    return config


def get_repository(
    args: argparse.Namespace,
    logger: logging.Logger,
    exclude: Optional[List[str]] = None
) -> Repository:
    """
    Get the repository selected by the arguments.

    Args:
        args: Parsed arguments
        logger: Logger instance
        exclude: Local directories left out of the listing

    Raises:
        ValueError: If the storage configuration is invalid
    """
    if getattr(args, 'root', None):
        logger.info(f"Repository: Local filesystem ({args.root})")
        return LocalRepository(args.root, logger, exclude=exclude)

    if getattr(args, 's3', False):
        config = get_s3_config(args)
        errors = config.validate()
        if errors:
            for error in errors:
                logger.error(error)
            raise ValueError("S3 configuration invalid")

        if not config.verify_ssl:
            urllib3.disable_warnings(urllib3.exceptions.InsecureRequestWarning)

        logger.info(f"Repository: S3 ({config.endpoint} {config.bucket}/{config.prefix})")
        repository = S3Repository(config, logger)
        try:
            repository.reindex()
        except (BotoCoreError, ClientError) as e:
            logger.error(f"Unable to list S3 repository: {e}")
            raise ValueError("S3 repository unavailable") from e
        return repository

    logger.error("Either --root or --s3 is required")
    raise ValueError("No repository selected")


def _prepare(args: argparse.Namespace, logger: logging.Logger):
    config = get_config(args)
    errors = config.validate()
    if errors:
        for error in errors:
            logger.error(error)
        raise ValueError("Configuration invalid")

    repository = get_repository(args, logger, exclude=[config.metadata_root])

    logger.info(f"Metadata root: {config.metadata_root}")
    logger.info(f"Dimensions: {', '.join(d.key for d in config.dimensions)}")
    logger.info(f"Delay: {config.delay}s")
    return config, repository


def add_repository_arguments(parser: argparse.ArgumentParser) -> None:
    """Add repository and service arguments to a parser."""
    parser.add_argument('--metadata-root', metavar='PATH',
                        help='Folder for the index and thumbnails (default: ROOT/.thumbcache)')
    parser.add_argument('--dimensions', metavar='LIST',
                        help='Comma separated WIDTHxHEIGHT list (default: 200x0,400x0,800x0)')
    parser.add_argument('--delay', type=float,
                        help='Seconds to wait after each file (default: 5)')

    local_group = parser.add_argument_group('Local Repository')
    local_group.add_argument('--root', metavar='PATH', help='Repository root directory')

    s3_group = parser.add_argument_group('S3 Repository')
    s3_group.add_argument('--s3', action='store_true', help='Use an S3 bucket as repository')
    s3_group.add_argument('--s3-endpoint', help='Override S3_ENDPOINT')
    s3_group.add_argument('--s3-bucket', help='Override S3_BUCKET')
    s3_group.add_argument('--s3-prefix', help='Override S3_PREFIX')
    s3_group.add_argument('--s3-access-key', help='Override S3_ACCESS_KEY')
    s3_group.add_argument('--s3-secret-key', help='Override S3_SECRET_KEY')


def cmd_build(args: argparse.Namespace) -> int:
    """Execute build command: one pass, then save the index."""
    logger = setup_logging(args.verbose)

    try:
        config, repository = _prepare(args, logger)
    except ValueError as e:
        logger.error(str(e))
        return 1

    try:
        os.makedirs(config.thumbnail_folder, exist_ok=True)
        converter = ImageConverter(quality=config.jpeg_quality, logger=logger)
        index = ThumbnailIndex.load_or_create(config.index_path, logger)
        worker = ConversionWorker(
            index=index,
            converter=converter,
            thumbnail_folder=config.thumbnail_folder,
            dimensions=config.dimensions,
            delay=config.delay,
            logger=logger,
        )

        stats = worker.run_one_pass(repository)
        index.save(config.index_path)
        logger.info(f"Index saved to: {config.index_path}")

        if not args.quiet:
            Reporter().report_pass(stats)

        return 0 if stats.errors == 0 else 1

    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        return 130
    except (OSError, IndexPersistError) as e:
        logger.error(f"Build failed: {e}")
        return 1


def cmd_run(args: argparse.Namespace) -> int:
    """Execute run command: convert in the background until interrupted."""
    logger = setup_logging(args.verbose)

    try:
        config, repository = _prepare(args, logger)
    except ValueError as e:
        logger.error(str(e))
        return 1

    shutdown = ShutdownCoordinator(logger=logger)
    service = ConversionService.create(config, repository, shutdown=shutdown, logger=logger)
    if service is None:
        return 1

    stop_requested = threading.Event()

    def _request_stop(signum, frame):
        logger.info(f"Received signal {signum}, shutting down")
        stop_requested.set()

    signal.signal(signal.SIGTERM, _request_stop)

    try:
        while not stop_requested.wait(args.reindex_interval or None):
            if args.reindex_interval:
                logger.debug("Reindexing repository")
                repository.reindex()
    except KeyboardInterrupt:
        logger.info("Interrupted by user")

    errors = shutdown.shutdown()
    service.join(timeout=config.poll_interval * 2)
    return 0 if not errors else 1


def cmd_report(args: argparse.Namespace) -> int:
    """Execute report command."""
    logger = setup_logging(args.verbose)

    try:
        config = get_config(args)
    except ValueError as e:
        logger.error(str(e))
        return 1

    if not config.metadata_root:
        logger.error("--metadata-root is required")
        return 1

    try:
        index = ThumbnailIndex.load(config.index_path)
    except IndexUnavailable as e:
        logger.error(str(e))
        return 1

    reporter = Reporter()
    if args.type == 'summary':
        reporter.report_summary(index, config.thumbnail_folder)
    elif args.type == 'detailed':
        reporter.report_detailed(index)

    return 0


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser."""
    parser = argparse.ArgumentParser(
        prog='thumbcache',
        description='Thumbnail cache builder for content repositories',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Commands:
  Build once:  thumbcache build --root ./content --delay 0
  Service:     thumbcache run --root ./content --reindex-interval 60
  Report:      thumbcache report --metadata-root ./content/.thumbcache
"""
    )

    parser.add_argument('-v', '--verbose', action='store_true', help='Enable verbose logging')

    subparsers = parser.add_subparsers(dest='command', help='Command to run')

    build_parser = subparsers.add_parser('build', help='Run one conversion pass and save the index')
    build_parser.add_argument('-q', '--quiet', action='store_true', help='Suppress the pass summary')
    build_parser.add_argument('-v', '--verbose', action='store_true', help='Enable verbose logging')
    add_repository_arguments(build_parser)

    run_parser = subparsers.add_parser('run', help='Run the conversion service until interrupted')
    run_parser.add_argument('--reindex-interval', type=float, metavar='SECONDS', default=0,
                            help='Reindex the repository every N seconds (default: never)')
    run_parser.add_argument('-v', '--verbose', action='store_true', help='Enable verbose logging')
    add_repository_arguments(run_parser)

    report_parser = subparsers.add_parser('report', help='Report on a thumbnail index')
    report_parser.add_argument('--metadata-root', metavar='PATH',
                               help='Folder holding thumbnail.index')
    report_parser.add_argument('-t', '--type', choices=['summary', 'detailed'],
                               default='summary', help='Report type')
    report_parser.add_argument('-v', '--verbose', action='store_true', help='Enable verbose logging')

    return parser


def main(args: Optional[List[str]] = None) -> int:
    """Main entry point."""
    parser = create_parser()
    parsed_args = parser.parse_args(args)

    if not parsed_args.command:
        parser.print_help()
        return 1

    if parsed_args.command == 'build':
        return cmd_build(parsed_args)
    elif parsed_args.command == 'run':
        return cmd_run(parsed_args)
    elif parsed_args.command == 'report':
        return cmd_report(parsed_args)

    return 1
