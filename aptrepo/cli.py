#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Command line entry point

    aptrepo update PACKAGES_DIR     add packages and regenerate metadata
    aptrepo publish                 mirror the repository to object storage
    aptrepo verify                  check Release files against the tree

Settings come from the environment (see aptrepo.config).
"""

import sys
import argparse
import logging

from typing import List, Optional

from aptrepo.config import PublishConfig, RepositoryConfig
from aptrepo.exceptions import RepositoryError
from aptrepo.publish import Publisher
from aptrepo.repo import Repository
from aptrepo.transport import URIMismatchError, get_transport

logger = logging.getLogger('aptrepo')


def configure_logging(verbose: bool = False) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format='[%(levelname)s] %(message)s',
    )


def _update(args: argparse.Namespace) -> None:
    config = RepositoryConfig.from_environ(root=args.repo_dir)
    repository = Repository(config)

    repository.update(args.packages_dir)

    logger.info('Repository location: %s', config.root)


def _publish(args: argparse.Namespace) -> None:
    config = RepositoryConfig.from_environ(root=args.repo_dir)
    publish_config = PublishConfig.from_environ(uri=args.target)

    Publisher(config.root, get_transport(publish_config), config.lock_timeout).publish()


def _verify(args: argparse.Namespace) -> None:
    config = RepositoryConfig.from_environ(root=args.repo_dir)

    Repository(config).verify()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='aptrepo',
        description='Assemble, sign and publish an APT repository',
    )
    parser.add_argument('-v', '--verbose', action='store_true', help='enable debug logging')

    commands = parser.add_subparsers(dest='command', metavar='COMMAND')
    commands.required = True

    update = commands.add_parser('update', help='add packages and regenerate repository metadata')
    update.add_argument('packages_dir', metavar='PACKAGES_DIR', help='directory of .deb files to add')
    update.add_argument('--repo-dir', help='repository root (default: $REPO_DIR or ./repo)')
    update.set_defaults(handler=_update)

    publish = commands.add_parser('publish', help='mirror the repository to object storage')
    publish.add_argument('--repo-dir', help='repository root (default: $REPO_DIR or ./repo)')
    publish.add_argument('--target', help='publish URI (default: $PUBLISH_URI or the R2 bucket)')
    publish.set_defaults(handler=_publish)

    verify = commands.add_parser('verify', help='check Release checksums against the repository')
    verify.add_argument('--repo-dir', help='repository root (default: $REPO_DIR or ./repo)')
    verify.set_defaults(handler=_verify)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """
    Main function

    :return int: The exit status
    """
    args = build_parser().parse_args(argv)

    configure_logging(args.verbose)

    try:
        args.handler(args)
    except (RepositoryError, URIMismatchError) as ex:
        logger.error('%s', ex)
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
