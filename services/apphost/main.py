#!/usr/bin/env python3
"""Compose the application topology and write it as a docker compose file."""

from __future__ import annotations

import argparse
import logging
import sys

import docker
import docker.errors

from services.common.core.docker_client import create_docker_client

from .composition import build_topology
from .config import AppHostConfig
from .core.logging_config import setup_logging
from .renderer import write_compose
from .topology import TopologyError

logger = logging.getLogger("apphost.main")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Compose the eShop topology, including locally built store images",
    )
    parser.add_argument(
        "--output",
        "-o",
        default="-",
        help="Compose file to write ('-' for stdout)",
    )
    parser.add_argument(
        "--suffix",
        default=None,
        help="Tag suffix marking store images (default: STORE_TAG_SUFFIX)",
    )
    parser.add_argument(
        "--no-discovery",
        action="store_true",
        help="Skip scanning local images for store services",
    )
    return parser


def _connect(config: AppHostConfig) -> docker.DockerClient | None:
    try:
        return create_docker_client(config)
    except docker.errors.DockerException as exc:
        logger.warning(f"Docker engine unavailable; store image discovery skipped: {exc}")
        return None


def main(argv: list[str] | None = None) -> int:
    setup_logging()
    args = build_parser().parse_args(argv)
    config = AppHostConfig()

    client = None if args.no_discovery else _connect(config)
    try:
        topology = build_topology(config, client, suffix=args.suffix)
        write_compose(topology, args.output)
    except TopologyError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1
    except OSError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1
    finally:
        if client is not None:
            client.close()

    return 0


if __name__ == "__main__":
    raise SystemExit(main())
