import sys
import os
import json
import argparse
import logging
import yaml
import requests

from pool_deriver.utils.config import load_config, get_config
from pool_deriver.db.connection import connect_to_mongo, close_mongo_connection
from pool_deriver.db import collections as db
from pool_deriver.api.api import create_api_server
from pool_deriver.client import DeriverClient
from pool_deriver.core.errors import DerivationError
from pool_deriver.core.event_slot import MongoEventSlot
from pool_deriver.core.run import ConfigurationRun

logger = logging.getLogger(__name__)

def setup_logging(config: dict) -> None:
    """Configure the root logger from the `logging` config section."""
    logging_config = config.get('logging', {})
    log_level_name = logging_config.get('level', 'INFO').upper()
    log_file = logging_config.get('file')

    root = logging.getLogger()
    root.setLevel(getattr(logging, log_level_name, logging.INFO))

    formatter = logging.Formatter('%(asctime)s - %(name)s - %(levelname)s - %(message)s')

    # Console handler on stderr so `derive` output on stdout stays clean
    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setFormatter(formatter)
    root.addHandler(console_handler)

    if log_file:
        log_dir = os.path.dirname(log_file)
        if log_dir and not os.path.exists(log_dir):
            os.makedirs(log_dir)

        file_handler = logging.FileHandler(log_file)
        file_handler.setFormatter(formatter)
        root.addHandler(file_handler)

def dump_attributes(attributes: dict, fmt: str) -> str:
    if fmt == 'yaml':
        return yaml.safe_dump(attributes, default_flow_style=False, sort_keys=False)
    return json.dumps(attributes, indent=2)

def cmd_derive(args) -> int:
    connect_to_mongo()
    try:
        attributes = ConfigurationRun(MongoEventSlot()).execute()
    except DerivationError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    except ConnectionError as e:
        print(f"Error: inventory unavailable: {e}", file=sys.stderr)
        return 1
    finally:
        close_mongo_connection()

    output = dump_attributes(attributes, args.format)
    if args.output:
        with open(args.output, 'w') as f:
            f.write(output)
        logger.info(f"Wrote derived configuration to {args.output}")
    else:
        print(output)
    return 0

def cmd_serve(args) -> int:
    config = get_config()
    api_config = config.get('api', {})
    host = api_config.get('host', '0.0.0.0')
    port = api_config.get('port', 8081)

    connect_to_mongo()
    try:
        db.ensure_indexes()
    except ConnectionError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    app = create_api_server(MongoEventSlot())
    print(f"Starting pool deriver API on {host}:{port}")
    try:
        app.run(host=host, port=port, threaded=True)
    finally:
        close_mongo_connection()
    return 0

def _client(args) -> DeriverClient:
    api_config = get_config().get('api', {})
    base_url = args.url or f"http://{api_config.get('host', '127.0.0.1')}:{api_config.get('port', 8081)}"
    return DeriverClient(base_url, timeout=api_config.get('timeout', 10))

def cmd_attach(args) -> int:
    try:
        _client(args).attach(args.pool, args.uuid, args.ip, args.port, args.vhost_path)
    except requests.RequestException:
        return 1
    print(f"Queued attach of {args.uuid} to pool {args.pool}")
    return 0

def cmd_detach(args) -> int:
    try:
        _client(args).detach(args.pool, args.uuid)
    except requests.RequestException:
        return 1
    print(f"Queued detach of {args.uuid} from pool {args.pool}")
    return 0

def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Derive HAProxy pools and ACLs from the application server inventory.")
    parser.add_argument('--config', type=str, default='config.yaml', help='Path to the configuration file.')
    subparsers = parser.add_subparsers(dest='command', required=True)

    derive = subparsers.add_parser('derive', help='Run a derivation and print the HAProxy attributes.')
    derive.add_argument('--output', type=str, help='Write attributes to this file instead of stdout.')
    derive.add_argument('--format', choices=['json', 'yaml'], default='json')
    derive.set_defaults(func=cmd_derive)

    serve = subparsers.add_parser('serve', help='Run the inventory and event API.')
    serve.set_defaults(func=cmd_serve)

    attach = subparsers.add_parser('attach', help='Notify the deriver that a server joined a pool.')
    attach.add_argument('--url', type=str, help='Base URL of the deriver API.')
    attach.add_argument('--pool', required=True)
    attach.add_argument('--uuid', required=True)
    attach.add_argument('--ip', required=True)
    attach.add_argument('--port', type=int, required=True)
    attach.add_argument('--vhost-path', dest='vhost_path')
    attach.set_defaults(func=cmd_attach)

    detach = subparsers.add_parser('detach', help='Notify the deriver that a server left a pool.')
    detach.add_argument('--url', type=str, help='Base URL of the deriver API.')
    detach.add_argument('--pool', required=True)
    detach.add_argument('--uuid', required=True)
    detach.set_defaults(func=cmd_detach)

    return parser

def main(argv=None) -> int:
    args = build_parser().parse_args(argv)

    if not os.path.exists(args.config):
        print(f"Error: Configuration file not found at {args.config}", file=sys.stderr)
        return 1

    load_config(args.config)
    setup_logging(get_config())
    return args.func(args)

if __name__ == '__main__':
    sys.exit(main())
