"""
esmapper CLI — Command-Line Interface
=====================================

Infer index definitions from sample data and print them as JSON.

Usage:
    esmapper doc product.json --index shop --type product
    esmapper jsonl "data/**/*.jsonl" --index shop --type product --sample 500
    esmapper sample legacy-products --index shop --type product --hosts http://es1:9200
    esmapper doc product.json --index shop --type product --config fields.json --dynamic false
"""

import argparse
import json
import logging
import sys
from typing import List, Optional

from .exceptions import MapperError


def get_hosts(args) -> List[str]:
    """Extract hosts from args."""
    if args.hosts:
        return args.hosts.split(",")
    return ["http://localhost:9200"]


def load_field_config(args) -> Optional[list]:
    """Read per-field overrides from --config."""
    if not args.config:
        return None
    with open(args.config, 'r', encoding='utf-8') as f:
        return json.load(f)


def print_index(mapper, args):
    """Apply --dynamic and print the index body."""
    if args.dynamic is not None:
        status = args.dynamic == "true"
        mapper.enable_index_level_dynamic_mappings(args.index, status)
        mapper.dynamic_mapping(args.index, status)

    record = mapper.get_index(args.index)
    print(json.dumps(record.to_body(), indent=2))


def cmd_doc(args):
    """Infer a mapping from a single JSON document."""
    from .core import Mapper

    with open(args.file, 'r', encoding='utf-8') as f:
        document = json.load(f)

    with Mapper() as mapper:
        mapper.map_from_doc(args.index, args.type, document, load_field_config(args))
        print_index(mapper, args)


def cmd_collection(args, source):
    """Infer a mapping from a sampled collection."""
    from .core import Mapper
    from .sources import CollectionConfig

    config = CollectionConfig(
        source=source,
        sample_size=args.sample,
        field_config=load_field_config(args)
    )

    with Mapper() as mapper:
        task = mapper.map_from_collection(args.index, args.type, config)
        task.result(timeout=args.timeout)
        print_index(mapper, args)


def cmd_jsonl(args):
    """Infer a mapping from JSONL files."""
    from .sources import JsonlSource

    with JsonlSource(args.pattern) as source:
        cmd_collection(args, source)
    if source.errors:
        print(f"Skipped {source.errors} malformed line(s)", file=sys.stderr)


def cmd_sample(args):
    """Infer a mapping from documents in an existing Elasticsearch index."""
    from .sources import ElasticsearchSource

    with ElasticsearchSource(
        args.source_index,
        hosts=get_hosts(args),
        api_key=args.api_key
    ) as source:
        cmd_collection(args, source)


def add_target_arguments(parser):
    """Arguments shared by all mapping commands."""
    parser.add_argument("--index", required=True, help="Target index name")
    parser.add_argument("--type", required=True, help="Type name for the mapping")
    parser.add_argument("--config", help="JSON file with per-field overrides")
    parser.add_argument(
        "--dynamic",
        choices=["true", "false"],
        help="Enable index-level dynamic mappings with this status"
    )


def main(argv: Optional[List[str]] = None):
    """Main entry point."""
    parser = argparse.ArgumentParser(
        prog="esmapper",
        description="esmapper — Elasticsearch Mapping Registry"
    )

    # Global options
    parser.add_argument(
        "--hosts",
        help="Elasticsearch hosts (comma-separated)",
        default=None
    )
    parser.add_argument(
        "--api-key",
        dest="api_key",
        help="Elasticsearch API key",
        default=None
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Log progress to stderr")

    subparsers = parser.add_subparsers(dest="command", help="Commands")

    # doc command
    doc_parser = subparsers.add_parser("doc", help="Map a single JSON document")
    doc_parser.add_argument("file", help="JSON document")
    add_target_arguments(doc_parser)

    # jsonl command
    jsonl_parser = subparsers.add_parser("jsonl", help="Map sampled JSONL files")
    jsonl_parser.add_argument("pattern", help="Glob pattern for JSONL files")
    add_target_arguments(jsonl_parser)
    jsonl_parser.add_argument("--sample", type=int, default=100, help="Documents to sample")
    jsonl_parser.add_argument("--timeout", type=float, default=None, help="Seconds to wait")

    # sample command
    sample_parser = subparsers.add_parser("sample", help="Map documents from an Elasticsearch index")
    sample_parser.add_argument("source_index", help="Index to sample from")
    add_target_arguments(sample_parser)
    sample_parser.add_argument("--sample", type=int, default=100, help="Documents to sample")
    sample_parser.add_argument("--timeout", type=float, default=None, help="Seconds to wait")

    # Parse and dispatch
    args = parser.parse_args(argv)

    if args.verbose:
        logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")

    commands = {
        "doc": cmd_doc,
        "jsonl": cmd_jsonl,
        "sample": cmd_sample,
    }
    command = commands.get(args.command)
    if command is None:
        parser.print_help()
        return 0

    try:
        command(args)
    except MapperError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
