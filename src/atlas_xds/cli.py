"""CLI do Atlas XDS: geração, validação e inspeção de recursos xDS."""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional

from atlas_xds.core.config.errors import ConfigError
from atlas_xds.core.config.loader import load_config
from atlas_xds.core.errors import Finding
from atlas_xds.core.exceptions import XdsException
from atlas_xds.core.validation.distribution import CHECK_ENDPOINTS, CHECK_FIELDS, CHECK_WEIGHTS
from atlas_xds.io.nodes import check_names, health_check, sort_build
from atlas_xds.report.summary import (
    InvalidNodeFileError,
    NodeNotFoundError,
    format_table,
    inspect_node,
    list_nodes,
    priority_counts,
    weights_frame,
    weights_summary,
)
from atlas_xds.runner import COMMAND_GENERATE, COMMAND_VALIDATE, RunSummary, pipeline_config, run_pipeline


DEFAULT_NODES_DIR = "nodes-and-resources"


def _print_findings(findings: Iterable[Finding]) -> None:
    for f in findings:
        prefix = "ERROR" if f.is_error else "WARNING"
        print(f"{prefix}: [{f.label()}] {f.message}", file=sys.stderr)


def _print_warnings(messages: Iterable[str]) -> None:
    for message in messages:
        print(f"WARNING: {message}", file=sys.stderr)


def _print_summary(summary: RunSummary) -> None:
    _print_findings(summary.errors + summary.warnings)
    print(
        json.dumps(
            {
                "run_id": summary.run_id,
                "success": summary.success,
                "units": summary.units,
                "rendered": summary.rendered,
                "errors": summary.error_count,
                "warnings": summary.warning_count,
            },
            sort_keys=True,
        )
    )


def _config(args: argparse.Namespace) -> Dict[str, Any]:
    return load_config(defaults_path=args.config, local_path=None)


# -----------------------------
# Handlers
# -----------------------------
def _cmd_generate(args: argparse.Namespace) -> int:
    config = pipeline_config(
        _config(args),
        input_dir=Path(args.input_dir),
        output_dir=Path(args.out),
        nodes_dir=Path(args.nodes_dir) if args.nodes_dir else None,
        registry=Path(args.registry) if args.registry else None,
    )
    summary = run_pipeline(config, command=COMMAND_GENERATE, manifest_dir=Path(args.out))
    _print_summary(summary)
    return 0 if summary.success else 1


def _cmd_generate_target(args: argparse.Namespace) -> int:
    config = pipeline_config(
        _config(args),
        input_dir=Path(args.input_dir),
        output_dir=Path(args.out),
        registry=Path(args.registry) if args.registry else None,
        target={"role": args.role, "service": args.service, "region": args.region},
    )
    summary = run_pipeline(config, command=COMMAND_GENERATE)
    _print_summary(summary)
    return 0 if summary.success else 1


def _selected_checks(args: argparse.Namespace) -> Optional[List[str]]:
    if args.weight_only:
        return [CHECK_WEIGHTS]
    if args.fields_only:
        return [CHECK_FIELDS]
    if args.endpoints_only:
        return [CHECK_ENDPOINTS]
    return None


def _cmd_validate(args: argparse.Namespace) -> int:
    config = pipeline_config(
        _config(args),
        input_dir=Path(args.input_dir),
        registry=Path(args.registry) if args.registry else None,
        checks=_selected_checks(args),
    )
    summary = run_pipeline(config, command=COMMAND_VALIDATE)
    _print_summary(summary)
    return 0 if summary.success else 1


def _cmd_check_names(args: argparse.Namespace) -> int:
    if not Path(args.build_dir).is_dir():
        print(f"ERROR: Build directory '{args.build_dir}' does not exist", file=sys.stderr)
        return 1
    uniqueness, report = check_names(Path(args.build_dir), _config(args))
    _print_findings(report.findings)
    print(json.dumps({"checked": uniqueness.checked, "duplicates": uniqueness.names()}, sort_keys=True))
    return 0 if report.is_valid else 1


def _cmd_sort(args: argparse.Namespace) -> int:
    if not Path(args.build_dir).is_dir():
        print(f"ERROR: Build directory '{args.build_dir}' does not exist", file=sys.stderr)
        return 1
    result = sort_build(Path(args.build_dir), Path(args.out), _config(args))
    _print_warnings(result.warnings)
    print(json.dumps({"nodes": len(result.nodes), "services": result.resources, "output_dir": args.out}, sort_keys=True))
    if not result.nodes:
        print("ERROR: No node files were created", file=sys.stderr)
        return 1
    return 0


def _cmd_health_check(args: argparse.Namespace) -> int:
    health = health_check(
        Path(args.nodes_dir),
        build_dir=Path(args.build_dir) if args.build_dir else None,
        quick=args.quick,
        config=_config(args),
    )
    _print_findings(health.report.findings)
    print(json.dumps({"healthy": health.healthy, "stats": health.stats}, sort_keys=True))
    return 0 if health.healthy else 1


def _cmd_weights_summary(args: argparse.Namespace) -> int:
    frame, warnings = weights_frame(Path(args.nodes_dir), _config(args))
    _print_warnings(warnings)
    summary = weights_summary(frame, role=args.role, region=args.region, problems_only=args.problems_only)
    if summary.empty:
        print("No services found matching criteria.")
        return 0

    print("Summary by Priority:")
    for priority, count in priority_counts(frame, role=args.role, region=args.region).items():
        print(f"Priority {priority}: {count} services")
    print("")
    print(format_table(summary[["service", "distribution", "issues"]]))
    print("")
    print(f"Issues Found: {int(summary['has_issues'].sum())}")
    return 0


def _cmd_list_nodes(args: argparse.Namespace) -> int:
    df, warnings = list_nodes(
        Path(args.nodes_dir),
        role=args.role,
        region=args.region,
        sort_by=args.sort_by,
        config=_config(args),
    )
    _print_warnings(warnings)
    if df.empty:
        print("No nodes found matching the specified criteria.")
        return 0

    if args.format == "json":
        print(df.to_json(orient="records", indent=2))
    elif args.format == "simple":
        print("\n".join(df["node"]))
    else:
        print(format_table(df))
    return 0


def _cmd_inspect_node(args: argparse.Namespace) -> int:
    info = inspect_node(Path(args.nodes_dir), args.node, _config(args))

    if args.format == "json":
        print(json.dumps(info, indent=2))
        return 0
    if args.format == "simple":
        for service in info["services"]:
            print(service["name"])
        return 0

    print(f"Node: {info['node']}")
    print(f"Role: {info['role']}")
    print(f"Region: {info['region']}")
    print(f"Services: {len(info['services'])}")
    print("")
    if not info["services"]:
        print("  No services configured for this node")
    for service in info["services"]:
        cds = "present" if service["cds_present"] else "missing"
        eds = "present" if service["eds_present"] else "missing"
        print(f"  {service['name']}  cds={cds}  eds={eds}")
    print("")
    print(f"Node config: {info['node_config_path']}")
    print(f"Resources: {info['resources_path']}")
    return 0


# -----------------------------
# Parser
# -----------------------------
def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="atlas-xds", description="Hierarchical xDS resource generator")
    parser.add_argument("--config", default=None, help="tool configuration file (YAML/JSON)")
    sub = parser.add_subparsers(dest="command", required=True)

    p = sub.add_parser("generate", help="generate CDS/EDS documents for every profile")
    p.add_argument("--in", dest="input_dir", required=True)
    p.add_argument("--out", required=True)
    p.add_argument("--registry", default=None)
    p.add_argument("--nodes-dir", default=None, help="also write the node-centric view here")
    p.set_defaults(handler=_cmd_generate)

    p = sub.add_parser("generate-target", help="generate a single (role, service, region)")
    p.add_argument("--in", dest="input_dir", required=True)
    p.add_argument("--role", required=True)
    p.add_argument("--service", required=True)
    p.add_argument("--region", required=True)
    p.add_argument("--out", required=True)
    p.add_argument("--registry", default=None)
    p.set_defaults(handler=_cmd_generate_target)

    p = sub.add_parser("validate", help="validate resolved configurations without rendering")
    p.add_argument("input_dir")
    p.add_argument("--registry", default=None)
    only = p.add_mutually_exclusive_group()
    only.add_argument("--weight-only", action="store_true")
    only.add_argument("--fields-only", action="store_true")
    only.add_argument("--endpoints-only", action="store_true")
    p.set_defaults(handler=_cmd_validate)

    p = sub.add_parser("check-names", help="check name uniqueness in a build directory")
    p.add_argument("build_dir")
    p.set_defaults(handler=_cmd_check_names)

    p = sub.add_parser("sort", help="reorganize a build directory by node")
    p.add_argument("--build-dir", required=True)
    p.add_argument("--out", default=DEFAULT_NODES_DIR)
    p.set_defaults(handler=_cmd_sort)

    p = sub.add_parser("health-check", help="check a node-centric output directory")
    p.add_argument("--nodes-dir", default=DEFAULT_NODES_DIR)
    p.add_argument("--build-dir", default=None)
    p.add_argument("--quick", action="store_true", help="structure only")
    p.set_defaults(handler=_cmd_health_check)

    p = sub.add_parser("weights-summary", help="weight sums per priority for each service")
    p.add_argument("--nodes-dir", default=DEFAULT_NODES_DIR)
    p.add_argument("--role", default=None)
    p.add_argument("--region", default=None)
    p.add_argument("--problems-only", action="store_true")
    p.set_defaults(handler=_cmd_weights_summary)

    p = sub.add_parser("list-nodes", help="list nodes with their service counts")
    p.add_argument("--nodes-dir", default=DEFAULT_NODES_DIR)
    p.add_argument("--role", default=None)
    p.add_argument("--region", default=None)
    p.add_argument("--sort-by", choices=["name", "role", "region", "services"], default="name")
    p.add_argument("--format", choices=["table", "json", "simple"], default="table")
    p.set_defaults(handler=_cmd_list_nodes)

    p = sub.add_parser("inspect-node", help="show the services of one node")
    p.add_argument("node")
    p.add_argument("--nodes-dir", default=DEFAULT_NODES_DIR)
    p.add_argument("--format", choices=["detailed", "json", "simple"], default="detailed")
    p.set_defaults(handler=_cmd_inspect_node)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    try:
        return int(args.handler(args))
    except (ConfigError, XdsException, NodeNotFoundError, InvalidNodeFileError, OSError) as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
