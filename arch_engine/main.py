"""
Architecture Analysis Engine - command-line entry point.

Loads a JSON architecture snapshot, runs one analyzer and prints the
report as JSON:

    python -m arch_engine dependencies snapshot.json --system-id sys-1
    python -m arch_engine cloud-costs snapshot.json --offline
"""

import argparse
import asyncio
import json
import logging
import sys
from typing import Any, Callable, Optional, Sequence

import structlog
from pydantic import BaseModel, ValidationError

from arch_engine.analysis import (
    SystemNotFoundError,
    analyze_dependencies,
    analyze_gaps,
    build_risk_register,
    calculate_kpis,
    estimate_cloud_costs,
    estimate_costs,
    evaluate_compliance,
    generate_portfolio_dashboard,
    model_performance,
    recommend_technology_stack,
    score_risks,
)
from arch_engine.config import Settings, get_settings
from arch_engine.pricing import CloudPricingResolver
from arch_engine.snapshot import Snapshot, SnapshotError, load_snapshot

EXIT_USAGE_ERROR = 2


def configure_logging(settings: Optional[Settings] = None) -> None:
    """Configure stdlib logging and the structlog processor chain."""
    settings = settings or get_settings()
    logging.basicConfig(
        level=getattr(logging, settings.log_level.upper(), logging.INFO),
        stream=sys.stderr,
        format="%(message)s",
    )

    renderer = (
        structlog.processors.JSONRenderer()
        if settings.log_json
        else structlog.dev.ConsoleRenderer()
    )
    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            renderer,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


logger = structlog.get_logger()


# =============================================================================
# Report runners
# =============================================================================


def _dependencies(snapshot: Snapshot, args: argparse.Namespace, settings: Settings) -> BaseModel:
    if not args.system_id:
        raise SnapshotError("--system-id is required for the dependencies report")
    return analyze_dependencies(args.system_id, snapshot.elements, snapshot.relationships)


def _gaps(snapshot: Snapshot, args: argparse.Namespace, settings: Settings) -> BaseModel:
    to_be = snapshot.require("to_be")
    return analyze_gaps(
        snapshot.elements,
        to_be.elements,
        snapshot.relationships,
        to_be.relationships,
        settings=settings,
    )


def _risk(snapshot: Snapshot, args: argparse.Namespace, settings: Settings) -> BaseModel:
    return score_risks(snapshot.elements)


def _register(snapshot: Snapshot, args: argparse.Namespace, settings: Settings) -> BaseModel:
    risks = snapshot.risks if snapshot.risks is not None else score_risks(snapshot.elements).risks
    return build_risk_register(risks, snapshot.mitigations)


def _costs(snapshot: Snapshot, args: argparse.Namespace, settings: Settings) -> BaseModel:
    return estimate_costs(snapshot.elements)


def _cloud_costs(snapshot: Snapshot, args: argparse.Namespace, settings: Settings) -> BaseModel:
    request = snapshot.require("cloud_request")
    adapter = CloudPricingResolver(settings=settings)
    return asyncio.run(
        estimate_cloud_costs(request, snapshot.elements, adapter=adapter, settings=settings)
    )


def _performance(snapshot: Snapshot, args: argparse.Namespace, settings: Settings) -> BaseModel:
    workload = snapshot.require("workload")
    return model_performance(workload, snapshot.elements, snapshot.relationships, settings=settings)


def _compliance(snapshot: Snapshot, args: argparse.Namespace, settings: Settings) -> list[BaseModel]:
    return evaluate_compliance(
        args.framework or ["SOC2"],
        snapshot.coverage,
        custom_controls=snapshot.custom_controls,
    )


def _stack(snapshot: Snapshot, args: argparse.Namespace, settings: Settings) -> BaseModel:
    return recommend_technology_stack(snapshot.requirements, snapshot.existing_technologies)


def _dashboard(snapshot: Snapshot, args: argparse.Namespace, settings: Settings) -> BaseModel:
    return generate_portfolio_dashboard(
        snapshot.elements,
        snapshot.relationships,
        baseline=snapshot.baseline,
        settings=settings,
    )


def _kpis(snapshot: Snapshot, args: argparse.Namespace, settings: Settings) -> BaseModel:
    return calculate_kpis(snapshot.elements, snapshot.relationships, baseline=snapshot.baseline)


REPORTS: dict[str, Callable[[Snapshot, argparse.Namespace, Settings], Any]] = {
    "dependencies": _dependencies,
    "gaps": _gaps,
    "risk": _risk,
    "register": _register,
    "costs": _costs,
    "cloud-costs": _cloud_costs,
    "performance": _performance,
    "compliance": _compliance,
    "stack": _stack,
    "dashboard": _dashboard,
    "kpis": _kpis,
}


def render(report: Any) -> str:
    """Serialize a report (or list of reports) to camelCase JSON."""
    if isinstance(report, list):
        return json.dumps([r.model_dump(mode="json", by_alias=True) for r in report], indent=2)
    return report.model_dump_json(by_alias=True, indent=2)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="arch_engine",
        description="Run an architecture analysis over a JSON snapshot.",
    )
    parser.add_argument("report", choices=sorted(REPORTS), help="Report to produce")
    parser.add_argument("snapshot", help="Path to the JSON snapshot")
    parser.add_argument("--system-id", help="System to analyze (dependencies report)")
    parser.add_argument(
        "--framework",
        action="append",
        help="Compliance framework id (SOC2, HIPAA, GDPR, CUSTOM); repeatable",
    )
    parser.add_argument(
        "--offline",
        action="store_true",
        help="Skip live price-list lookups (static pricing only)",
    )
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    settings = get_settings()
    if args.offline:
        settings = settings.model_copy(update={"pricing_live_enabled": False})
    configure_logging(settings)

    try:
        snapshot = load_snapshot(args.snapshot)
        report = REPORTS[args.report](snapshot, args, settings)
    except (SystemNotFoundError, SnapshotError, ValidationError) as e:
        logger.error("report_failed", report=args.report, error=str(e))
        print(f"error: {e}", file=sys.stderr)
        return EXIT_USAGE_ERROR

    print(render(report))
    return 0


if __name__ == "__main__":
    sys.exit(main())
