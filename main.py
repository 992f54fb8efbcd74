"""
Main entry point for LeadVerify.
Supports modes:
  --counties: List supported counties (add --include-coming for the rest)
  --by-state: List every county grouped by state
  --resolve: Map --city/--state/--zip to a county id
  --validate FILE: Validate and score a JSON array of leads
  --batch FILE: Score a JSON array of known property ids
  --search: Search one county by --address or --owner
  --details COUNTY PROPERTY_ID: Fetch one property record
  --documents-report COUNTY PROPERTY_ID: Analyze a property's recorded documents
"""
import argparse
import asyncio
import json
import sys
from datetime import date
from pathlib import Path
from typing import Any

from loguru import logger
from pydantic import BaseModel

from leadverify.config import load_settings
from leadverify.errors import LeadVerifyError
from leadverify.jurisdictions.resolver import resolve
from leadverify.services.lead_pipeline import LeadPipeline
from leadverify.utils.logging_config import configure_logger


def _dump(payload: Any) -> None:
    """Write models (or lists/dicts of them) to stdout as JSON."""
    if isinstance(payload, BaseModel):
        data = payload.model_dump(mode="json")
    elif isinstance(payload, list):
        data = [p.model_dump(mode="json") if isinstance(p, BaseModel) else p for p in payload]
    elif isinstance(payload, dict):
        data = {
            k: [p.model_dump(mode="json") for p in v] if isinstance(v, list) else v
            for k, v in payload.items()
        }
    else:
        data = payload
    print(json.dumps(data, indent=2, default=str))


def _load_json_array(path: str) -> Any:
    try:
        return json.loads(Path(path).read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as e:
        logger.error(f"Could not read {path}: {e}")
        sys.exit(1)


def _parse_date(value: str | None) -> date | None:
    if not value:
        return None
    try:
        return date.fromisoformat(value)
    except ValueError:
        logger.error(f"Invalid date format: {value}. Use YYYY-MM-DD.")
        sys.exit(1)


async def handle_validate(pipeline: LeadPipeline, path: str, is_pro: bool, include_documents: bool, batch_size: int | None):
    leads = _load_json_array(path)
    results = await pipeline.validate_leads(
        leads, is_pro=is_pro, include_documents=include_documents, batch_size=batch_size
    )
    failed = sum(1 for r in results if r.validation.error)
    logger.success(f"Validated {len(results)} leads ({failed} with errors)")
    _dump(results)


async def handle_batch(pipeline: LeadPipeline, path: str, is_pro: bool, batch_size: int | None):
    refs = _load_json_array(path)
    results = await pipeline.batch_validate_properties(refs, is_pro=is_pro, batch_size=batch_size)
    logger.success(f"Scored {len(results)} properties")
    _dump(results)


def main():
    parser = argparse.ArgumentParser(description="LeadVerify property lead validation")
    group = parser.add_mutually_exclusive_group(required=True)
    group.add_argument("--counties", action="store_true", help="List supported counties")
    group.add_argument("--by-state", action="store_true", help="List all counties grouped by state")
    group.add_argument("--resolve", action="store_true", help="Resolve --city/--state/--zip to a county")
    group.add_argument("--validate", metavar="FILE", help="JSON array of leads to validate")
    group.add_argument("--batch", metavar="FILE", help="JSON array of {id, county, accountNumber} to score")
    group.add_argument("--search", action="store_true", help="Search by --address or --owner")
    group.add_argument("--details", nargs=2, metavar=("COUNTY", "PROPERTY_ID"), help="Fetch one property")
    group.add_argument("--documents-report", nargs=2, metavar=("COUNTY", "PROPERTY_ID"),
                       help="Analyze recorded documents for one property")

    parser.add_argument("--address", default=None)
    parser.add_argument("--city", default=None)
    parser.add_argument("--state", default=None)
    parser.add_argument("--zip", dest="zip_code", default=None)
    parser.add_argument("--owner", default=None)
    parser.add_argument("--county", default=None, help="County id for --search (default: resolve from address)")
    parser.add_argument("--pro", action="store_true", help="Treat the caller as a Pro subscriber")
    parser.add_argument("--pro-override", action="store_true",
                        help="Bypass the Pro check (non-production only, needs LEADVERIFY_ALLOW_PRO_OVERRIDE)")
    parser.add_argument("--documents", action="store_true", help="Blend recorded-document analysis into scores")
    parser.add_argument("--include-coming", action="store_true", help="Include coming-soon counties in --counties")
    parser.add_argument("--batch-size", type=int, default=None, help="Leads per concurrent group")
    parser.add_argument("--start-date", type=str, default=None, help="Earliest recording date (YYYY-MM-DD)")
    parser.add_argument("--end-date", type=str, default=None, help="Latest recording date (YYYY-MM-DD)")
    parser.add_argument("--refresh", action="store_true", help="Ignore cached document analysis")

    args = parser.parse_args()

    settings = load_settings()
    configure_logger(level=settings.log_level, debug_file=settings.log_debug_file, json_logs=settings.log_json)
    is_pro = settings.resolve_pro(args.pro, override=args.pro_override)

    if args.resolve:
        _dump({"county": resolve(args.address, args.city, args.state, args.zip_code)})
        return

    pipeline = LeadPipeline.from_settings(settings)
    try:
        if args.counties:
            _dump(pipeline.get_counties(include_coming=args.include_coming))
        elif args.by_state:
            _dump(pipeline.get_counties_by_state())
        elif args.validate:
            asyncio.run(handle_validate(pipeline, args.validate, is_pro, args.documents, args.batch_size))
        elif args.batch:
            asyncio.run(handle_batch(pipeline, args.batch, is_pro, args.batch_size))
        elif args.search:
            _dump(asyncio.run(pipeline.search_properties(
                address=args.address,
                city=args.city,
                state=args.state,
                zip_code=args.zip_code,
                owner_name=args.owner,
                jurisdiction_id=args.county,
                is_pro=is_pro,
            )))
        elif args.details:
            county, property_id = args.details
            _dump(asyncio.run(pipeline.get_property_details(
                jurisdiction_id=county, property_id=property_id, is_pro=is_pro
            )))
        elif args.documents_report:
            county, property_id = args.documents_report
            _dump(asyncio.run(pipeline.analyze_property_documents(
                property_id,
                county,
                start_date=_parse_date(args.start_date),
                end_date=_parse_date(args.end_date),
                force_refresh=args.refresh,
            )))
    except LeadVerifyError as e:
        logger.error(f"{e}")
        sys.exit(2)


if __name__ == "__main__":
    main()
